from advsec_report.cli import cli

cli()
