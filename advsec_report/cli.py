"""CLI entry point: command definitions using Click.

Commands:
    init    Generate a template config file
    scan    Scan branches for Advanced Security alerts and export a CSV report
"""

import functools
import sys

import click

from advsec_report import __version__
from advsec_report.config import Scope, Variant


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _handle_errors(func):
    """Decorator that turns configuration and client errors into exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from advsec_report.client import AdoClientError
        from advsec_report.config import ConfigError

        try:
            return func(*args, **kwargs)
        except ConfigError as exc:
            click.echo(f"Configuration error: {exc}", err=True)
            sys.exit(1)
        except AdoClientError as exc:
            click.echo(f"Azure DevOps error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to an optional YAML configuration file.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="advsec-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Azure DevOps Advanced Security report: alert counts per branch, as CSV."""
    from advsec_report.reports import set_verbose_enabled

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    set_verbose_enabled(verbose)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="advsec-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template advsec-config.yaml file."""
    from advsec_report.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your organization URI, token and scope.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# scan
# ---------------------------------------------------------------------------

@cli.command("scan")
@click.option("--scope", type=click.Choice([s.value for s in Scope]), default=None,
              help="Scan one repository, one project or the whole organization.")
@click.option("--organization", "organization_uri", default=None,
              help="Organization URI, e.g. https://dev.azure.com/contoso.")
@click.option("--project", default=None, help="Project name.")
@click.option("--repository", default=None, help="Repository name.")
@click.option("--token", default=None, help="Personal access token.")
@click.option("--report-name", default=None, help="Output CSV file name.")
@click.option("--variant", type=click.Choice([v.value for v in Variant]), default=None,
              help="'posture' adds the Advanced Security enablement column.")
@click.option("--hyperlinks/--no-hyperlinks", default=None,
              help="Render repository and branch cells as HYPERLINK formulas.")
@click.pass_context
@_handle_errors
def scan_command(ctx: click.Context, **options) -> None:
    """Report alert counts and last commit for every branch in scope."""
    from advsec_report.client import AdoClient
    from advsec_report.config import load
    from advsec_report.export import export_report, select_sink
    from advsec_report.reports import vecho
    from advsec_report.reports.builder import build_report
    from advsec_report.reports.scope import ScanAbortedError

    config = load(ctx.obj["config_path"], **options)
    sink = select_sink()

    vecho(f"Scanning {config.organization_uri} (scope '{config.scope.value}')")

    client = AdoClient(config.organization_uri, config.token, timeout=config.timeout)
    try:
        rows = build_report(client, config)
    except ScanAbortedError as exc:
        # No targets to scan; the run still completes normally
        click.echo(f"ERROR: Scan aborted: {exc}")
        sink.complete()
        return

    export_report(
        rows,
        config.report_name,
        sink,
        include_enabled=config.variant is Variant.POSTURE,
        hyperlinks=config.hyperlinks,
    )
    sink.complete()
