"""CSV export and report sinks.

A sink decides where the report lands and how its location is announced:

    LocalSink            current working directory, plain message
    AzurePipelinesSink   Build.ArtifactStagingDirectory, ##vso logging commands

``select_sink()`` picks one from the environment, so the scan itself never
looks at it.
"""

import csv
import io
import os
import re
from pathlib import Path
from typing import Mapping, Protocol

import click

from advsec_report.config import DEFAULT_REPORT_NAME
from advsec_report.models import ReportRow, column_names

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]")

NO_ALERTS_MESSAGE = "No alerts found."


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------

class ReportSink(Protocol):
    directory: Path

    def write(self, path: Path, data: bytes) -> None: ...

    def announce(self, path: Path) -> None: ...

    def complete(self) -> None: ...


class LocalSink:
    """Write into a local directory (the current one by default)."""

    def __init__(self, directory: str | os.PathLike | None = None) -> None:
        self.directory = Path(directory) if directory else Path.cwd()

    def write(self, path: Path, data: bytes) -> None:
        path.write_bytes(data)

    def announce(self, path: Path) -> None:
        click.echo(f"Report written to '{path}'")

    def complete(self) -> None:
        pass


class AzurePipelinesSink(LocalSink):
    """Write into the pipeline's artifact staging directory."""

    def announce(self, path: Path) -> None:
        click.echo(f"Report written to '{path}'")
        click.echo(f"##vso[task.uploadfile]{path}")

    def complete(self) -> None:
        click.echo("##vso[task.complete result=Succeeded;]DONE")


def select_sink(environ: Mapping[str, str] | None = None) -> ReportSink:
    """Return the AzurePipelinesSink under Azure Pipelines, else a LocalSink."""
    env = os.environ if environ is None else environ
    if env.get("TF_BUILD", "").lower() == "true":
        return AzurePipelinesSink(env.get("BUILD_ARTIFACTSTAGINGDIRECTORY") or None)
    return LocalSink()


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def sanitize_filename(name: str) -> str:
    """Drop every character outside ``[A-Za-z0-9._-]``."""
    cleaned = _UNSAFE_FILENAME_RE.sub("", name)
    # "", "." and ".." are not usable file names
    return cleaned if cleaned.strip(".") else DEFAULT_REPORT_NAME


def render_csv(
    rows: list[ReportRow],
    include_enabled: bool = False,
    hyperlinks: bool = False,
) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=column_names(include_enabled))
    writer.writeheader()
    for row in rows:
        writer.writerow(row.to_record(include_enabled=include_enabled, hyperlinks=hyperlinks))
    return buffer.getvalue().encode("utf-8")


def export_report(
    rows: list[ReportRow],
    report_name: str,
    sink: ReportSink,
    include_enabled: bool = False,
    hyperlinks: bool = False,
) -> Path | None:
    """Write *rows* through *sink*; returns the path, or None when there is nothing to write.

    An existing file at the target path is overwritten.
    """
    if not rows:
        click.echo(NO_ALERTS_MESSAGE)
        return None

    path = sink.directory / sanitize_filename(report_name)
    sink.write(path, render_csv(rows, include_enabled=include_enabled, hyperlinks=hyperlinks))
    sink.announce(path)
    return path
