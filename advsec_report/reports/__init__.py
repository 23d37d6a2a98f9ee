"""Scan steps and shared console helpers.

Failures of individual API calls are reported here and never raised:
the caller decides whether to skip, degrade or abort.
"""

import click

from advsec_report.client import ApiResponse

_verbose_enabled = False


def set_verbose_enabled(value: bool) -> None:
    global _verbose_enabled
    _verbose_enabled = bool(value)


def vecho(msg: str) -> None:
    if _verbose_enabled:
        click.echo(f"[verbose] {msg}", err=True)


def echo_failure(what: str, response: ApiResponse) -> None:
    click.echo(
        f"ERROR: {what}: {response.description} (HTTP {response.status_code}) {response.url}"
    )


def echo_exception(what: str, exc: Exception) -> None:
    detail = f"{type(exc).__name__}: {exc}"
    if exc.__cause__ is not None:
        detail += f" <- {type(exc.__cause__).__name__}: {exc.__cause__}"
    click.echo(f"ERROR: {what}: {detail}")
