"""Report row builder: the scan loop over projects, repositories and branches.

    build_report(client, config) -> list[ReportRow]

Everything runs sequentially; one request is in flight at a time.
"""

from advsec_report.client import AdoClient, AdoClientError
from advsec_report.config import Config
from advsec_report.models import ALERTS_DISABLED, CommitInfo, ReportRow
from advsec_report.reports import echo_exception, vecho
from advsec_report.reports.alerts import get_alert_tally
from advsec_report.reports.branches import list_branches
from advsec_report.reports.commits import get_last_commit
from advsec_report.reports.scope import resolve_targets


def build_report(client: AdoClient, config: Config) -> list[ReportRow]:
    """Scan every branch of every resolved target and return one row per branch.

    Raises:
        ScanAbortedError: organization scope and the project listing failed.
    """
    rows: list[ReportRow] = []
    targets = resolve_targets(client, config)
    vecho(f"Resolved {len(targets)} repositories for scope '{config.scope.value}'")

    for target in targets:
        for branch in list_branches(client, target):
            try:
                tally = get_alert_tally(client, target, branch)
            except AdoClientError as exc:
                echo_exception(
                    f"Skipping '{target.project}/{target.repository}' branch '{branch.name}'",
                    exc,
                )
                continue

            if tally.status == ALERTS_DISABLED:
                commit = CommitInfo()
            else:
                commit = get_last_commit(client, target, branch)

            rows.append(ReportRow.build(target, branch, tally, commit))

    return rows
