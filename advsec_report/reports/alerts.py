"""Alert aggregation for one branch.

``get_alert_tally`` fetches the branch's alerts and counts them per severity.
When that call fails it asks the enablement endpoint whether Advanced
Security is on at all:

* disabled            -> ``AlertTally.disabled()``
* enabled or unknown  -> ``AlertTally.unavailable()``

Transport errors are not caught here; the scan loop skips the branch.
"""

from advsec_report.client import AdoClient
from advsec_report.models import SEVERITIES, AlertTally, BranchRef, ScanTarget
from advsec_report.reports import echo_failure, vecho

API_VERSION = "7.2-preview.1"

#: Alerts past this many are not fetched
ALERT_PAGE_SIZE = 10_000


def tally_alerts(alerts: list[dict]) -> AlertTally:
    """Count *alerts* per severity. Severities outside SEVERITIES are ignored."""
    counts = {s: 0 for s in SEVERITIES}
    for alert in alerts:
        sev = str(alert.get("severity") or "").lower()
        if sev in counts:
            counts[sev] += 1
    return AlertTally(**counts)


def get_alert_tally(client: AdoClient, target: ScanTarget, branch: BranchRef) -> AlertTally:
    url = client.advsec_url(
        target.project, "_apis", "alert", "repositories", target.repository, "alerts"
    )
    params = {
        "criteria.branchName": branch.name,
        "top": ALERT_PAGE_SIZE,
        "api-version": API_VERSION,
    }
    vecho(f"Fetching alerts for '{target.repository}' branch '{branch.name}': {url}")
    response = client.get(url, params)
    if response.ok:
        return tally_alerts(response.value)

    echo_failure(
        f"Failed to fetch alerts for '{target.project}/{target.repository}' "
        f"branch '{branch.name}'",
        response,
    )
    enabled = is_advsec_enabled(client, target)
    if enabled is False:
        vecho(f"Advanced Security is disabled for '{target.project}/{target.repository}'")
        return AlertTally.disabled()
    return AlertTally.unavailable(advsec_enabled=enabled)


def is_advsec_enabled(client: AdoClient, target: ScanTarget) -> bool | None:
    """Return the repository's Advanced Security enablement, or None if unknown."""
    url = client.advsec_url(
        target.project, "_apis", "management", "repositories", target.repository, "enablement"
    )
    response = client.get(url, {"api-version": API_VERSION})
    if not response.ok or not isinstance(response.body, dict):
        echo_failure(
            f"Failed to read Advanced Security enablement for "
            f"'{target.project}/{target.repository}'",
            response,
        )
        return None

    enabled = response.body.get("advSecEnabled")
    return enabled if isinstance(enabled, bool) else None
