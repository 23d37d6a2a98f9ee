"""Branch enumeration for a single ScanTarget."""

from advsec_report.client import AdoClient, AdoClientError
from advsec_report.models import BranchRef, ScanTarget
from advsec_report.reports import echo_exception, echo_failure, vecho

API_VERSION = "7.1"


def list_branches(client: AdoClient, target: ScanTarget) -> list[BranchRef]:
    """Return the head refs of *target*; [] when the listing fails."""
    url = client.org_url(target.project, "_apis", "git", "repositories", target.repository, "refs")
    vecho(f"Listing branches of '{target.project}/{target.repository}': {url}")
    what = f"Failed to list branches of '{target.project}/{target.repository}'"
    try:
        response = client.get(url, {"filter": "heads/", "api-version": API_VERSION})
    except AdoClientError as exc:
        echo_exception(what, exc)
        return []

    if not response.ok:
        echo_failure(what, response)
        return []

    return [
        BranchRef.from_ref(target, ref["name"])
        for ref in response.value
        if ref.get("name")
    ]
