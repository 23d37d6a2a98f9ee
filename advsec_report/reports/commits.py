"""Last-commit lookup for one branch."""

from advsec_report.client import AdoClient, AdoClientError
from advsec_report.models import NOT_AVAILABLE, BranchRef, CommitInfo, ScanTarget
from advsec_report.reports import echo_exception, echo_failure

API_VERSION = "7.1"


def get_last_commit(client: AdoClient, target: ScanTarget, branch: BranchRef) -> CommitInfo:
    """Return author name and date of the newest commit on *branch*.

    Any failure yields ``CommitInfo()`` (both fields "N/A").
    """
    url = client.org_url(
        target.project, "_apis", "git", "repositories", target.repository, "commits"
    )
    params = {
        "searchCriteria.itemVersion.version": branch.name,
        "searchCriteria.itemVersion.versionType": "branch",
        "searchCriteria.$top": 1,
        "api-version": API_VERSION,
    }
    what = f"Failed to fetch last commit of '{target.repository}' branch '{branch.name}'"
    try:
        response = client.get(url, params)
    except AdoClientError as exc:
        echo_exception(what, exc)
        return CommitInfo()

    if not response.ok:
        echo_failure(what, response)
        return CommitInfo()

    commits = response.value
    if not commits:
        return CommitInfo()

    author = commits[0].get("author") or {}
    return CommitInfo(
        author=author.get("name") or NOT_AVAILABLE,
        date=author.get("date") or NOT_AVAILABLE,
    )
