"""Data models for the branch security report.

    - ScanTarget   one (project, repository) pair to scan
    - BranchRef    one branch of a ScanTarget
    - AlertTally   alert counts per severity for one branch
    - CommitInfo   last commit on one branch
    - ReportRow    one CSV row: the union of the above
"""

from dataclasses import dataclass, fields
from urllib.parse import quote

NOT_AVAILABLE = "N/A"
HEADS_PREFIX = "refs/heads/"

SEVERITIES = ("critical", "high", "medium", "low")

# alert_status values
ALERTS_OK = "ok"
ALERTS_DISABLED = "disabled"
ALERTS_UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ScanTarget:
    organization: str
    project: str
    repository: str
    repository_url: str = ""

    @property
    def web_url(self) -> str:
        """Browse URL of the repository, built when the API did not supply one."""
        if self.repository_url:
            return self.repository_url
        return "/".join((
            self.organization.rstrip("/"),
            quote(self.project),
            "_git",
            quote(self.repository),
        ))


@dataclass(frozen=True)
class BranchRef:
    ref_name: str
    name: str
    url: str

    @classmethod
    def from_ref(cls, target: ScanTarget, ref_name: str) -> "BranchRef":
        name = ref_name[len(HEADS_PREFIX):] if ref_name.startswith(HEADS_PREFIX) else ref_name
        url = f"{target.web_url}?version=GB{quote(name, safe='/')}"
        return cls(ref_name=ref_name, name=name, url=url)


@dataclass
class AlertTally:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    advsec_enabled: bool | None = True  # None: enablement unknown
    status: str = ALERTS_OK

    @classmethod
    def disabled(cls) -> "AlertTally":
        return cls(advsec_enabled=False, status=ALERTS_DISABLED)

    @classmethod
    def unavailable(cls, advsec_enabled: bool | None = None) -> "AlertTally":
        return cls(advsec_enabled=advsec_enabled, status=ALERTS_UNAVAILABLE)


@dataclass
class CommitInfo:
    author: str = NOT_AVAILABLE
    date: str = NOT_AVAILABLE


@dataclass
class ReportRow:
    project: str
    repository: str
    repository_url: str
    branch: str
    branch_url: str
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    advsec_enabled: bool | None = True
    last_committer: str = NOT_AVAILABLE
    last_commit_date: str = NOT_AVAILABLE
    alert_status: str = ALERTS_OK

    @classmethod
    def build(
        cls,
        target: ScanTarget,
        branch: BranchRef,
        tally: AlertTally,
        commit: CommitInfo,
    ) -> "ReportRow":
        return cls(
            project=target.project,
            repository=target.repository,
            repository_url=target.web_url,
            branch=branch.name,
            branch_url=branch.url,
            critical=tally.critical,
            high=tally.high,
            medium=tally.medium,
            low=tally.low,
            advsec_enabled=tally.advsec_enabled,
            last_committer=commit.author,
            last_commit_date=commit.date,
            alert_status=tally.status,
        )

    def to_record(self, include_enabled: bool = False, hyperlinks: bool = False) -> dict:
        """Flatten the row into a CSV record keyed by column name."""
        record = {name: getattr(self, name) for name in column_names(include_enabled)}
        if hyperlinks:
            record["repository"] = _hyperlink(self.repository_url, self.repository)
            record["branch"] = _hyperlink(self.branch_url, self.branch)
        return record


def column_names(include_enabled: bool = False) -> list[str]:
    """CSV header, derived from the ReportRow fields."""
    names = [f.name for f in fields(ReportRow)]
    if not include_enabled:
        names.remove("advsec_enabled")
    return names


def _hyperlink(url: str, label: str) -> str:
    return '=HYPERLINK("{}","{}")'.format(url.replace('"', '""'), label.replace('"', '""'))
