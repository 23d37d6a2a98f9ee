"""Tests for advsec_report/reports/scope.py"""

import pytest

from advsec_report.client import AdoClient
from advsec_report.config import Config, Scope
from advsec_report.reports.scope import ScanAbortedError, resolve_targets

ORG = "https://dev.azure.com/contoso"


def _client() -> AdoClient:
    return AdoClient(ORG, "tok")


def _config(scope: Scope, project="", repository="") -> Config:
    return Config(token="tok", organization_uri=ORG, project=project,
                  repository=repository, scope=scope)


def _repos(*names) -> dict:
    return {"count": len(names), "value": [
        {"name": n, "webUrl": f"{ORG}/_git/{n}"} for n in names
    ]}


# ---------------------------------------------------------------------------
# repository scope
# ---------------------------------------------------------------------------

def test_repository_scope_makes_no_calls(requests_mock):
    targets = resolve_targets(_client(), _config(Scope.REPOSITORY, "P", "api"))
    assert len(targets) == 1
    assert (targets[0].project, targets[0].repository) == ("P", "api")
    assert requests_mock.call_count == 0


# ---------------------------------------------------------------------------
# project scope
# ---------------------------------------------------------------------------

def test_project_scope_one_target_per_repository(requests_mock):
    requests_mock.get(f"{ORG}/P/_apis/git/repositories", json=_repos("api", "web", "docs"))
    targets = resolve_targets(_client(), _config(Scope.PROJECT, "P"))
    assert [t.repository for t in targets] == ["api", "web", "docs"]
    assert targets[0].repository_url == f"{ORG}/_git/api"


def test_project_scope_listing_failure_yields_nothing(requests_mock, capsys):
    requests_mock.get(f"{ORG}/P/_apis/git/repositories", status_code=404,
                      json={"message": "Project not found"})
    assert resolve_targets(_client(), _config(Scope.PROJECT, "P")) == []
    out = capsys.readouterr().out
    assert "HTTP 404" in out
    assert "Project not found" in out


# ---------------------------------------------------------------------------
# organization scope
# ---------------------------------------------------------------------------

def test_organization_scope_sums_repositories(requests_mock):
    requests_mock.get(f"{ORG}/_apis/projects",
                      json={"value": [{"name": "A"}, {"name": "B"}, {"name": "C"}]})
    requests_mock.get(f"{ORG}/A/_apis/git/repositories", json=_repos("a1", "a2"))
    requests_mock.get(f"{ORG}/B/_apis/git/repositories", status_code=500, text="boom")
    requests_mock.get(f"{ORG}/C/_apis/git/repositories", json=_repos("c1"))

    targets = resolve_targets(_client(), _config(Scope.ORGANIZATION))

    assert [(t.project, t.repository) for t in targets] == [
        ("A", "a1"), ("A", "a2"), ("C", "c1"),
    ]


def test_organization_scope_aborts_when_projects_fail(requests_mock):
    requests_mock.get(f"{ORG}/_apis/projects", status_code=401, text="")
    with pytest.raises(ScanAbortedError, match="401"):
        resolve_targets(_client(), _config(Scope.ORGANIZATION))


def test_organization_scope_requests_large_page(requests_mock):
    adapter = requests_mock.get(f"{ORG}/_apis/projects", json={"value": []})
    resolve_targets(_client(), _config(Scope.ORGANIZATION))
    assert adapter.last_request.qs["$top"] == ["10000"]


def test_project_listing_failure_reported_once(requests_mock, capsys):
    requests_mock.get(f"{ORG}/_apis/projects", status_code=403,
                      json={"message": "Access denied"})
    with pytest.raises(ScanAbortedError, match="Access denied") as excinfo:
        resolve_targets(_client(), _config(Scope.ORGANIZATION))
    assert "HTTP 403" in str(excinfo.value)
    assert capsys.readouterr().out == ""
