"""Tests for advsec_report/reports/alerts.py"""

from advsec_report.client import AdoClient
from advsec_report.models import BranchRef, ScanTarget
from advsec_report.reports.alerts import get_alert_tally, is_advsec_enabled, tally_alerts

ORG = "https://dev.azure.com/contoso"
ADVSEC = "https://advsec.dev.azure.com/contoso"
ALERTS_URL = f"{ADVSEC}/P/_apis/alert/repositories/api/alerts"
ENABLEMENT_URL = f"{ADVSEC}/P/_apis/management/repositories/api/enablement"

TARGET = ScanTarget(ORG, "P", "api")
BRANCH = BranchRef.from_ref(TARGET, "refs/heads/main")


def _client() -> AdoClient:
    return AdoClient(ORG, "tok")


def _alerts(*severities) -> dict:
    return {"count": len(severities), "value": [
        {"alertId": i, "severity": s} for i, s in enumerate(severities)
    ]}


# ---------------------------------------------------------------------------
# tally_alerts
# ---------------------------------------------------------------------------

def test_tally_counts_by_severity():
    tally = tally_alerts(_alerts("critical", "critical", "high", "low", "unknown")["value"])
    assert (tally.critical, tally.high, tally.medium, tally.low) == (2, 1, 0, 1)


def test_tally_ignores_other_severities():
    tally = tally_alerts(_alerts("note", "warning", "error", None)["value"])
    assert (tally.critical, tally.high, tally.medium, tally.low) == (0, 0, 0, 0)


def test_tally_empty():
    tally = tally_alerts([])
    assert tally.status == "ok"
    assert tally.advsec_enabled is True


# ---------------------------------------------------------------------------
# get_alert_tally
# ---------------------------------------------------------------------------

def test_alert_request_params(requests_mock):
    adapter = requests_mock.get(ALERTS_URL, json=_alerts())
    get_alert_tally(_client(), TARGET, BRANCH)
    # requests_mock lowercases query string keys and values
    qs = adapter.last_request.qs
    assert qs["criteria.branchname"] == ["main"]
    assert qs["top"] == ["10000"]


def test_alert_success_skips_enablement(requests_mock):
    requests_mock.get(ALERTS_URL, json=_alerts("high", "medium"))
    enablement = requests_mock.get(ENABLEMENT_URL, json={"advSecEnabled": True})
    tally = get_alert_tally(_client(), TARGET, BRANCH)
    assert (tally.high, tally.medium) == (1, 1)
    assert not enablement.called


def test_alert_failure_disabled(requests_mock):
    requests_mock.get(ALERTS_URL, status_code=403, json={"message": "not enabled"})
    requests_mock.get(ENABLEMENT_URL, json={"advSecEnabled": False})
    tally = get_alert_tally(_client(), TARGET, BRANCH)
    assert tally.status == "disabled"
    assert tally.advsec_enabled is False
    assert (tally.critical, tally.high, tally.medium, tally.low) == (0, 0, 0, 0)


def test_alert_failure_but_enabled_is_unavailable(requests_mock):
    requests_mock.get(ALERTS_URL, status_code=500, text="oops")
    requests_mock.get(ENABLEMENT_URL, json={"advSecEnabled": True})
    tally = get_alert_tally(_client(), TARGET, BRANCH)
    assert tally.status == "unavailable"
    assert tally.advsec_enabled is True


def test_alert_failure_and_enablement_failure_is_unavailable(requests_mock, capsys):
    requests_mock.get(ALERTS_URL, status_code=500, text="oops")
    requests_mock.get(ENABLEMENT_URL, status_code=500, text="also oops")
    tally = get_alert_tally(_client(), TARGET, BRANCH)
    assert tally.status == "unavailable"
    assert tally.advsec_enabled is None
    assert capsys.readouterr().out.count("ERROR:") == 2


# ---------------------------------------------------------------------------
# is_advsec_enabled
# ---------------------------------------------------------------------------

def test_enablement_missing_flag_is_unknown(requests_mock):
    requests_mock.get(ENABLEMENT_URL, json={})
    assert is_advsec_enabled(_client(), TARGET) is None
