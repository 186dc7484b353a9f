import json

import pytest

from hostaudit import cli
from hostaudit.errors.exceptions import AuditError


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "load_dotenv", lambda *a, **kw: False)


def test_validate_only(capsys: pytest.CaptureFixture[str]):
    cli.main(["www.Seaside.com/rentals", "--validate-only"])

    output = json.loads(capsys.readouterr().out)
    assert output == {
        "status": "success",
        "message": "Validation successful",
        "validated_url": "https://www.Seaside.com/rentals",
        "domain": "seaside.com",
    }


def test_invalid_url_exits_with_error(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as exc:
        cli.main(["ftp://seaside.com"])

    assert exc.value.code == 1
    output = json.loads(capsys.readouterr().out)
    assert output["status"] == "failed"
    assert output["error"].startswith("Validation error:")


def test_missing_url(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit):
        cli.main([])
    assert "URL is required" in json.loads(capsys.readouterr().out)["error"]


def test_runs_audit_and_prints_json(monkeypatch: pytest.MonkeyPatch, capsys):
    seen = {}

    class Result:
        def to_json_dict(self):
            return {"domain": "seaside.com", "overallScore": 64, "seoMetrics": None}

    def fake_run_audit(url, domain=None, on_progress=None):
        seen.update(url=url, domain=domain)
        return Result()

    monkeypatch.setattr(cli, "run_audit", fake_run_audit)
    cli.main(["seaside.com", "--domain", "www.seaside.com"])

    assert seen == {"url": "https://seaside.com", "domain": "seaside.com"}
    output = json.loads(capsys.readouterr().out)
    assert output["overallScore"] == 64
    assert output["seoMetrics"] is None


def test_audit_error_exits(monkeypatch: pytest.MonkeyPatch, capsys):
    def boom(url, domain=None, on_progress=None):
        raise AuditError("pipeline broke")

    monkeypatch.setattr(cli, "run_audit", boom)
    with pytest.raises(SystemExit):
        cli.main(["seaside.com"])

    assert json.loads(capsys.readouterr().out) == {"status": "failed", "error": "pipeline broke"}
