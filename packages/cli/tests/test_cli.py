"""Tests for the CLI entry point."""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from prgate_cli.cli import _build_store, main
from prgate_core.config import DEFAULT_CONFIG, DEFAULT_MESSAGES
from prgate_core.models import Bucket, Classification, PullRequestEvent, Verdict
from prgate_core.pipeline import Stage, ValidationResult
from prgate_store.gist import GistStore
from prgate_store.jsonfile import JSONFileStore
from prgate_store.models import AuditRecord
from prgate_store.noop import NoOpStore
from prgate_store.sqlite import SQLiteStore

PAYLOAD = {
    "action": "opened",
    "number": 4,
    "repository": {"full_name": "owner/repo", "statuses_url": "https://api/statuses/{sha}"},
    "pull_request": {"url": "https://api/pulls/4", "title": "Bug 7: fix"},
    "sender": {"login": "janedoe"},
}


@pytest.fixture(autouse=True)
def _clean_actions_env(monkeypatch):
    # validate reads these when running inside GitHub Actions.
    monkeypatch.delenv("GITHUB_EVENT_NAME", raising=False)
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)


def _make_config(github_token="tok", cla_service_url="https://cla.example.org/status/", **overrides):
    config = {**DEFAULT_CONFIG, "messages": dict(DEFAULT_MESSAGES)}
    config.update(
        {
            "github_token": github_token,
            "cla_service_url": cla_service_url,
            "smtp_user": None,
            "smtp_password": None,
        }
    )
    config.update(overrides)
    return config


def _patch_common(mocker, config=None, token="tok"):
    """Patch load_config, resolve_github_token, and _build_store for most tests."""
    cfg = config or _make_config()
    mocker.patch("prgate_core.config.load_config", return_value=cfg)
    mocker.patch("prgate_cli.auth.resolve_github_token", return_value=token)
    # Use SQLiteStore spec so isinstance(store, NoOpStore) returns False.
    mock_store = MagicMock(spec=SQLiteStore)
    mock_store.list_records.return_value = []
    mock_store.get.return_value = None
    mocker.patch("prgate_cli.cli._build_store", return_value=mock_store)
    return cfg, mock_store


def _result(state="failure", failed_step=None, stage=Stage.DONE):
    classification = Classification()
    classification.add(Bucket.INVALID_CLA, "jane@x.com")
    return ValidationResult(
        event=PullRequestEvent.from_payload(PAYLOAD),
        stage=stage,
        classification=classification,
        state=state,
        message="Some committers failed IP validation.",
        verdict=Verdict(state=state, message="Some committers failed IP validation.", audit_key="key123"),
        failed_step=failed_step,
    )


def _make_audit_record():
    return AuditRecord(
        key="key123",
        repo="owner/repo",
        pr_number=4,
        head_sha="a" * 40,
        state="failure",
        recorded_at="2024-03-01T12:00:00+00:00",
        classification={
            "valid_cla": [],
            "invalid_cla": ["jane@x.com"],
            "status_history": [
                {
                    "url": "https://api/s/1",
                    "created_at": "2024-03-01T11:00:00+00:00",
                    "description": "CI passed",
                    "state": "success",
                    "target_url": "https://ci.example.org/1",
                }
            ],
        },
    )


# ---------------------------------------------------------------------------
# Store factory
# ---------------------------------------------------------------------------


class TestBuildStore:
    def test_default_is_noop(self):
        assert isinstance(_build_store({}), NoOpStore)

    def test_json(self, tmp_path):
        store = _build_store({"store": "json", "store_path": str(tmp_path / "a.json")})
        assert isinstance(store, JSONFileStore)

    def test_sqlite(self, tmp_path):
        store = _build_store({"store": "sqlite", "store_path": str(tmp_path / "a.db")})
        assert isinstance(store, SQLiteStore)
        store.close()

    def test_gist_without_id_falls_back(self):
        assert isinstance(_build_store({"store": "gist", "github_token": "tok"}), NoOpStore)

    def test_gist(self, mocker):
        mocker.patch("github.Github")
        store = _build_store({"store": "gist", "gist_id": "abc", "github_token": "tok"})
        assert isinstance(store, GistStore)


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


class TestValidate:
    def test_missing_github_token(self, mocker):
        _patch_common(mocker, config=_make_config(github_token=None), token=None)

        result = CliRunner().invoke(main, ["validate"], input=json.dumps(PAYLOAD))
        assert result.exit_code != 0
        assert "GITHUB_TOKEN" in result.output

    def test_missing_cla_service_url(self, mocker):
        _patch_common(mocker, config=_make_config(cla_service_url=None))

        result = CliRunner().invoke(main, ["validate"], input=json.dumps(PAYLOAD))
        assert result.exit_code != 0
        assert "cla_service_url" in result.output

    def test_invalid_payload(self, mocker):
        _patch_common(mocker)

        result = CliRunner().invoke(main, ["validate"], input="{nope")
        assert result.exit_code != 0
        assert "not valid JSON" in result.output

    def test_dispatches_payload_from_file(self, mocker, tmp_path):
        _, mock_store = _patch_common(mocker)
        mocker.patch("prgate_cli.commands.validate.GitHubForge")
        dispatch = mocker.patch("prgate_cli.commands.validate.dispatch_event", return_value=_result())
        payload_path = tmp_path / "event.json"
        payload_path.write_text(json.dumps(PAYLOAD))

        result = CliRunner().invoke(main, ["validate", "--payload", str(payload_path)])

        assert result.exit_code == 0
        event_name, payload = dispatch.call_args[0]
        assert event_name == "pull_request"
        assert payload["number"] == 4
        assert "owner/repo#4" in result.output
        assert "key123" in result.output
        assert "failure" in result.output

    def test_cla_service_url_override(self, mocker):
        cfg, _ = _patch_common(mocker, config=_make_config(cla_service_url=None))
        mocker.patch("prgate_cli.commands.validate.GitHubForge")
        authority_cls = mocker.patch("prgate_cli.commands.validate.ClaAuthority")
        mocker.patch("prgate_cli.commands.validate.dispatch_event", return_value=_result())

        result = CliRunner().invoke(
            main, ["validate", "--cla-service-url", "https://cla.other/"], input=json.dumps(PAYLOAD)
        )

        assert result.exit_code == 0
        assert authority_cls.call_args[0][0] == "https://cla.other/"

    def test_failed_step_exits_nonzero(self, mocker):
        _patch_common(mocker)
        mocker.patch("prgate_cli.commands.validate.GitHubForge")
        mocker.patch(
            "prgate_cli.commands.validate.dispatch_event",
            return_value=_result(failed_step="report status", stage=Stage.RECORDED),
        )

        result = CliRunner().invoke(main, ["validate"], input=json.dumps(PAYLOAD))

        assert result.exit_code == 1
        assert "report status failed" in result.output

    def test_status_event_needs_no_token(self, mocker):
        _patch_common(mocker, config=_make_config(github_token=None, cla_service_url=None), token=None)
        mocker.patch("prgate_cli.commands.validate.GitHubForge")
        dispatch = mocker.patch("prgate_cli.commands.validate.dispatch_event", return_value=None)

        result = CliRunner().invoke(main, ["validate", "--event", "status"], input=json.dumps({"target_url": ""}))

        assert result.exit_code == 0
        assert dispatch.call_args[0][0] == "status"
        assert "No validation performed" in result.output

    def test_entry_point_hooks_passed_to_dispatch(self, mocker):
        _patch_common(mocker)
        mocker.patch("prgate_cli.commands.validate.GitHubForge")
        hook = MagicMock(__name__="announce")
        ep = MagicMock()
        ep.name = "pull_request.opened"
        ep.load.return_value = hook
        mocker.patch("prgate_core.dispatch.entry_points", return_value=[ep])
        dispatch = mocker.patch("prgate_cli.commands.validate.dispatch_event", return_value=_result())

        result = CliRunner().invoke(main, ["validate"], input=json.dumps(PAYLOAD))

        assert result.exit_code == 0
        dispatch.call_args.kwargs["hooks"].run("pull_request", "opened", PAYLOAD)
        hook.assert_called_once_with(PAYLOAD)

    def test_smtp_notifier_selected(self, mocker):
        _patch_common(mocker, config=_make_config(notifier="smtp"))
        mocker.patch("prgate_cli.commands.validate.GitHubForge")
        dispatch = mocker.patch("prgate_cli.commands.validate.dispatch_event", return_value=_result())

        CliRunner().invoke(main, ["validate"], input=json.dumps(PAYLOAD))

        from prgate_core.notify.smtp import SMTPNotifier

        assert isinstance(dispatch.call_args.kwargs["notifier"], SMTPNotifier)


# ---------------------------------------------------------------------------
# details
# ---------------------------------------------------------------------------


class TestDetails:
    def test_shows_record(self, mocker):
        _, mock_store = _patch_common(mocker)
        mock_store.get.return_value = _make_audit_record()

        result = CliRunner().invoke(main, ["details", "key123"])

        assert result.exit_code == 0
        mock_store.get.assert_called_once_with("key123")
        assert "owner/repo#4" in result.output
        assert "jane@x.com" in result.output
        assert "CI passed" in result.output

    def test_unknown_key(self, mocker):
        _patch_common(mocker)

        result = CliRunner().invoke(main, ["details", "missing"])

        assert result.exit_code == 1
        assert "No audit record found" in result.output


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


class TestHistory:
    def test_requires_configured_store(self, mocker):
        _patch_common(mocker)
        mocker.patch("prgate_cli.cli._build_store", return_value=NoOpStore())

        result = CliRunner().invoke(main, ["history", "--repo", "owner/repo"])

        assert result.exit_code != 0
        assert "No store configured" in result.output

    def test_lists_records(self, mocker):
        _, mock_store = _patch_common(mocker)
        mock_store.list_records.return_value = [_make_audit_record()]

        result = CliRunner().invoke(main, ["history", "--repo", "owner/repo", "--pr", "4"])

        assert result.exit_code == 0
        mock_store.list_records.assert_called_once_with("owner/repo", pr_number=4)
        assert "#4" in result.output
        assert "key123" in result.output

    def test_no_records(self, mocker):
        _patch_common(mocker)

        result = CliRunner().invoke(main, ["history", "--repo", "owner/repo"])

        assert "No audit records found" in result.output


# ---------------------------------------------------------------------------
# auth.py
# ---------------------------------------------------------------------------


class TestResolveGithubToken:
    def test_prefers_dedicated_token(self, monkeypatch):
        from prgate_cli.auth import resolve_github_token

        monkeypatch.setenv("PRGATE_GITHUB_TOKEN", "bot-token")
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        assert resolve_github_token() == "bot-token"

    def test_returns_env_var_when_set(self, monkeypatch):
        from prgate_cli.auth import resolve_github_token

        monkeypatch.delenv("PRGATE_GITHUB_TOKEN", raising=False)
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        assert resolve_github_token() == "env-token"

    def test_falls_back_to_gh_cli(self, monkeypatch):
        from prgate_cli.auth import resolve_github_token

        monkeypatch.delenv("PRGATE_GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="gh-token\n")
            assert resolve_github_token() == "gh-token"

    def test_returns_none_when_gh_not_installed(self, monkeypatch):
        from prgate_cli.auth import resolve_github_token

        monkeypatch.delenv("PRGATE_GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with patch("subprocess.run", side_effect=FileNotFoundError):
            assert resolve_github_token() is None

    def test_returns_none_when_gh_times_out(self, monkeypatch):
        from prgate_cli.auth import resolve_github_token

        monkeypatch.delenv("PRGATE_GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="gh", timeout=5)):
            assert resolve_github_token() is None

    def test_returns_none_when_gh_returns_error(self, monkeypatch):
        from prgate_cli.auth import resolve_github_token

        monkeypatch.delenv("PRGATE_GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="")
            assert resolve_github_token() is None
