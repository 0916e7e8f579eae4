"""
CLI entry point tests.
"""

from unittest.mock import patch

import pytest

from artifact_sync import config as config_module
from artifact_sync import main as main_module
from artifact_sync.models.state import SyncResult


@pytest.fixture(autouse=True)
def fresh_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "_config", None)
    monkeypatch.chdir(tmp_path)
    for var in ("GITHUB_EVENT_NAME", "GITHUB_ACTIONS", "CI", "GITHUB_TOKEN"):
        monkeypatch.delenv(var, raising=False)


def run_main(argv, result):
    with patch.object(main_module, "SyncOrchestrator") as orchestrator_cls:
        orchestrator_cls.return_value.run.return_value = result
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(argv)
    return exc_info.value.code, orchestrator_cls


def test_exit_zero_on_no_change():
    code, orchestrator_cls = run_main(["--artifact", "action.yml"], SyncResult(outcome="no-change"))

    assert code == 0
    settings = orchestrator_cls.call_args.kwargs["settings"]
    assert settings.artifacts == ["action.yml"]
    assert orchestrator_cls.call_args.kwargs["ci_context"].trigger_kind == "other"


def test_exit_one_on_failure():
    code, _ = run_main(
        ["--artifact", "action.yml", "--artifact", "Dockerfile"],
        SyncResult(outcome="failed", error="push failed 3 times"),
    )
    assert code == 1


def test_cli_flags_override_settings():
    _, orchestrator_cls = run_main(
        ["--artifact", "a.yml", "--message", "Regenerate", "--max-push-attempts", "5"],
        SyncResult(outcome="pushed"),
    )
    settings = orchestrator_cls.call_args.kwargs["settings"]
    assert settings.commit_message == "Regenerate"
    assert settings.max_push_attempts == 5


def test_no_artifacts_is_an_error():
    with pytest.raises(SystemExit) as exc_info:
        main_module.main([])
    assert exc_info.value.code == 1


def test_missing_config_file_is_an_error(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        main_module.main(["--config", str(tmp_path / "nope.yaml"), "--artifact", "a"])
    assert exc_info.value.code == 1


def test_invalid_push_attempts_is_an_error():
    with patch.object(main_module, "SyncOrchestrator") as orchestrator_cls:
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(["--artifact", "a.yml", "--max-push-attempts", "0"])
    assert exc_info.value.code == 1
    orchestrator_cls.assert_not_called()
