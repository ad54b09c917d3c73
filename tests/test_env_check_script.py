"""Tests for the environment drift detection script."""

from __future__ import annotations

from pathlib import Path

import pytest

from scripts import check_env

try:
    from . import _bootstrap
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore

REQUIRED_ENV_KEYS = [
    "FACEBOOK_APP_ID",
    "FACEBOOK_APP_SECRET",
    "FACEBOOK_REDIRECT_URI",
    "INSTAGRAM_APP_ID",
    "INSTAGRAM_APP_SECRET",
    "INSTAGRAM_REDIRECT_URI",
    "THREADS_APP_ID",
    "THREADS_APP_SECRET",
    "THREADS_REDIRECT_URI",
    "TOKEN_ENCRYPTION_KEY",
    "AUTH_JWT_SECRET",
]


def _complete_env(**overrides: str) -> dict[str, str]:
    values = {
        "FACEBOOK_APP_ID": "fb-app-id",
        "FACEBOOK_APP_SECRET": "fb-app-secret",
        "FACEBOOK_REDIRECT_URI": "https://example.com/oauth/facebook",
        "INSTAGRAM_APP_ID": "ig-app-id",
        "INSTAGRAM_APP_SECRET": "ig-app-secret",
        "INSTAGRAM_REDIRECT_URI": "https://example.com/oauth/instagram",
        "THREADS_APP_ID": "threads-app-id",
        "THREADS_APP_SECRET": "threads-app-secret",
        "THREADS_REDIRECT_URI": "https://example.com/oauth/threads",
        "TOKEN_ENCRYPTION_KEY": _bootstrap.TEST_ENCRYPTION_KEY,
        "AUTH_JWT_SECRET": _bootstrap.TEST_JWT_SECRET,
    }
    values.update(overrides)
    return {key: value for key, value in values.items() if value is not None}


def _write_env(env_path: Path, values: dict[str, str]) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


def _clear_required_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in REQUIRED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep pydantic-settings from reading a developer .env in the repo root.
    monkeypatch.chdir(tmp_path)


@pytest.mark.parametrize("command", ["record", "verify", "check"])
def test_main_requires_existing_env_file(tmp_path: Path, command: str) -> None:
    env_file = tmp_path / ".missing-env"
    hash_file = tmp_path / ".env.sha256"

    argv = [command, "--env-file", str(env_file)]
    if command != "check":
        argv.extend(["--hash-file", str(hash_file)])

    exit_code = check_env.main(argv)
    assert exit_code == check_env.EXIT_RUNTIME_ERROR


def test_record_and_verify_detects_mismatched_checksum(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / "service.env"
    hash_file = tmp_path / "service.env.sha256"

    _clear_required_env(monkeypatch)
    _write_env(env_file, _complete_env())

    exit_code = check_env.main(
        ["record", "--env-file", str(env_file), "--hash-file", str(hash_file)]
    )
    assert exit_code == check_env.EXIT_OK
    baseline = hash_file.read_text(encoding="utf-8").strip()
    assert baseline

    _clear_required_env(monkeypatch)
    exit_code = check_env.main(
        ["verify", "--env-file", str(env_file), "--hash-file", str(hash_file)]
    )
    assert exit_code == check_env.EXIT_OK

    _write_env(env_file, _complete_env(THREADS_APP_SECRET="rotated-secret"))

    _clear_required_env(monkeypatch)
    exit_code = check_env.main(
        ["verify", "--env-file", str(env_file), "--hash-file", str(hash_file)]
    )
    assert exit_code == check_env.EXIT_CHECKSUM_ERROR


@pytest.mark.parametrize(
    "missing", ["INSTAGRAM_APP_SECRET", "THREADS_REDIRECT_URI", "TOKEN_ENCRYPTION_KEY"]
)
def test_validation_failure_for_missing_required_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys, missing: str
) -> None:
    env_file = tmp_path / "service.env"
    hash_file = tmp_path / "service.env.sha256"

    _clear_required_env(monkeypatch)
    _write_env(env_file, _complete_env(**{missing: None}))

    exit_code = check_env.main(
        ["record", "--env-file", str(env_file), "--hash-file", str(hash_file)]
    )

    assert exit_code == check_env.EXIT_VALIDATION_ERROR
    assert missing in capsys.readouterr().err
    assert not hash_file.exists()


def test_check_rejects_undecodable_encryption_key(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    env_file = tmp_path / "service.env"

    _clear_required_env(monkeypatch)
    _write_env(env_file, _complete_env(TOKEN_ENCRYPTION_KEY="dG9vLXNob3J0"))

    exit_code = check_env.main(["check", "--env-file", str(env_file)])

    assert exit_code == check_env.EXIT_VALIDATION_ERROR
    assert "32 bytes" in capsys.readouterr().err


def test_check_can_require_service_key(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    env_file = tmp_path / "service.env"

    _clear_required_env(monkeypatch)
    monkeypatch.delenv("SERVICE_ROLE_KEY", raising=False)
    _write_env(env_file, _complete_env())

    assert check_env.main(["check", "--env-file", str(env_file)]) == check_env.EXIT_OK
    assert "threads: app threads-app-id" in capsys.readouterr().out

    _clear_required_env(monkeypatch)
    exit_code = check_env.main(
        ["check", "--env-file", str(env_file), "--require-service-key"]
    )
    assert exit_code == check_env.EXIT_VALIDATION_ERROR
    assert "SERVICE_ROLE_KEY" in capsys.readouterr().err
