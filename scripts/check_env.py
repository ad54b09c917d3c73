"""Pre-flight check for the social connect service environment.

Run before starting the API or deploying the refresh job:

* ``check`` loads settings from the env file, builds the provider registry,
  and confirms the token encryption key decodes to a usable AES-256 key.
* ``record`` runs the same checks and stores a SHA256 baseline of the file.
* ``verify`` runs the checks and compares the file against that baseline,
  catching credentials that were rotated or lost without a redeploy.

Example usages::

    python -m scripts.check_env record --env-file /srv/social-connect/.env \
        --hash-file /srv/social-connect/.env.sha256

    # From cron, before the refresh job fires.
    python -m scripts.check_env verify --env-file /srv/social-connect/.env \
        --hash-file /srv/social-connect/.env.sha256 --require-service-key
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from social_connect.core.config import _load_env_file, load_settings
from social_connect.core.errors import ConfigurationError
from social_connect.core.providers import ProviderRegistry
from social_connect.models.token_record import Provider
from social_connect.services.token_cipher import TokenCipherService

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _validate_settings(env_file: Path, *, require_service_key: bool = False) -> list[str]:
    """Load ``env_file`` and return a one-line summary per provider."""
    _load_env_file(str(env_file))
    settings = load_settings()
    registry = ProviderRegistry(settings)
    TokenCipherService(secret=settings.security.token_encryption_key)
    if require_service_key and not settings.security.service_role_key:
        raise ConfigurationError("SERVICE_ROLE_KEY is required for the refresh endpoint.")

    summary = []
    for provider in Provider:
        config = registry.config(provider)
        summary.append(f"{provider.value}: app {config.client_id} -> {config.redirect_uri}")
    return summary


def _file_digest(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _record(env_file: Path, hash_file: Path) -> int:
    digest = _file_digest(env_file)
    hash_file.write_text(f"{digest}\n", encoding="utf-8")
    print(f"Recorded baseline {digest} in {hash_file}")
    return EXIT_OK


def _verify(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"No baseline at {hash_file}; run 'record' first.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _file_digest(env_file)
    if expected != actual:
        print(
            f"{env_file} changed since the baseline was recorded.\n"
            f"  baseline: {expected}\n"
            f"  current:  {actual}\n"
            "Provider credentials may have been rotated; reconnect flows and the "
            "refresh job will fail until the service is redeployed.",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR

    print("Environment baseline matches.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate social connect settings and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text, needs_hash in (
        ("check", "Validate settings only.", False),
        ("record", "Validate settings and store the checksum baseline.", True),
        ("verify", "Validate settings and compare against the baseline.", True),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env).",
        )
        subparser.add_argument(
            "--require-service-key",
            action="store_true",
            help="Fail when SERVICE_ROLE_KEY is not set.",
        )
        if needs_hash:
            subparser.add_argument(
                "--hash-file",
                required=True,
                type=Path,
                help="Checksum baseline location.",
            )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        summary = _validate_settings(
            env_file, require_service_key=args.require_service_key
        )
    except ConfigurationError as exc:
        print(f"Settings validation failed. {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except OSError as exc:
        print(f"Could not read {env_file}: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    for line in summary:
        print(line)

    handlers: dict[str, Callable[[], int]] = {
        "check": lambda: EXIT_OK,
        "record": lambda: _record(env_file, args.hash_file),
        "verify": lambda: _verify(env_file, args.hash_file),
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
