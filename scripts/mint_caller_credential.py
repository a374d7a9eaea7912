"""Mint a bearer credential that lets an owner call the revocation endpoint.

The credential is sealed with ``CALLER_CREDENTIAL_SECRET`` (read from the
environment or the supplied ``.env`` file) and expires after
``CALLER_CREDENTIAL_TTL`` seconds.

Example usage::

    python -m scripts.mint_caller_credential owner-123 --env-file /opt/gate/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from token_gate.core.config import SecuritySettings, _load_env_file
from token_gate.services.caller_credentials import CallerCredentialService

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_MISSING_SECRET = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("owner_id", help="Owner identifier the credential asserts.")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Optional .env file to load before reading settings.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _load_env_file(str(args.env_file))

    try:
        security = SecuritySettings()  # type: ignore[call-arg]
    except ValidationError as exc:
        print(f"Invalid security settings:\n{exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    if not security.caller_credential_secret:
        print("CALLER_CREDENTIAL_SECRET is not configured.", file=sys.stderr)
        return EXIT_MISSING_SECRET

    service = CallerCredentialService(
        secret=security.caller_credential_secret,
        ttl_seconds=security.caller_credential_ttl_seconds,
    )
    print(service.issue(args.owner_id))
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
