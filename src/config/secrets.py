"""
Secret management for the checklist API proxy.

Usage:
    from src.config.secrets import get_proxy_url

    # Will raise if not configured
    url = get_proxy_url()

CLI check:
    python -m src.config.secrets --check
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Find .env file - walk up from this file to repo root
_current = Path(__file__).resolve()
_repo_root = _current.parent.parent.parent  # src/config/secrets.py -> repo root
_env_path = _repo_root / ".env"

if _env_path.exists():
    load_dotenv(_env_path)
else:
    # Also try current working directory
    load_dotenv()


PROXY_URL_ENV = "JOLT_PROXY_URL"


class MissingAPIKeyError(Exception):
    """Raised when required API configuration is not set."""
    pass


def get_proxy_url(default: str = "") -> str:
    """
    Get the checklist API proxy URL from the environment.

    Args:
        default: Value to use when the env var is unset (e.g. from config)

    Returns:
        str: The proxy URL

    Raises:
        MissingAPIKeyError: If neither JOLT_PROXY_URL nor default is set
    """
    url = os.environ.get(PROXY_URL_ENV, "").strip() or (default or "").strip()
    if not url:
        raise MissingAPIKeyError(
            f"{PROXY_URL_ENV} not found. "
            "Copy .env.example to .env and set the proxy URL."
        )
    return url


def check_keys() -> dict:
    """
    Check which settings are configured.

    Returns:
        dict: Status of each setting ("OK" or "MISSING")
    """
    url = os.environ.get(PROXY_URL_ENV, "").strip()
    return {PROXY_URL_ENV: "OK" if url else "MISSING"}


def _cli_check():
    """CLI entry point for --check flag."""
    status = check_keys()
    all_ok = True

    for key_name, key_status in status.items():
        print(f"{key_name}: {key_status}")
        if key_status == "MISSING":
            all_ok = False

    if not all_ok:
        print("\nTo configure:")
        print("  1. Copy .env.example to .env")
        print(f"  2. Set {PROXY_URL_ENV} in .env")
        sys.exit(1)
    else:
        print("\nAll settings configured.")
        sys.exit(0)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Check checklist API configuration"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check if the proxy URL is configured"
    )

    args = parser.parse_args()

    if args.check:
        _cli_check()
    else:
        parser.print_help()
