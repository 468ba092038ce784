"""Issue a signed development access token for a given role.

Useful for exercising the permission routes locally without the real
identity provider. Uses the JWT settings from the environment / .env.

Usage:
    python -m scripts.issue_dev_token --role FINANCE
    python -m scripts.issue_dev_token --role ADMIN --subject alice --minutes 120
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta

from src.core.auth import ROLE_CLAIM, create_access_token
from src.core.config import get_settings
from src.core.models import UserRole

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Issue a development access token")
    parser.add_argument("--role", required=True, choices=[r.value for r in UserRole])
    parser.add_argument("--subject", default="dev-user")
    parser.add_argument("--minutes", type=int, default=None, help="Token lifetime (defaults to settings)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _parse_args(argv)
    settings = get_settings()

    if settings.app_env == "production":
        logger.error("Refusing to issue dev tokens in production")
        sys.exit(1)

    expires = timedelta(minutes=args.minutes) if args.minutes else None
    token = create_access_token({"sub": args.subject, ROLE_CLAIM: args.role}, settings, expires)
    print(token)  # noqa: T201


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    main()
