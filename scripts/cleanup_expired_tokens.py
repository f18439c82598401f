"""Delete expired refresh and reset-token rows from the token ledger.

Usage:
    python -m scripts.cleanup_expired_tokens
Safe to run while the API is serving traffic (e.g. from cron); expired rows
are already ignored by every lookup.
"""

import asyncio
import sys

import userauth.infrastructure.persistence.database as database
from userauth.core.lifespan import sweep_expired_tokens
from userauth.domain.exceptions import SqlNotConfiguredException
from userauth.shared.logging import setup_logging


async def main() -> None:
    """Run one ledger sweep and report the number of rows removed."""
    setup_logging()
    try:
        removed = await sweep_expired_tokens()
    except SqlNotConfiguredException:
        print("DATABASE_URL not configured", file=sys.stderr)
        sys.exit(1)
    finally:
        if database.engine is not None:
            await database.engine.dispose()
    print(f"Done. Removed {removed} expired token row(s)")


if __name__ == "__main__":
    asyncio.run(main())
