"""CLI entry point for seeding the demo household.

Usage:
    python -m src.cli.seed

Exit Codes:
    0 - Success: Demo household seeded (or already present)
    1 - Failure: Error encountered; records written before the failure are
        kept and the next run creates only what is still missing

Logging:
    INFO level logs to stdout (LOG_LEVEL overrides)
"""

import sys

from src.config import settings
from src.models import Base
from src.services.logging import setup_cli_logging


def main() -> int:
    """
    Main entry point for the seed CLI.

    1. Set up logging
    2. Create missing tables on the configured database
    3. Seed the demo household through the ledger store

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    logger = setup_cli_logging("roomshare.seed", settings.log_level)
    try:
        logger.info(f"Seeding demo household into {settings.database_url}...")

        from src.services import SessionLocal, engine
        from src.services.ledger_store import SqlAlchemyLedgerStore
        from src.services.seeding import DemoSeedService

        Base.metadata.create_all(bind=engine)

        db = SessionLocal()
        try:
            result = DemoSeedService(SqlAlchemyLedgerStore(db), logger).execute_seed()
            return 0 if result.success else 1
        finally:
            db.close()

    except KeyboardInterrupt:
        logger.warning("Seed interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Seed failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
