"""Main application entry point: FastAPI app serving the shared-expense ledger."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from src.api import dashboard, expenses, ledger
from src.config import settings
from src.models import Base

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def _seed_demo_data() -> None:
    """Seed the demo household into the configured database (no-op when present)."""
    from src.services import SessionLocal
    from src.services.ledger_store import SqlAlchemyLedgerStore
    from src.services.seeding import DemoSeedService

    db = SessionLocal()
    try:
        DemoSeedService(SqlAlchemyLedgerStore(db)).execute_seed()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    from src.services import engine

    # Startup: Initialize database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized")
    if settings.demo_seed_on_startup:
        _seed_demo_data()
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.api_title,
    description="Shared household expense splitting and balances",
    version=settings.api_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(ledger.router)
app.include_router(expenses.router)
app.include_router(dashboard.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


def main(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the API server with file + stdout logging."""
    from src.services.logging import setup_server_logging

    setup_server_logging(settings.log_file, settings.log_level)
    logger.info(f"Starting Uvicorn server on {host}:{port}...")
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
