"""
Fungible Ledger API Application Factory
"""

from fastapi import FastAPI
import uvicorn

from .. import __version__
from ..config import get_config
from ..logging_config import setup_logging
from .tokens import router as tokens_router
from .events import router as events_router
from .admin import router as admin_router
from .system import LedgerSystem, get_ledger_system, set_ledger_system, get_origin


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format, log_file=config.log_file)

    app = FastAPI(
        title="Fungible Ledger API",
        description="Multi-asset fungible token ledger with balances and allowances",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.include_router(tokens_router, prefix="/tokens", tags=["Tokens"])
    app.include_router(events_router, tags=["Events"])
    app.include_router(admin_router, prefix="/admin", tags=["Admin"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "fungible_ledger_api",
            "version": __version__
        }

    return app


app = create_app()


def run_server(host: str = "0.0.0.0", port: int = 8091, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        "fungible_ledger.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )


__all__ = [
    "app",
    "create_app",
    "run_server",
    "LedgerSystem",
    "get_ledger_system",
    "set_ledger_system",
    "get_origin",
]
