#!/usr/bin/env python3
"""
staffalloc API - FastAPI Application

Assignment of open positions to recruiters under hard capacity limits.

Usage:
    python main.py serve

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI

from .config import get_config
from .exceptions import register_exception_handlers
from .rate_limit import add_rate_limit_handlers
from .routers import assignments_router, positions_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="staffalloc API",
        description="Capacity-constrained assignment of positions to recruiters",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    add_rate_limit_handlers(app)
    register_exception_handlers(app)

    app.include_router(assignments_router)
    app.include_router(positions_router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "staffalloc"}

    return app


app = create_app()


def main():
    """Run the web server."""
    import uvicorn

    config = get_config()
    logger.info(f"Starting staffalloc API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
