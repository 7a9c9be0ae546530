"""
Event Seating Service - FastAPI Backend
Main application entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from seatplan.core.config import settings
from seatplan.core.context import AppContext
from seatplan.api import routes_admin, routes_checkin, routes_public, ws

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the application around a context (a fresh one by default)"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        await app.state.context.startup()
        logger.info(f"Layout ready ({app.state.context.editor.sync_state()['status']})")
        yield
        await app.state.context.shutdown()

    app = FastAPI(
        title="Event Seating Service",
        description="Guest registration, table layout editing and event-day check-in",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.context = context or AppContext()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app.state.context.settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(routes_public.router, tags=["public"])
    app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])
    app.include_router(routes_checkin.router, prefix="/checkin", tags=["checkin"])
    app.include_router(ws.router, prefix="/ws", tags=["websocket"])

    return app

app = create_app()

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
