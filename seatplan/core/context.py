"""
Application context: everything the routes share, built once per app
"""

import logging
from typing import Optional

from fastapi import Request

from seatplan.api.ws import WebSocketManager
from seatplan.core.config import Settings, settings as default_settings
from seatplan.core.db import Base, make_engine, make_session_factory
from seatplan.editor.cache import LayoutCache
from seatplan.editor.editor import LayoutEditor
from seatplan.services.checkin_service import CheckInService
from seatplan.services.layout_store import LayoutStore, get_layout_store

logger = logging.getLogger(__name__)


class AppContext:
    def __init__(self, settings: Optional[Settings] = None, layout_store: Optional[LayoutStore] = None):
        self.settings = settings or default_settings
        self.engine = make_engine(self.settings.DATABASE_URL)
        self.session_factory = make_session_factory(self.engine)
        self.layout_store = layout_store or get_layout_store(self.settings, self.session_factory)
        self.editor = LayoutEditor(
            self.layout_store,
            cache=LayoutCache(self.settings.LAYOUT_CACHE_PATH),
            debounce_delay=self.settings.LAYOUT_SAVE_DEBOUNCE_SECONDS,
            retry_attempts=self.settings.LAYOUT_SAVE_RETRIES,
            retry_backoff=self.settings.LAYOUT_SAVE_BACKOFF_SECONDS,
        )
        self.websocket_manager = WebSocketManager()
        self.checkin_service = CheckInService(self.websocket_manager)

    async def startup(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created")
        self.editor.add_listener(self.websocket_manager.broadcast_layout_change)
        await self.editor.load()

    async def shutdown(self) -> None:
        await self.editor.close()
        self.engine.dispose()
        logger.info("Application shutdown")


def get_context(request: Request) -> AppContext:
    return request.app.state.context
