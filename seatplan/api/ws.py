"""
WebSocket manager and the live layout editor channel
"""

import json
import logging
import secrets
from typing import Any, Dict, List
from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect

from seatplan.editor.drag import DragState
from seatplan.editor.editor import EditorSession
from seatplan.editor.errors import LayoutError
from seatplan.schemas.layout import table_to_view

logger = logging.getLogger(__name__)

LAYOUT_ROOM = "layout"
CHECKIN_ROOM = "checkin"

class WebSocketManager:
    """Manages WebSocket connections for real-time updates"""

    def __init__(self):
        # room -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, room: str):
        """Accept WebSocket connection and add it to a room"""
        await websocket.accept()

        if room not in self.active_connections:
            self.active_connections[room] = []

        self.active_connections[room].append(websocket)
        logger.info(f"WebSocket connected to {room}. Total connections: {len(self.active_connections[room])}")

    def disconnect(self, websocket: WebSocket, room: str):
        """Remove WebSocket connection from a room"""
        connections = self.active_connections.get(room)
        if connections and websocket in connections:
            connections.remove(websocket)
            logger.info(f"WebSocket disconnected from {room}. Remaining connections: {len(connections)}")

            # Clean up empty rooms
            if not connections:
                del self.active_connections[room]

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        """Send message to specific WebSocket"""
        try:
            await websocket.send_text(json.dumps(message, default=str))
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.error(f"Error sending personal message: {e}")

    async def broadcast_to_room(self, room: str, message: dict):
        """Broadcast message to all WebSockets in a room"""
        if room not in self.active_connections:
            logger.debug(f"No active connections for {room}")
            return

        # Create list copy to avoid modification during iteration
        connections = self.active_connections[room].copy()

        disconnected = []
        for websocket in connections:
            try:
                await websocket.send_text(json.dumps(message, default=str))
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.error(f"Error broadcasting to websocket: {e}")
                disconnected.append(websocket)

        # Clean up disconnected websockets
        for websocket in disconnected:
            self.disconnect(websocket, room)

    async def broadcast_layout_change(self, event: str, payload: Dict[str, Any]):
        """Editor change listener"""
        await self.broadcast_to_room(LAYOUT_ROOM, {"type": "layout_updated", "event": event, **payload})

    def get_connection_count(self, room: str) -> int:
        """Get number of active connections for a room"""
        return len(self.active_connections.get(room, []))

    def get_all_connection_counts(self) -> Dict[str, int]:
        """Get connection counts for all rooms"""
        return {
            room: len(connections)
            for room, connections in self.active_connections.items()
        }


# Router for WebSocket endpoints
router = APIRouter()


def _token_ok(websocket: WebSocket, token: str) -> bool:
    expected = websocket.app.state.context.settings.ADMIN_TOKEN
    return bool(token) and secrets.compare_digest(token, expected)


async def handle_editor_message(session: EditorSession, message: Dict[str, Any]) -> Dict[str, Any]:
    """Apply one client message to an editor session and build the reply"""
    kind = message.get("type")

    if kind == "ping":
        return {"type": "pong", "timestamp": message.get("timestamp")}

    if kind == "pointer_down":
        started = session.pointer_down(str(message.get("table_id")), float(message["x"]), float(message["y"]))
        if not started:
            return {"type": "error", "message": "Table not found"}
        return {"type": "drag", "state": session.drag.state.value, "table_id": session.drag.table_id}

    if kind == "pointer_move":
        table = session.pointer_move(float(message["x"]), float(message["y"]))
        if table is None:
            return {"type": "drag", "state": session.drag.state.value, "table_id": session.drag.table_id}
        return {"type": "table_moved", "table_id": table.id, "number": table.number, "x": table.x, "y": table.y}

    if kind in ("pointer_up", "pointer_leave"):
        if kind == "pointer_up":
            outcome = await session.pointer_up()
        else:
            outcome = await session.pointer_leave()
        return {
            "type": "gesture",
            "action": outcome.action.value,
            "table_number": outcome.table.number if outcome.table else None,
            "sync": session.editor.sync_state(),
        }

    if kind == "zoom":
        direction = message.get("direction")
        if direction == "in":
            session.zoom_in()
        elif direction == "out":
            session.zoom_out()
        elif direction == "reset":
            session.reset_zoom()
        elif "value" in message:
            session.set_zoom(float(message["value"]))
        return {"type": "zoom", "zoom": session.zoom}

    if kind == "select":
        table = session.select(message.get("table_number"))
        return {"type": "selection", "table": table_to_view(table).dict() if table else None}

    if kind == "search":
        result = session.search(
            message.get("query", ""),
            float(message.get("viewport_width", 0)),
            float(message.get("viewport_height", 0)),
        )
        if result is None:
            return {"type": "search_result", "found": False, "message": "No results"}
        return {
            "type": "search_result",
            "found": True,
            "table": table_to_view(result.table).dict(),
            "scroll_x": result.scroll_x,
            "scroll_y": result.scroll_y,
        }

    return {"type": "error", "message": f"Unknown message type: {kind}"}


@router.websocket("/layout")
async def layout_editor_endpoint(websocket: WebSocket, token: str = ""):
    """Live editor channel: pointer gestures, zoom, selection and search"""
    if not _token_ok(websocket, token):
        await websocket.close(code=4001, reason="Invalid admin token")
        return

    context = websocket.app.state.context
    manager: WebSocketManager = context.websocket_manager
    session = EditorSession(context.editor)

    await manager.connect(websocket, LAYOUT_ROOM)
    try:
        await manager.send_personal_message({
            "type": "connection",
            "message": "Connected to layout editor",
            "tables": [table_to_view(table).dict() for table in context.editor.layout],
            "zoom": session.zoom,
            "sync": context.editor.sync_state(),
        }, websocket)

        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received from WebSocket: {data}")
                continue

            try:
                reply = await handle_editor_message(session, message)
            except (LayoutError, KeyError, TypeError, ValueError) as e:
                reply = {"type": "error", "message": str(e)}
            await manager.send_personal_message(reply, websocket)

    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, LAYOUT_ROOM)
        # a drag cut off by a disconnect still lands where it was
        if session.drag.state != DragState.IDLE:
            await session.pointer_leave()


@router.websocket("/checkin")
async def checkin_endpoint(websocket: WebSocket, token: str = ""):
    """Receive check-in and check-out broadcasts"""
    if not _token_ok(websocket, token):
        await websocket.close(code=4001, reason="Invalid admin token")
        return

    manager: WebSocketManager = websocket.app.state.context.websocket_manager
    await manager.connect(websocket, CHECKIN_ROOM)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                client_message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received from WebSocket: {data}")
                continue
            if client_message.get("type") == "ping":
                await manager.send_personal_message(
                    {"type": "pong", "timestamp": client_message.get("timestamp")}, websocket
                )
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, CHECKIN_ROOM)


@router.get("/stats")
async def websocket_stats(request: Request):
    """Get WebSocket connection statistics (for debugging)"""
    manager: WebSocketManager = request.app.state.context.websocket_manager
    counts = manager.get_all_connection_counts()
    return {
        "total_rooms_with_connections": len(counts),
        "connection_counts": counts,
        "total_connections": sum(counts.values())
    }
