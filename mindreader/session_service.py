from typing import Dict, Optional
from fastapi import WebSocket
from pydantic import BaseModel
from starlette.websockets import WebSocketState
from loguru import logger

from .event_streamer import ReadyEvent, serialize_event
from .models import Role
from . import session_manager


class Session:
    def __init__(self, session_id: str):
        self.session_id = session_id
        self.connections: Dict[Role, WebSocket] = {}
        self.topic: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return Role.PERFORMER in self.connections and Role.OBSERVER in self.connections


class SessionService:
    """
    Maps session ids to the performer/observer sockets and the last topic.
    A session lives from the first join until both role slots are empty.
    """
    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def join(self, session_id: str, role: Role, websocket: WebSocket) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(session_id)
            self._sessions[session_id] = session
        session.connections[role] = websocket
        logger.info(f"{role.value} joined session: {session_id}")
        return session

    def leave(self, session_id: str, role: Role, websocket: WebSocket) -> bool:
        """
        Free the role slot if it still holds this socket.
        Returns True when the session was destroyed.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return False
        if session.connections.get(role) is websocket:
            del session.connections[role]
            logger.info(f"Connection closed: {role.value} in session {session_id}")
        if session.connections:
            return False

        del self._sessions[session_id]
        session_manager.drop_buffer(session_id)
        logger.info(f"Cleaned up session: {session_id}")
        return True

    async def send(self, session_id: str, role: Role, event: BaseModel) -> bool:
        session = self._sessions.get(session_id)
        websocket = session.connections.get(role) if session else None
        if websocket is None or websocket.client_state != WebSocketState.CONNECTED:
            return False
        try:
            await websocket.send_text(serialize_event(event))
            return True
        except Exception as e:
            logger.warning(f"Failed to send {getattr(event, 'type', 'event')} to {role.value} in {session_id}: {e}")
            return False

    async def broadcast(self, session_id: str, event: BaseModel) -> None:
        for role in (Role.PERFORMER, Role.OBSERVER):
            await self.send(session_id, role, event)

    async def announce_ready(self, session_id: str) -> bool:
        session = self._sessions.get(session_id)
        if not session or not session.is_ready:
            return False
        logger.info(f"Both users ready in session: {session_id}")
        await self.broadcast(session_id, ReadyEvent())
        return True

    def set_topic(self, session_id: str, topic: str) -> None:
        session = self._sessions.get(session_id)
        if session:
            session.topic = topic

    def get_topic(self, session_id: str) -> str | None:
        session = self._sessions.get(session_id)
        return session.topic if session else None

    def clear_topic(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session:
            session.topic = None
            logger.info(f"Topic cleared for session: {session_id}")

    def reset(self) -> None:
        self._sessions.clear()


session_service = SessionService()
