import json
from fastapi import WebSocket, WebSocketDisconnect
from loguru import logger
from pydantic import ValidationError

from .asr import finalize_window, start_window
from .errors import PipelineError
from .event_streamer import JoinedEvent, SummaryEvent, ErrorEvent, error_event, serialize_event
from .models import JoinMessage, ManualEndMessage, ManualStartMessage, Role, TopicSearchedMessage
from .session_service import session_service


async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    logger.info("New WebSocket connection")
    session_id: str | None = None
    role: Role | None = None
    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_text(serialize_event(ErrorEvent(message="Invalid JSON")))
                continue
            if not isinstance(msg, dict):
                await websocket.send_text(serialize_event(ErrorEvent(message="Invalid message")))
                continue

            msg_type = msg.get("type")
            try:
                if msg_type == "join":
                    join = JoinMessage(**msg)
                    if session_id and role and (session_id, role) != (join.sessionId, join.role):
                        session_service.leave(session_id, role, websocket)
                    session_id, role = join.sessionId, join.role
                    await handle_join(websocket, join)
                elif msg_type == "manual_start":
                    start = ManualStartMessage(**msg)
                    logger.info(f"========== MANUAL START ({start.sessionId}) ==========")
                    await start_window(start.sessionId, start.startKeyword, start.endKeyword, start.language)
                elif msg_type == "manual_end":
                    end = ManualEndMessage(**msg)
                    logger.info(f"========== MANUAL STOP ({end.sessionId}) ==========")
                    try:
                        finalize_window(end.sessionId, end.language)
                    except PipelineError as e:
                        logger.info(f"Manual stop with nothing to process: {e.code}")
                        await session_service.send(end.sessionId, Role.PERFORMER, error_event(e))
                elif msg_type == "topic_searched":
                    searched = TopicSearchedMessage(**msg)
                    session_service.clear_topic(searched.sessionId)
                else:
                    await websocket.send_text(serialize_event(ErrorEvent(message="Unknown message type")))
            except ValidationError as e:
                logger.warning(f"Invalid {msg_type} message: {e.errors()}")
                await websocket.send_text(serialize_event(ErrorEvent(message=f"Invalid {msg_type} message")))
    except WebSocketDisconnect:
        pass
    finally:
        if session_id and role:
            session_service.leave(session_id, role, websocket)


async def handle_join(websocket: WebSocket, join: JoinMessage) -> None:
    session_service.join(join.sessionId, join.role, websocket)
    await websocket.send_text(serialize_event(JoinedEvent(sessionId=join.sessionId, role=join.role.value)))

    cached_topic = session_service.get_topic(join.sessionId)
    if join.role == Role.OBSERVER and cached_topic:
        await websocket.send_text(serialize_event(SummaryEvent(topic=cached_topic)))
        logger.info("Sent stored topic to reconnected observer")

    await session_service.announce_ready(join.sessionId)
