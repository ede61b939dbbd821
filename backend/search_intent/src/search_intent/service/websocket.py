from __future__ import annotations

import asyncio
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..config import settings
from ..models.schemas import (
    ClientClickOutsideMessage,
    ClientFocusMessage,
    ClientInputMessage,
    ClientKeyMessage,
    ClientSelectMessage,
    ClientSubmitMessage,
    Navigation,
    SearchBoxIncomingMessage,
    SessionState,
    Suggestion,
    WSErrorMessage,
    WSNavigateMessage,
    WSStateMessage,
)
from ..utils.session_store import SessionStore, get_session_store
from .search_box import SearchBox

logger = logging.getLogger(settings.SERVICE_NAME + ".websocket")
router = APIRouter(prefix=f"/{settings.API_VERSION}")

incoming_adapter: TypeAdapter = TypeAdapter(SearchBoxIncomingMessage)


def state_message(search_box: SearchBox) -> WSStateMessage:
    return WSStateMessage(
        query=search_box.query,
        is_open=search_box.is_open,
        dropdown_visible=search_box.dropdown_visible,
        selected_index=search_box.selected_index,
        is_loading=search_box.is_loading,
        items=search_box.displayed if search_box.dropdown_visible else [],
    )


class SearchBoxConnection:
    """One WebSocket client driving its own search box."""

    def __init__(self, websocket: WebSocket, session: SessionState):
        self.websocket = websocket
        self.session_id = session.session_id
        self.client_id = (
            f"{websocket.client.host}:{websocket.client.port}"
            if websocket.client
            else f"unknown-{uuid.uuid4()}"
        )
        self.outgoing_queue: asyncio.Queue[str] = asyncio.Queue(
            maxsize=settings.WEBSOCKET_MAX_QUEUE_SIZE
        )
        self.active: bool = True
        self.sender_task: Optional[asyncio.Task] = None
        self.search_box = SearchBox(
            self._on_navigate,
            show_suggestions=session.show_suggestions,
            on_suggestions=self._on_suggestions,
        )

    def send(self, message: BaseModel) -> None:
        """Puts a message onto the client's outgoing queue."""
        if not self.active:
            logger.warning(f"[{self.client_id}] Dropping message for inactive connection.")
            return
        try:
            self.outgoing_queue.put_nowait(message.model_dump_json())
        except asyncio.QueueFull:
            logger.warning(
                f"[{self.client_id}] Outgoing queue full for session {self.session_id}. Message dropped."
            )

    def send_state(self) -> None:
        self.send(state_message(self.search_box))

    def _on_navigate(self, navigation: Navigation) -> None:
        self.send(WSNavigateMessage(**navigation.model_dump()))

    def _on_suggestions(self, suggestions: List[Suggestion]) -> None:
        logger.debug(f"[{self.client_id}] Pushing {len(suggestions)} suggestions")
        self.send_state()

    async def handle_text(self, message_text: str) -> None:
        """Parse one client message, apply it to the search box and reply with the new state."""
        try:
            message = incoming_adapter.validate_json(message_text)
        except ValidationError as e:
            logger.warning(f"[{self.client_id}] Invalid client message: {message_text[:200]}")
            self.send(WSErrorMessage(message="Invalid message", detail=str(e)))
            return

        box = self.search_box
        if isinstance(message, ClientFocusMessage):
            box.focus()
        elif isinstance(message, ClientInputMessage):
            box.change(message.text)
        elif isinstance(message, ClientKeyMessage):
            box.key_down(message.key)
        elif isinstance(message, ClientSubmitMessage):
            box.submit()
        elif isinstance(message, ClientSelectMessage):
            box.select(message.index)
        elif isinstance(message, ClientClickOutsideMessage):
            box.click_outside()
        self.send_state()

    async def close(self) -> None:
        """Stops the sender and any pending suggestion computation."""
        if not self.active:
            return
        self.active = False
        self.search_box.dispose()
        if self.sender_task and not self.sender_task.done():
            self.sender_task.cancel()
            await asyncio.gather(self.sender_task, return_exceptions=True)
        logger.info(f"[{self.client_id}] Connection resources cleaned up for session {self.session_id}.")


async def _websocket_sender_task(client: SearchBoxConnection) -> None:
    """Sends messages from the client's outgoing queue to the WebSocket."""
    try:
        while client.active:
            message_json_str = await client.outgoing_queue.get()
            await client.websocket.send_text(message_json_str)
            client.outgoing_queue.task_done()
    except asyncio.CancelledError:
        logger.debug(f"[{client.client_id}] Sender task cancelled.")
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.info(f"[{client.client_id}] WebSocket closed during send: {e}")


@router.websocket("/ws/search/{session_id}")
async def search_box_endpoint(
    websocket: WebSocket,
    session_id: uuid.UUID = Path(..., description="Session created through POST /sessions."),
    store: SessionStore = Depends(get_session_store),
):
    """
    Live search box for a session. Each client event is answered with a
    `state` message; debounced suggestions arrive as extra `state` messages
    and navigations are announced with a `navigate` message.
    """
    session = await store.touch(session_id)
    if session is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unknown session")
        return

    await websocket.accept()
    client = SearchBoxConnection(websocket, session)
    client.sender_task = asyncio.create_task(_websocket_sender_task(client))
    logger.info(f"[{client.client_id}] Search box connected for session {session_id}")

    try:
        while True:
            message_text = await websocket.receive_text()
            await client.handle_text(message_text)
    except WebSocketDisconnect:
        logger.info(f"[{client.client_id}] WebSocket disconnected by client. Session: {session_id}")
    except Exception as e:
        logger.error(f"[{client.client_id}] Unexpected error for session {session_id}: {e}", exc_info=True)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="Internal server error")
    finally:
        await client.close()
