"""Chat history and spectator WebSocket endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect

from coordinator.exceptions import StoreUnavailable
from coordinator.services import CoordinatorServices
from coordinator.web.dependencies import get_services
from coordinator.web.responses import MessageResponse, RoomResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
ws_router = APIRouter()


@router.get("/chat/{debate_id}", response_model=list[MessageResponse])
async def get_chat_messages(
    debate_id: int, services: CoordinatorServices = Depends(get_services)
):
    """Full ordered message history of a debate; empty for unknown debates."""
    try:
        messages = await services.chat.get_chat_history(debate_id)
    except StoreUnavailable as e:
        logger.error(f"Error getting chat messages for debate {debate_id}: {e}")
        raise HTTPException(status_code=503, detail="Failed to get chat messages")
    return [MessageResponse.from_message(m) for m in messages]


@router.get("/debates/{debate_id}/room", response_model=RoomResponse)
async def get_debate_room(
    debate_id: int, services: CoordinatorServices = Depends(get_services)
):
    """Resolve the chat room of a debate."""
    try:
        room_id = await services.store.room_id_for(debate_id)
        if room_id is None:
            raise HTTPException(
                status_code=404, detail=f"No chat room exists for debate {debate_id}"
            )
        messages = await services.store.all_messages(room_id)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return RoomResponse(debate_id=debate_id, room_id=room_id, message_count=len(messages))


@ws_router.websocket("/ws/chat/{debate_id}")
async def chat_websocket(websocket: WebSocket, debate_id: int):
    """WebSocket endpoint for live chat messages of a debate."""
    await websocket.accept()
    feed = websocket.app.state.services.feed
    feed.add_connection(debate_id, websocket)

    try:
        await websocket.send_json({"type": "connected", "debate_id": debate_id})

        # Keep connection alive
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        feed.remove_connection(debate_id, websocket)
