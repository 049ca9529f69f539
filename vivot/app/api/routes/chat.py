"""Chat endpoints: trip generation and history."""

from typing import Annotated

from fastapi import APIRouter, Depends

from vivot.app.api.deps import ContextDep, StoreDep, enforce_rate_limit, get_generation_adapter
from vivot.app.generation.adapter import ItineraryGenerationAdapter
from vivot.app.models.chat import ChatMessage, ChatSendRequest, ChatSendResponse

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post(
    "/send",
    response_model=ChatSendResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def send_message(
    request: ChatSendRequest,
    ctx: ContextDep,
    adapter: Annotated[ItineraryGenerationAdapter, Depends(get_generation_adapter)],
) -> ChatSendResponse:
    """Send a chat message; a trip request creates and returns the trip.

    Raises:
        GenerationFailedError: 503 if the generator fails; nothing but the
            user's message is persisted
    """
    result = await adapter.generate(ctx, request.content)
    return ChatSendResponse(
        message=result.assistant_reply, trip=result.trip, activities=result.activities
    )


@router.get("/messages", response_model=list[ChatMessage])
async def list_messages(ctx: ContextDep, store: StoreDep) -> list[ChatMessage]:
    """The caller's chat history, oldest first."""
    return store.list_chat_messages(ctx.user_id)
