"""
Assistant Controller

HTTP routes for the interview-prep assistant and its saved conversations.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from interviewiq.api import APIResponse
from interviewiq.common.error_handling import NotFoundError
from interviewiq.common.logger import app_logger
from interviewiq.integrations.chat_history import ChatHistory
from interviewiq.services import ServiceContainer, get_services

logger = app_logger.getChild("integrations.controller")

router = APIRouter()


class ChatRequest(BaseModel):
    """A prompt for the assistant."""
    prompt: str = Field(..., min_length=1, description="User prompt")
    history_id: Optional[str] = Field(None, description="Conversation to append the exchange to")


class ChatMessageModel(BaseModel):
    role: str
    content: str
    timestamp: Optional[str] = None


class ChatHistoryModel(BaseModel):
    """A conversation as sent by the client."""
    id: str = Field(..., min_length=1)
    title: Optional[str] = None
    messages: List[ChatMessageModel] = []
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


@router.post("/chat", summary="Ask the assistant")
async def chat(request: ChatRequest, services: ServiceContainer = Depends(get_services)):
    """
    Relay the prompt to the LLM and save the exchange.

    A failed relay still answers 200 with the fallback reply and the
    error message.
    """
    reply = await services.llm.generate(request.prompt)
    history = await services.chat_history.append_exchange(request.history_id, request.prompt, reply.text)
    return APIResponse.success({"reply": reply.to_dict(), "historyId": history.id})


@router.get("/history", summary="List saved conversations")
async def list_history(services: ServiceContainer = Depends(get_services)):
    histories = await services.chat_history.list()
    return APIResponse.success([history.to_dict() for history in histories])


@router.post("/history", summary="Save a conversation")
async def save_history(request: ChatHistoryModel, services: ServiceContainer = Depends(get_services)):
    history = ChatHistory.from_dict(request.dict(exclude_none=True))
    saved = await services.chat_history.save(history)
    return APIResponse.success(saved.to_dict(), message="Conversation saved")


@router.delete("/history/{history_id}", summary="Delete a conversation")
async def delete_history(history_id: str, services: ServiceContainer = Depends(get_services)):
    if not await services.chat_history.delete(history_id):
        raise NotFoundError(f"Conversation {history_id} not found", details={"history_id": history_id})
    return APIResponse.success({"id": history_id}, message="Conversation deleted")
