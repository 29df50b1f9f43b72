"""
Outbound relays (LLM, email) and the assistant's chat history.
"""

from interviewiq.integrations.llm import GeminiClient, LLMReply, FALLBACK_REPLY
from interviewiq.integrations.notifications import EmailNotifier
from interviewiq.integrations.chat_history import ChatHistory, ChatHistoryRepository, ChatMessage

__all__ = [
    "GeminiClient",
    "LLMReply",
    "FALLBACK_REPLY",
    "EmailNotifier",
    "ChatHistory",
    "ChatHistoryRepository",
    "ChatMessage",
]
