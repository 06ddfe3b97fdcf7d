"""
Infrastructure Services

Inference provider adapters implementing the ChatService port.
"""
from .gemini_chat_service import GeminiChatService
from .openai_chat_service import OpenAIChatService
from .chat_service_factory import ChatServiceFactory

__all__ = [
    "GeminiChatService",
    "OpenAIChatService",
    "ChatServiceFactory",
]
