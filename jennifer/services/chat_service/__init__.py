"""Chat Service: the HTTP relay between the browser UI and the model.

Components:
- config.py: ChatServiceConfig loaded from the environment
- relay.py: ChatRelay, one exchange end to end
- handler.py: Flask endpoints (/api/chat, /api/clear, /health, /ready)

Usage:
    python -m jennifer.services.chat_service.handler
"""

from .config import ChatServiceConfig
from .relay import ChatRelay, ChatReply, FALLBACK_MESSAGE

__all__ = [
    "ChatServiceConfig",
    "ChatRelay",
    "ChatReply",
    "FALLBACK_MESSAGE",
]
