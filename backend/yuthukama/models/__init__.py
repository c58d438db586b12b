# backend/yuthukama/models/__init__.py
from .user import User
from .conversation import Conversation
from .message import Message

__all__ = ["User", "Conversation", "Message"]
