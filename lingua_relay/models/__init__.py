"""
Pydantic models for the HTTP surface of the relay.
"""

from .conversation import (
    ErrorResponse,
    MessageRequest,
    MessageResponse,
    StartConversationResponse,
)

__all__ = [
    "ErrorResponse",
    "MessageRequest",
    "MessageResponse",
    "StartConversationResponse",
]
