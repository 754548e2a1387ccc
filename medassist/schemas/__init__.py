from medassist.schemas.chat import ChatReply, ChatRequest

__all__ = [
    "ChatRequest",
    "ChatReply",
]
