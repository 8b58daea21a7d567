from actionhub.models.api_key import ApiKey
from actionhub.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin
from actionhub.models.chat_session import ChatSession

__all__ = [
    "Base",
    "UUIDPrimaryKeyMixin",
    "AuditMixin",
    "ApiKey",
    "ChatSession",
]
