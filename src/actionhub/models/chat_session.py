from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from actionhub.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin


class ChatSession(Base, UUIDPrimaryKeyMixin, AuditMixin):
    """Conversation session whose identity and language seed an ActionContext."""

    __tablename__ = "chat_sessions"

    company_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    language: Mapped[str] = mapped_column(String(8), server_default="en", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default="true", nullable=False)
