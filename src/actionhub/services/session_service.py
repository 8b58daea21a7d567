"""Session lookup turning a dispatch identity into an ActionContext."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from actionhub.actions.types import ActionContext
from actionhub.models.chat_session import ChatSession

logger = logging.getLogger(__name__)


class SessionService:
    """Resolves chat sessions for the dispatcher.

    Args:
        db: Async SQLAlchemy session for database operations.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_session(self, session_id: str) -> ChatSession | None:
        result = await self.db.execute(select(ChatSession).where(ChatSession.id == session_id))
        return result.scalar_one_or_none()

    async def get_current_session(self, user_id: str, company_id: str) -> ChatSession | None:
        """Return the user's most recently updated active session in a company."""
        result = await self.db.execute(
            select(ChatSession)
            .where(
                ChatSession.user_id == user_id,
                ChatSession.company_id == company_id,
                ChatSession.is_active.is_(True),
            )
            .order_by(ChatSession.updated_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def resolve(self, session_id: str, company_id: str) -> ActionContext:
        """Build the context for a dispatch call.

        Follows the user's current active session when it differs from
        ``session_id``. An unknown session yields a bare context carrying
        the given ids.
        """
        session = await self.get_session(session_id)
        if session is None:
            logger.warning("Session %s not found; using bare context", session_id)
            return ActionContext(session_id=session_id, company_id=company_id)

        if session.user_id:
            current = await self.get_current_session(session.user_id, company_id)
            if current is not None and current.id != session.id:
                logger.info("Session %s superseded by %s", session.id, current.id)
                session = current

        return ActionContext(
            session_id=str(session.id),
            company_id=company_id,
            language=session.language,
            user_id=session.user_id,
        )
