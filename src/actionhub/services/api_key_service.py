"""Credential store backed by the ``api_keys`` table.

Integration actions read their credentials through ``ActionContext``, which
delegates to ``ApiKeyService.get_api_key``. Writes tag each key with the
integration that declares it, using the registry's credential index.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from actionhub.integrations.registry import IntegrationRegistry
from actionhub.models.api_key import ApiKey

logger = logging.getLogger(__name__)


class ApiKeyService:
    """Service for per-company credential storage.

    Args:
        db: Async SQLAlchemy session for database operations.
        registry: Registry used to validate and attribute credential keys.
    """

    def __init__(self, db: AsyncSession, registry: IntegrationRegistry | None = None) -> None:
        self.db = db
        self.registry = registry

    async def _get_record(self, company_id: str, key_name: str) -> ApiKey | None:
        result = await self.db.execute(
            select(ApiKey).where(ApiKey.company_id == company_id, ApiKey.key == key_name)
        )
        return result.scalar_one_or_none()

    async def get_api_key(self, company_id: str, key_name: str) -> str | None:
        """Return the stored credential value, or ``None`` if not configured."""
        record = await self._get_record(company_id, key_name)
        return record.value if record is not None else None

    async def set_api_key(self, company_id: str, key_name: str, value: str) -> ApiKey:
        """Create or replace a company's credential.

        Args:
            company_id: Owning company.
            key_name: Credential identifier declared by an integration.
            value: Credential value (sensitive data).

        Returns:
            The stored ApiKey record.

        Raises:
            ValueError: If a registry is configured and no integration
                declares ``key_name``.
        """
        integration: str | None = None
        if self.registry is not None:
            integration = self.registry.get_integration_id_for_api_key(key_name)
            if integration is None:
                raise ValueError(f"Unknown credential key: {key_name}")

        record = await self._get_record(company_id, key_name)
        if record is None:
            record = ApiKey(company_id=company_id, key=key_name, value=value, integration=integration)
            self.db.add(record)
        else:
            record.value = value
            record.integration = integration

        await self.db.commit()
        await self.db.refresh(record)
        logger.info("Stored credential %s for company %s", key_name, company_id)
        return record

    async def list_api_keys(self, company_id: str) -> list[ApiKey]:
        """List a company's credentials ordered by key."""
        result = await self.db.execute(
            select(ApiKey).where(ApiKey.company_id == company_id).order_by(ApiKey.key.asc())
        )
        return list(result.scalars().all())

    async def delete_api_key(self, company_id: str, key_name: str) -> None:
        """Hard-delete a company's credential.

        Raises:
            ValueError: If the credential is not found.
        """
        record = await self._get_record(company_id, key_name)
        if record is None:
            raise ValueError(f"Credential not found: {key_name}")

        await self.db.delete(record)
        await self.db.commit()
