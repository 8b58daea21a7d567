"""Company credential endpoints.

Values are write-only: listing returns which keys are configured and the
integration that declares them, never the secrets themselves.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from actionhub.api.deps import get_api_key_service, get_company_id
from actionhub.models.api_key import ApiKey
from actionhub.schemas.jsonapi import (
    JSONAPIListResponse,
    JSONAPIResource,
    JSONAPISingleResponse,
)
from actionhub.services.api_key_service import ApiKeyService

router = APIRouter()


class SetCredentialRequest(BaseModel):
    """Request body for storing a credential."""

    value: str = Field(..., min_length=1)


def _credential_resource(record: ApiKey) -> JSONAPIResource:
    """Build a JSON:API resource object from an ApiKey, omitting its value."""
    return JSONAPIResource(
        type="credentials",
        id=record.key,
        attributes={
            "integration": record.integration,
            "updated_at": record.updated_at.isoformat() if record.updated_at else None,
        },
    )


@router.get("")
async def list_credentials(
    company_id: str = Depends(get_company_id),
    service: ApiKeyService = Depends(get_api_key_service),
) -> JSONAPIListResponse:
    """List the company's configured credential keys."""
    records = await service.list_api_keys(company_id)
    return JSONAPIListResponse(data=[_credential_resource(r) for r in records])


@router.put("/{key_name}")
async def set_credential(
    key_name: str,
    body: SetCredentialRequest,
    company_id: str = Depends(get_company_id),
    service: ApiKeyService = Depends(get_api_key_service),
) -> JSONAPISingleResponse:
    """Store a credential declared by one of the registered integrations."""
    try:
        record = await service.set_api_key(company_id, key_name, body.value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONAPISingleResponse(data=_credential_resource(record))


@router.delete("/{key_name}", status_code=204)
async def delete_credential(
    key_name: str,
    company_id: str = Depends(get_company_id),
    service: ApiKeyService = Depends(get_api_key_service),
) -> None:
    """Hard-delete a credential."""
    try:
        await service.delete_api_key(company_id, key_name)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
