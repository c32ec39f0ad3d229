"""Provider discovery endpoint for the flow viewer.

Lists the LLM providers the execution service can use, i.e. those whose
credentials are present in the environment.
"""

from __future__ import annotations

from fastapi import APIRouter

from ..models import ProvidersResponse
from ..services.settings import available_providers

router = APIRouter(tags=["providers"])


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers() -> ProvidersResponse:
    return ProvidersResponse(providers=available_providers())
