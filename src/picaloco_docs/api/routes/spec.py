from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from picaloco_docs.api.dependencies.provider import get_spec_provider
from picaloco_docs.services.spec_provider import SpecProvider, SpecUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Spec"])

SPEC_ERROR = "Failed to fetch OpenAPI specification"


@router.get("/spec")
async def get_api_spec(provider: Optional[SpecProvider] = Depends(get_spec_provider)):
    """
    The enhanced OpenAPI document.

    Served from cache while fresh, otherwise fetched again. A failed fetch
    falls back to the last good copy; with none, responds 500.
    """
    if provider is None:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": SPEC_ERROR, "details": "Service configuration is missing"},
        )

    try:
        document = await provider.get_spec()
    except SpecUnavailableError as e:
        logger.error(f"API spec fetch error: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": SPEC_ERROR,
                "kind": e.failure.kind.value,
                "details": e.failure.detail,
                "supabase_url": provider.config.supabase_url,
            },
        )

    return JSONResponse(content=document)
