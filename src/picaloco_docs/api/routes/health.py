# src/picaloco_docs/api/routes/health.py

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from picaloco_docs.api.dependencies.provider import get_spec_provider
from picaloco_docs.config import REQUIRED_ENV_VARS
from picaloco_docs.services.spec_provider import SpecProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "Pica Loco API Documentation"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _init_error(provider: SpecProvider) -> Optional[str]:
    return provider.last_error.message if provider.last_error else None


@router.get("/health")
async def health_check(provider: Optional[SpecProvider] = Depends(get_spec_provider)):
    """
    healthy   - Supabase reachable and the real spec is cached
    degraded  - Supabase reachable but only the placeholder is available
    unhealthy - Supabase unreachable/rejecting, or no configuration (503)
    """
    if provider is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "service": SERVICE_NAME,
                "timestamp": _now_iso(),
                "error": "Required configuration is missing",
            },
        )

    connected = await provider.fetcher.check_connection()

    if not connected:
        logger.warning("Health check: Supabase disconnected")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "service": SERVICE_NAME,
                "timestamp": _now_iso(),
                "supabase": "disconnected",
                "supabase_url": provider.config.supabase_url,
                "has_spec": provider.has_spec,
                "init_error": _init_error(provider),
            },
        )

    return {
        "status": "healthy" if provider.has_spec else "degraded",
        "service": SERVICE_NAME,
        "timestamp": _now_iso(),
        "supabase": "connected",
        "supabase_url": provider.config.supabase_url,
        "has_spec": provider.has_spec,
        "init_error": _init_error(provider),
    }


@router.get("/debug")
async def debug_info(provider: Optional[SpecProvider] = Depends(get_spec_provider)):
    """Configuration presence and cache state. Never includes secret values."""
    if provider is None:
        environment = {name: "Set" if os.getenv(name) else "Missing" for name in REQUIRED_ENV_VARS}
        environment["APP_ENV"] = os.getenv("APP_ENV", "not set")
        return {
            "environment": environment,
            "cache": {"has_cached_spec": False, "cache_time": None},
            "init_error": "Required configuration is missing",
            "timestamp": _now_iso(),
        }

    config = provider.config
    entry = provider.cache.entry
    return {
        "environment": {
            "SUPABASE_URL": "Set",
            "SUPABASE_ANON_KEY": "Set",
            "APP_ENV": config.environment,
        },
        "cache": {
            "has_cached_spec": entry is not None,
            "cache_time": entry.fetched_at.isoformat() if entry else None,
            "is_fresh": provider.cache.is_fresh(config.cache_ttl),
            "ttl_seconds": config.cache_ttl_seconds,
            "refreshing": provider.refreshing,
        },
        "init_error": _init_error(provider),
        "timestamp": _now_iso(),
    }
