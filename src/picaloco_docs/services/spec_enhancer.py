# src/picaloco_docs/services/spec_enhancer.py

"""
Spec Enhancer

Overlays the Pica Loco branding onto the document PostgREST generates:
- info.title / description / version / contact are always ours
- any other info fields from the remote document are kept
- servers is replaced with a single entry pointing at the Supabase REST root

Pure: the input is never mutated, and the same input always gives the same output.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict

from opentelemetry import trace

from picaloco_docs.config import ServiceConfig

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

API_TITLE = "Pica Loco API"
API_DESCRIPTION = "Auto-generated API documentation for the Pica Loco mobile app backend"
API_VERSION = "1.0.0"
API_CONTACT = {
    "name": "Pica Loco Development Team",
    "url": "https://github.com/your-username/trainpixelfolio",
}
SERVER_DESCRIPTION = "Pica Loco API Server"


def info_overlay() -> Dict[str, Any]:
    return {
        "title": API_TITLE,
        "description": API_DESCRIPTION,
        "version": API_VERSION,
        "contact": dict(API_CONTACT),
    }


def server_entry(config: ServiceConfig) -> Dict[str, str]:
    return {"url": config.server_url, "description": SERVER_DESCRIPTION}


def enhance_spec(raw: Dict[str, Any], config: ServiceConfig) -> Dict[str, Any]:
    """
    Return a branded copy of `raw`.

    Args:
        raw: Document as returned by the fetcher
        config: Supplies the server URL

    Returns:
        New document; `raw` is left untouched
    """
    with tracer.start_as_current_span("spec.enhance") as span:
        enhanced = copy.deepcopy(raw)

        info = enhanced.get("info")
        if not isinstance(info, dict):
            info = {}
        enhanced["info"] = {**info, **info_overlay()}
        enhanced["servers"] = [server_entry(config)]

        span.set_attribute("spec.paths", len(enhanced.get("paths") or {}))
        logger.debug(f"Spec enhanced with {len(enhanced['info'])} info fields")
        return enhanced
