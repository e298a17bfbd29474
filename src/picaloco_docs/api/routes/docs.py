# src/picaloco_docs/api/routes/docs.py

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse

from opentelemetry import trace

from picaloco_docs.api.dependencies.provider import get_spec_provider
from picaloco_docs.metrics import fallback_served_total
from picaloco_docs.services.fallback_spec import build_placeholder_spec
from picaloco_docs.services.spec_provider import SpecProvider

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DOCS_PATH = "/docs"
DOCS_SPEC_PATH = f"{DOCS_PATH}/spec.json"
SITE_TITLE = "Pica Loco API Documentation"

CUSTOM_CSS = """
.swagger-ui .topbar { display: none; }
.swagger-ui .info .title {
  color: #3ECF8E;
  font-family: 'Inter', sans-serif;
}
.swagger-ui .scheme-container {
  background: #1a1a1a;
  border: 1px solid #3ECF8E;
}
"""

SWAGGER_UI_PARAMETERS = {
    "docExpansion": "list",
    "filter": True,
    "displayRequestDuration": True,
}

router = APIRouter(prefix=DOCS_PATH, tags=["Documentation"])


def render_docs_page() -> HTMLResponse:
    """Swagger UI page bound to DOCS_SPEC_PATH, with our styling injected."""
    page = get_swagger_ui_html(
        openapi_url=DOCS_SPEC_PATH,
        title=SITE_TITLE,
        swagger_ui_parameters=SWAGGER_UI_PARAMETERS,
    )
    html = page.body.decode("utf-8")
    html = html.replace("</head>", f"<style>{CUSTOM_CSS}</style>\n</head>", 1)
    return HTMLResponse(content=html)


@router.get("", response_class=HTMLResponse, include_in_schema=False)
async def docs_ui():
    return render_docs_page()


@router.get("/spec.json", include_in_schema=False)
async def docs_spec(provider: Optional[SpecProvider] = Depends(get_spec_provider)):
    """
    Document backing the UI. Returns immediately with whatever is installed:
    the enhanced spec, a last-good copy, or the placeholder.
    """
    with tracer.start_as_current_span("docs.spec") as span:
        if provider is None:
            logger.warning("Docs requested without a configured provider; serving placeholder")
            fallback_served_total.inc()
            span.set_attribute("docs.placeholder", True)
            return JSONResponse(content=build_placeholder_spec())

        document = provider.docs_document()
        span.set_attribute("docs.placeholder", not provider.has_spec)
        return JSONResponse(content=document)
