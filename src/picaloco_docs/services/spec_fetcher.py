"""
Remote spec fetcher.

Retrieves the auto-generated OpenAPI document that Supabase (PostgREST) serves
at `{SUPABASE_URL}/rest/v1/`. One request per call, no retries: retry policy
belongs to the caller.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx
from opentelemetry import trace

from picaloco_docs.config import ServiceConfig
from picaloco_docs.metrics import spec_fetch_total

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# How much of an error response body we keep for diagnostics
BODY_PREVIEW_CHARS = 200


class FetchErrorKind(str, enum.Enum):
    """Why a fetch did not produce a document."""
    REMOTE_REJECTED = "remote_rejected"
    REMOTE_UNREACHABLE = "remote_unreachable"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class FetchSuccess:
    document: Dict[str, Any]

    ok = True


@dataclass(frozen=True)
class FetchFailure:
    kind: FetchErrorKind
    detail: Optional[str] = None
    status_code: Optional[int] = None

    ok = False

    @property
    def message(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value


FetchOutcome = Union[FetchSuccess, FetchFailure]


class SpecFetcher:
    """Fetches the raw OpenAPI document from the Supabase REST endpoint."""

    def __init__(
        self,
        config: ServiceConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        # Injected in tests (httpx.MockTransport); None means real network
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        key = self.config.supabase_anon_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/openapi+json, application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.fetch_timeout_seconds,
            transport=self.transport,
        )

    async def fetch(self) -> FetchOutcome:
        """
        Issue one GET for the spec and classify the result.

        Never raises for remote problems; every failure comes back as a
        FetchFailure with a redacted detail string.
        """
        with tracer.start_as_current_span("spec.fetch") as span:
            logger.info(f"Fetching spec from {self.config.spec_url}?apikey=***")

            outcome = await self._fetch()

            if outcome.ok:
                spec_fetch_total.labels(outcome="success").inc()
                span.set_attribute("spec.paths", len(outcome.document.get("paths") or {}))
            else:
                spec_fetch_total.labels(outcome=outcome.kind.value).inc()
                span.set_attribute("fetch.error_kind", outcome.kind.value)
                if outcome.status_code is not None:
                    span.set_attribute("http.status_code", outcome.status_code)
                logger.error(f"Failed to fetch OpenAPI spec: {outcome.message}")

            return outcome

    async def _fetch(self) -> FetchOutcome:
        try:
            async with self._client() as client:
                response = await client.get(
                    self.config.spec_url,
                    params={"apikey": self.config.supabase_anon_key},
                    headers=self._headers(),
                )
        except httpx.DecodingError as e:
            # Body arrived but its Content-Encoding could not be decoded
            return FetchFailure(
                kind=FetchErrorKind.MALFORMED_RESPONSE,
                detail=self.config.redact(f"{type(e).__name__}: {e}"),
            )
        except httpx.RequestError as e:
            # DNS, refused connections, timeouts, protocol errors
            return FetchFailure(
                kind=FetchErrorKind.REMOTE_UNREACHABLE,
                detail=self.config.redact(f"{type(e).__name__}: {e}"),
            )

        logger.info(f"Supabase response status: {response.status_code}")

        if not response.is_success:
            body = response.text[:BODY_PREVIEW_CHARS]
            return FetchFailure(
                kind=FetchErrorKind.REMOTE_REJECTED,
                detail=self.config.redact(
                    f"HTTP {response.status_code}: {response.reason_phrase} - {body}"
                ),
                status_code=response.status_code,
            )

        try:
            document = response.json()
        except ValueError as e:
            return FetchFailure(
                kind=FetchErrorKind.MALFORMED_RESPONSE,
                detail=self.config.redact(f"Response body is not valid JSON: {e}"),
                status_code=response.status_code,
            )

        if not isinstance(document, dict):
            return FetchFailure(
                kind=FetchErrorKind.MALFORMED_RESPONSE,
                detail="JSON root must be an object",
                status_code=response.status_code,
            )

        logger.info(f"Spec received, paths count: {len(document.get('paths') or {})}")
        return FetchSuccess(document=document)

    async def check_connection(self) -> bool:
        """
        Cheap reachability check used by /health.

        True when the backend answers the REST root with a 2xx.
        """
        with tracer.start_as_current_span("spec.check_connection") as span:
            try:
                async with self._client() as client:
                    response = await client.get(
                        self.config.spec_url,
                        headers={"apikey": self.config.supabase_anon_key},
                    )
            except httpx.RequestError as e:
                # Includes undecodable bodies: nothing usable came back
                logger.warning(f"Supabase unreachable: {self.config.redact(str(e))}")
                span.set_attribute("backend.connected", False)
                return False

            connected = response.is_success
            span.set_attribute("backend.connected", connected)
            if not connected:
                logger.warning(f"Supabase health check returned HTTP {response.status_code}")
            return connected
