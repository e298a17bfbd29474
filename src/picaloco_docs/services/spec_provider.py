"""
Spec provider: the one place that knows which document to serve.

Two ways to read:
- get_spec(): pull. Fresh cache, else fetch now, else last-good, else error.
  Used by /api/spec.
- docs_document(): push. Returns whatever document is installed without
  waiting; a stale cache only schedules a background refresh. Used by the
  documentation UI so it renders before any remote call completes.

Refreshes are asyncio tasks. Concurrent callers share the in-flight task, and
its result is delivered back through the task's done-callback, which swaps the
installed document. Nothing is edited in place.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from opentelemetry import trace

from picaloco_docs.config import ServiceConfig
from picaloco_docs.metrics import fallback_served_total
from picaloco_docs.services.fallback_spec import build_placeholder_spec
from picaloco_docs.services.spec_cache import SpecCache
from picaloco_docs.services.spec_enhancer import enhance_spec
from picaloco_docs.services.spec_fetcher import (
    FetchErrorKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    SpecFetcher,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class SpecUnavailableError(Exception):
    """No document could be produced: the fetch failed and nothing is cached."""

    def __init__(self, failure: FetchFailure):
        super().__init__(failure.message)
        self.failure = failure


class SpecProvider:
    def __init__(
        self,
        config: ServiceConfig,
        fetcher: SpecFetcher,
        cache: Optional[SpecCache] = None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.cache = cache if cache is not None else SpecCache()
        self.last_error: Optional[FetchFailure] = None
        self._installed: Dict[str, Any] = build_placeholder_spec(config)
        self._inflight: Optional[asyncio.Task] = None

    @property
    def installed(self) -> Dict[str, Any]:
        return self._installed

    @property
    def has_spec(self) -> bool:
        return self.cache.entry is not None

    @property
    def refreshing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def start(self) -> asyncio.Task:
        """Serve the placeholder now and load the real spec in the background."""
        logger.info(f"Starting initial spec load from {self.config.spec_url}")
        return self.schedule_refresh()

    def schedule_refresh(self) -> asyncio.Task:
        """Start a refresh unless one is already running. Returns the running task."""
        if self._inflight is None or self._inflight.done():
            task = asyncio.get_running_loop().create_task(self._refresh())
            task.add_done_callback(self._deliver)
            self._inflight = task
        return self._inflight

    async def refresh(self) -> FetchOutcome:
        # shield: a caller going away must not cancel a fetch others wait on
        return await asyncio.shield(self.schedule_refresh())

    async def _refresh(self) -> FetchOutcome:
        with tracer.start_as_current_span("spec.refresh") as span:
            try:
                outcome = await self.fetcher.fetch()
            except Exception as e:
                logger.exception("Unexpected error while fetching spec")
                outcome = FetchFailure(
                    kind=FetchErrorKind.REMOTE_UNREACHABLE,
                    detail=self.config.redact(f"Unexpected {type(e).__name__}: {e}"),
                )

            if not outcome.ok:
                self.last_error = outcome
                span.set_attribute("refresh.ok", False)
                return outcome

            document = enhance_spec(outcome.document, self.config)
            self.cache.put(document)
            self.last_error = None
            span.set_attribute("refresh.ok", True)
            logger.info(f"Spec cached with {len(document.get('paths') or {})} paths")
            return FetchSuccess(document=document)

    def _deliver(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Spec refresh crashed", exc_info=exc)
            return

        outcome = task.result()
        if outcome.ok:
            self._installed = outcome.document
            logger.info("Documentation switched to the fetched spec")
        elif not self.has_spec:
            # Keep a last-good document installed; otherwise explain the failure
            self._installed = build_placeholder_spec(self.config, error=outcome.message)

    async def get_spec(self) -> Dict[str, Any]:
        """
        Current spec for direct consumers.

        Raises SpecUnavailableError when the fetch fails and nothing was ever cached.
        """
        cached = self.cache.get_fresh(self.config.cache_ttl)
        if cached is not None:
            return cached

        outcome = await self.refresh()
        if outcome.ok:
            return outcome.document

        stale = self.cache.get()
        if stale is not None:
            logger.warning(f"Serving stale spec after failed refresh: {outcome.message}")
            return stale

        raise SpecUnavailableError(outcome)

    def docs_document(self) -> Dict[str, Any]:
        """Best document available right now. Never waits, never raises."""
        if not self.cache.is_fresh(self.config.cache_ttl):
            self.schedule_refresh()
        if not self.has_spec:
            fallback_served_total.inc()
        return self._installed

    async def aclose(self) -> None:
        """Let an in-flight refresh run to completion before shutdown."""
        task = self._inflight
        if task is not None and not task.done():
            logger.info("Waiting for in-flight spec refresh before shutdown")
            await asyncio.wait([task])
