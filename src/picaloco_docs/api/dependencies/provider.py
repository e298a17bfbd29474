from typing import Optional

from fastapi import Request

from picaloco_docs.services.spec_provider import SpecProvider


def get_spec_provider(request: Request) -> Optional[SpecProvider]:
    """
    The SpecProvider wired by the app lifespan, or None when the app is
    running without configuration (routes degrade instead of crashing).
    """
    return getattr(request.app.state, "spec_provider", None)
