"""Routes for enforcement lookups."""

from fastapi import APIRouter, HTTPException

from compliance_engine.core.config import get_settings
from compliance_engine.runtime import ComplianceEnforcer, LookupCache, StaticHost
from compliance_engine.sources import DocumentLoader
from .models import LookupRequest, LookupResponse

router = APIRouter(prefix="/compliance", tags=["Compliance"])

# Global instances
_loader: DocumentLoader | None = None


def get_loader() -> DocumentLoader:
    """Get or create the document loader instance."""
    global _loader
    if _loader is None:
        _loader = DocumentLoader.from_settings(get_settings())
    return _loader


@router.post("/lookup", response_model=LookupResponse)
async def lookup_key(request: LookupRequest) -> LookupResponse:
    """Resolve a key against the active profiles of one host.

    Each request is its own evaluation session with a fresh cache.
    """
    settings = get_settings()

    values = dict(request.values)
    values[settings.enforcement_key] = request.profiles

    host = StaticHost(
        values=values,
        facts=request.facts,
        modules=[m.model_dump() for m in request.modules],
    )
    enforcer = ComplianceEnforcer(
        host,
        cache=LookupCache(),
        loader=get_loader(),
        settings=settings,
        mode=request.mode,
    )

    result = enforcer.enforce(request.key)
    if not result.found:
        raise HTTPException(status_code=404, detail=f"No enforced value for key: {request.key}")

    return LookupResponse(key=request.key, found=True, value=result.value)
