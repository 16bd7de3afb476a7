"""Health check endpoint for the b2proxy API."""

from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel

from b2proxy import __version__

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    time: str
    version: str


@router.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse)
def get_health() -> HealthResponse:
    """Health check endpoint.

    Always succeeds; it does not contact the object store.
    """
    return HealthResponse(
        status="ok",
        time=datetime.now(UTC).isoformat(),
        version=__version__,
    )
