from fastapi import APIRouter

from repo_standards import __version__
from repo_standards.api.schemas.standards import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(ok=True, version=__version__)
