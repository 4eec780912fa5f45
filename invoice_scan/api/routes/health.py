from datetime import datetime, timezone

from fastapi import APIRouter

from invoice_scan.api.schemas import HealthResponse

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness probe for load balancers and monitoring."""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )
