"""Operational endpoints for the WTF Dial API."""

from fastapi import APIRouter

from ..dependencies import ErrorMetricsDep

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/metrics")
def get_error_metrics(metrics: ErrorMetricsDep) -> dict[str, dict[str, int]]:
    """Return error counts by error code since startup."""
    return {"errors": metrics.snapshot()}
