"""Health endpoint router composition for app and compute network checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.adapters import BacalhauAdapterError, BacalhauClientPort


def api_create_health_router(client: BacalhauClientPort) -> APIRouter:
    """Create health-check router with app and Bacalhau connectivity status.

    Args:
        client: Adapter-layer Bacalhau client.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when client is invalid.
    """

    if client is None:
        raise ValueError("client must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and compute network health state.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.

        Raises:
            RuntimeError: Raised if the health probe fails unexpectedly.
        """

        try:
            network_health = client.adapter_check_health()
            payload = {
                "status": "ok",
                "app": "up",
                "bacalhau": network_health.status,
                "detail": network_health.detail,
                "target": client.adapter_source_name(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)
        except (BacalhauAdapterError, ConnectionError, TimeoutError) as error:
            payload = {
                "status": "degraded",
                "app": "up",
                "bacalhau": "down",
                "detail": str(error),
                "target": client.adapter_source_name(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return router
