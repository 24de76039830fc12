import time
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

logger = logging.getLogger("timing_middleware")


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Mide el tiempo de respuesta de cada solicitud y lo expone en ``X-Process-Time``.

    Las solicitudes que superan ``slow_threshold_ms`` se registran como warning.
    """

    def __init__(self, app: ASGIApp, slow_threshold_ms: float = 700.0):
        super().__init__(app)
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.time()
        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000  # En milisegundos
        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"

        if process_time > self.slow_threshold_ms:
            logger.warning(
                f"Solicitud lenta: {request.method} {request.url.path} "
                f"{process_time:.2f}ms (status {response.status_code})"
            )
        return response
