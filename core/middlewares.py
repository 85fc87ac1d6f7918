# Nombre de archivo: middlewares.py
# Ubicación de archivo: core/middlewares.py
# Descripción: Middleware FastAPI que asigna y propaga X-Request-ID al contexto de logging

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from core.logging import request_id_var

HEADER = "X-Request-ID"


def _incoming_id(request: Request) -> str | None:
    raw = request.headers.get(HEADER)
    if not raw:
        return None
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        return None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reutiliza un X-Request-ID válido del cliente o genera uno nuevo."""

    async def dispatch(self, request: Request, call_next):
        request_id = _incoming_id(request) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[HEADER] = request_id
        return response
