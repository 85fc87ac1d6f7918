# Nombre de archivo: main.py
# Ubicación de archivo: api/app/main.py
# Descripción: Aplicación FastAPI principal (health, importación/exportación, equipo, ocurrencias, configuración)

import time

from fastapi import FastAPI, Request

from api.api_app.routes.backup import router as backup_router
from api.api_app.routes.config import router as config_router
from api.api_app.routes.exports import router as exports_router
from api.api_app.routes.health import router as health_router
from api.api_app.routes.imports import router as imports_router
from api.api_app.routes.occurrences import router as occurrences_router
from api.api_app.routes.team import router as team_router
from core.config import get_settings
from core.logging import setup_logging
from core.metrics import Metrics
from core.middlewares import RequestIDMiddleware
from core.repositories.store import RecordStore


def create_app(store: RecordStore | None = None) -> FastAPI:
    settings = get_settings()
    setup_logging("api", settings.log_level)
    app = FastAPI(title="Diário Ops API", version="0.1.0")
    app.state.store = store
    app.state.metrics = Metrics()
    app.add_middleware(RequestIDMiddleware)

    @app.middleware("http")
    async def collect_metrics(request: Request, call_next):
        inicio = time.perf_counter()
        response = await call_next(request)
        request.app.state.metrics.record(time.perf_counter() - inicio)
        return response

    @app.get("/metrics")
    def metrics_snapshot() -> dict:
        return app.state.metrics.snapshot()

    app.include_router(health_router, tags=["health"])
    app.include_router(imports_router)
    app.include_router(exports_router)
    app.include_router(team_router)
    app.include_router(occurrences_router)
    app.include_router(config_router)
    app.include_router(backup_router)
    return app


app = create_app()
