from __future__ import annotations

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from golfbrain.api.health import health as _health_handler
from golfbrain.api.routers.courses import router as courses_router
from golfbrain.api.routers.round import router as round_router
from golfbrain.api.routers.rounds import router as rounds_router
from golfbrain.api.routers.settings import router as settings_router
from golfbrain.config import get_settings
from golfbrain.metrics import MetricsMiddleware, metrics_app


app = FastAPI(title="golfbrain")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_allow_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(MetricsMiddleware)

app.include_router(courses_router)
app.include_router(round_router)
app.include_router(rounds_router)
app.include_router(settings_router)
app.add_api_route(
    "/health",
    _health_handler,
    methods=["GET"],
    response_model=None,
    tags=["health"],
)


_metrics_router = APIRouter()


@_metrics_router.get("/metrics", include_in_schema=False)
async def _metrics_endpoint(request: Request):
    return await metrics_app(request)


app.include_router(_metrics_router)


__all__ = ["app"]
