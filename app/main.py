import logging
from contextlib import asynccontextmanager
from typing import Dict

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.logging_config import setup_logging

# El logging se configura antes de importar routers y servicios
setup_logging()

from slowapi.errors import RateLimitExceeded

from app.api.v1.api import api_router
from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.middleware.rate_limit import custom_rate_limit_exceeded_handler, limiter
from app.middleware.timing import TimingMiddleware

logger = logging.getLogger(__name__)

settings = get_settings()

SENSITIVE_HEADERS = ("cookie", "x-api-key")


def masked_headers(request: Request) -> Dict[str, str]:
    """Cabeceras de la petición aptas para el log (sin secretos)."""
    headers = dict(request.headers)
    authorization = headers.get("authorization")
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and len(token) > 6:
            headers["authorization"] = f"Bearer ****{token[-6:]}"
        else:
            headers["authorization"] = "***masked***"
    for name in SENSITIVE_HEADERS:
        if name in headers:
            headers[name] = "***masked***"
    return headers


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Arrancando {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(
        f"Índices compuestos declarados: {len(settings.DECLARED_INDEXES)}; "
        "las demás consultas ordenadas usan escaneo + orden en memoria"
    )
    yield
    logger.info("Consola detenida")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# Límite de intentos de login (slowapi)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)

# ConsoleError y errores de SQLAlchemy -> {"detail": ...}
register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    if settings.DEBUG_MODE:
        logger.debug(f"Cabeceras: {masked_headers(request)}")
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
    return response


app.add_middleware(TimingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS or [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
    max_age=86400,
)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    return {
        "message": "Consola de administración de gimnasios",
        "docs": f"{settings.API_V1_STR}/docs",
    }


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG_MODE)
