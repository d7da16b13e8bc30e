from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.api.v1.api import api_router
from app.middleware.request_logging import RequestLoggingMiddleware
from app.logging_config import setup_logging

# ── Initialize structured logging ──
setup_logging()

app = FastAPI(
    title=settings.APP_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

cors_origins = ["http://localhost:3000"]
if settings.BACKEND_CORS_ORIGINS:
    cors_origins.extend(
        origin.strip() for origin in settings.BACKEND_CORS_ORIGINS.split(",") if origin.strip()
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging middleware: request ID, timing, user / project context
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    return {"message": "Welcome to DevFlowHub API", "docs": "/docs"}


@app.get("/health")
def health_check():
    return {"status": "ok", "env": settings.NODE_ENV}
