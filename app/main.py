"""
FastAPI application for reelsmith.

Exposes the video generation pipeline, the prompt director and the
generation history over HTTP.

Usage:
    uvicorn app.main:app --reload --port 8000
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.generation.routes import router as generation_router
from reelsmith_core.config import settings
from reelsmith_core.logging import setup_logging
from reelsmith_core.runtime.errors import ServiceError

# Initialize logging
setup_logging()

app = FastAPI(
    title="Reelsmith",
    description="Recipe video generation: prompt, generate, publish and browse",
    version="1.0.0",
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Render ServiceErrors that escape a route (e.g. missing configuration)."""
    logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    status_code = 504 if exc.retryable else 500
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# CORS configuration for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",  # Alternative frontend
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generation_router, prefix="/videos", tags=["Videos"])


@app.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
        dict: Status and service information.
    """
    return {"status": "ok", "service": settings.SERVICE_NAME, "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
