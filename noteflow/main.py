# noteflow/main.py
"""
NoteFlow trash & retention API.

Run locally:
    uvicorn noteflow.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from noteflow.config import get_settings
from noteflow.logging_config import configure_logging
from noteflow.routers import admin_trash_router, trash_router
from noteflow.services.trash.errors import TrashError

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)

app = FastAPI(title="NoteFlow Trash Service")

origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

def register_error_handlers(app: FastAPI) -> None:
    """Map trash errors to their HTTP status with a stable error_code."""

    @app.exception_handler(TrashError)
    async def trash_error_handler(request: Request, exc: TrashError) -> JSONResponse:
        logger.warning(
            "Trash error %d %s: %s | path=%s",
            exc.status_code,
            exc.error_code,
            exc.message,
            request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_code": exc.error_code},
        )


register_error_handlers(app)

app.include_router(trash_router)
app.include_router(admin_trash_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "noteflow-trash", "environment": settings.ENVIRONMENT}
