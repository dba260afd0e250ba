"""
User registration & login service — application entry point.
"""

from __future__ import annotations

import logging
import sys
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.middleware import register_middleware
from api.routes import router as api_router
from auth.exceptions import AuthServiceError
from config.settings import config
from database.session import init_models

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("asyncio", "sqlalchemy.engine", "multipart"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="User Auth Service",
        version="1.0.0",
        description="User registration and login issuing signed session tokens.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_middleware(app)

    @app.exception_handler(AuthServiceError)
    async def auth_error_handler(request: Request, exc: AuthServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Routes
    app.include_router(api_router)

    @app.on_event("startup")
    async def on_startup():
        # Missing credentials or signing secret abort the boot.
        config.validate_required()

        logger.info("Ensuring database schema…")
        await init_models()

        logger.info("Application ready to accept requests on port %d.", config.port)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
