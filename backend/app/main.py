import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from app.api.router import api_router
from app.core.config import Settings
from app.core.logging import configure_logging, ensure_request_id, request_id_ctx_var
from app.core.rate_limit import SlidingWindowLimiter, is_upload
from app.db.init_db import init_db
from app.db.session import build_engine, build_session_factory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(app.state.engine)
    logger.info("Application started", extra={"app_name": app.state.settings.app_name})
    yield
    app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.request_limiter = SlidingWindowLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)
    app.state.upload_limiter = SlidingWindowLimiter(settings.upload_rate_limit_requests, settings.rate_limit_window_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = ensure_request_id(request.headers.get("X-Request-ID"))
        request_id_ctx_var.set(request_id)
        if settings.environment.lower() == "prod":
            client_ip = request.client.host if request.client else "unknown"
            limiter = app.state.request_limiter
            if is_upload(request.method, request.url.path):
                limiter = app.state.upload_limiter
            if not limiter.allow(client_ip):
                logger.warning("Rate limit exceeded", extra={"client_ip": client_ip, "path": request.url.path})
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Rate limit exceeded"},
                    headers={"Retry-After": str(limiter.retry_after(client_ip)), "X-Request-ID": request_id},
                )
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(api_router)

    os.makedirs(settings.uploads_dir, exist_ok=True)
    app.mount(settings.uploads_url_prefix, StaticFiles(directory=settings.uploads_dir), name="uploads")
    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    uvicorn.run("app.main:create_app", factory=True, host=settings.api_host, port=settings.api_port)
