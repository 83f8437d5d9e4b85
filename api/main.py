import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db, provisioning
from core.errors import install_error_handlers
from core.metrics import install_metrics
from users import router as users_router

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def cors_allow_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


def create_app(*, database: db.Database | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if database is not None:
            app.state.db = database
            yield
            return

        # Provision before the pool opens; any failure here aborts startup.
        dsn = db.database_url()
        await provisioning.provision(dsn)
        app.state.db = db.Database(dsn)
        await app.state.db.connect()
        try:
            yield
        finally:
            await app.state.db.close()

    app = FastAPI(title="Users API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allow_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    install_metrics(app)

    app.include_router(users_router.router, tags=["users"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "users api"}

    return app


app = create_app()


def run() -> None:
    """Entry point for the `users-api` console script."""
    import uvicorn

    level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    host = os.environ.get("HOST", "0.0.0.0").strip() or "0.0.0.0"
    port = _env_int("PORT", 8000)
    logger.info("starting users api host=%s port=%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level=level.lower())


if __name__ == "__main__":
    run()
