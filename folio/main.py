"""
Folio API

Blog and portfolio backend: users, articles, projects, taxonomy,
comments and site stats, all mounted under /api/v1.
"""
import os
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.gzip import GZipMiddleware

from folio.articles.main import router as articles_router
from folio.comments.main import router as comments_router
from folio.health.main import router as health_router
from folio.projects.main import router as projects_router
from folio.shared.body_limit import setup_body_limit
from folio.shared.cors import setup_cors
from folio.shared.database import check_db_connection, init_db
from folio.shared.errors import setup_error_handlers
from folio.shared.fatal import install_fatal_handlers, install_loop_handler
from folio.shared.rate_limit import setup_rate_limit
from folio.shared.security_headers import setup_security_headers
from folio.stats.main import router as stats_router
from folio.taxonomy.main import router as taxonomy_router
from folio.users.main import router as users_router

logger = logging.getLogger("folio")

API_PREFIX = "/api/v1"
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Connect before serving; a dead database at boot is fatal
    if not check_db_connection():
        logger.critical("Database unreachable at startup")
        raise RuntimeError("Database connection failed")
    init_db()
    install_loop_handler(asyncio.get_running_loop())
    logger.info(f"Folio API ready, health check at {API_PREFIX}/health")
    yield
    logger.info("Shutting down gracefully...")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Folio API",
        version="1.0.0",
        description="Blog and portfolio backend with JWT authentication",
        docs_url=f"{API_PREFIX}/docs",
        openapi_url=f"{API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    # Middleware added last runs first: the chain below executes as
    # security headers -> CORS -> compression -> rate limit -> body cap
    # -> unhandled-error catcher
    setup_error_handlers(app)
    setup_body_limit(app)
    setup_rate_limit(app, path_prefix="/api")
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    setup_cors(app)
    setup_security_headers(app)

    for router in (
        health_router,
        users_router,
        articles_router,
        comments_router,
        projects_router,
        taxonomy_router,
        stats_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    # Registered last so every real route matches first
    @app.api_route(
        "/{path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
        include_in_schema=False,
    )
    def route_not_found(path: str):
        raise HTTPException(status_code=404, detail="Route not found")

    return app


app = create_app()


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    install_fatal_handlers()
    uvicorn.run(app, host="0.0.0.0", port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
