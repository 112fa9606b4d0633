from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from core import migrations
from core.cache import Cache
from core.config import Settings
from core.db import Postgres
from core.errors import ConfigurationError, install_error_handlers
from core.log import configure_logging
from projects import router as projects_router
from registry import service as registry_service
from registry.client import RegistryClient
from registry.scheduler import RegistrationScheduler

logger = logging.getLogger(__name__)


def create_app(settings: Settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        postgres = Postgres(
            settings.postgres_url,
            min_size=settings.postgres_pool_min_size,
            max_size=settings.postgres_pool_max_size,
            acquire_timeout_s=settings.postgres_acquire_timeout_s,
            command_timeout_s=settings.postgres_command_timeout_s,
        )
        cache = Cache(settings.redis_url, max_connections=settings.redis_pool_max_size)
        registry_client = RegistryClient(settings.core_api_url, timeout_s=settings.registry_timeout_s)
        identity = registry_service.ModuleIdentity(
            api_url=settings.module_api_url,
            web_url=settings.module_web_url,
        )
        scheduler = RegistrationScheduler(
            lambda: registry_service.run_tick(registry_client, identity),
            interval_s=settings.registration_interval_s,
            shutdown_grace_s=settings.registry_timeout_s,
        )

        try:
            await postgres.connect()
            applied = await migrations.apply_pending(postgres, settings.migrations_dir)
            logger.info("migrations_done applied=%s", applied)
            await cache.connect()

            app.state.postgres = postgres
            app.state.cache = cache
            app.state.registry_client = registry_client
            app.state.scheduler = scheduler

            scheduler.start()
            yield
        finally:
            # Scheduler first so no tick runs against a closed client.
            await scheduler.stop()
            await registry_client.close()
            await cache.close()
            await postgres.close()

    app = FastAPI(title="projects-service", lifespan=lifespan)
    install_error_handlers(app)
    app.include_router(projects_router.router, tags=["projects"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


def run() -> None:
    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("configuration_error: %s", exc)
        sys.exit(1)

    uvicorn.run(
        create_app(settings),
        host=settings.binding_address,
        port=settings.binding_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
