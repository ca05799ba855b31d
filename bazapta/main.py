import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from bazapta import __version__
from bazapta.api.repository import RepositoryEndpoint
from bazapta.core.config import Settings
from bazapta.domain.errors import PreflightError
from bazapta.domain.routing import ResourceRouter
from bazapta.services.packages import PackageService
from bazapta.services.preflight import run_preflight
from bazapta.storage.repository_tool import RepositoryTool
from bazapta.storage.reprepro_tool import RepreproTool

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def create_app(settings: Optional[Settings] = None, tool: Optional[RepositoryTool] = None) -> FastAPI:
    """
    Build the application.

    Settings default to the BAZAPTA_* environment variables and the tool to
    reprepro in the configured repository. Distributions are discovered and
    the tool is checked when the application starts; either failing aborts
    startup.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.verbose)

    if tool is None:
        tool = RepreproTool(settings.reprepro_path, executable=settings.reprepro_bin, sudo=settings.sudo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            distributions = await run_preflight(settings.reprepro_path, tool)
        except PreflightError as e:
            logger.error(f"GLOBAL: {e.message}")
            raise

        app.state.settings = settings
        app.state.resource_router = ResourceRouter(distributions)
        app.state.package_service = PackageService(tool, settings.reprepro_path)
        logger.info(f"GLOBAL: serving {', '.join(distributions)} from {settings.reprepro_path}")
        yield

    app = FastAPI(
        title="bazapta",
        version=__version__,
        description="HTTP API for a reprepro-managed Debian package repository.",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_route("/{path:path}", RepositoryEndpoint())
    return app


def run() -> None:
    """
    Start the uvicorn server on the configured listen address.
    """
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.verbose)
    host, port = settings.host_port
    logger.info(f"GLOBAL: listening on {settings.listen}")

    uvicorn.run(
        "bazapta.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_level="debug" if settings.verbose else "info",
    )


if __name__ == "__main__":
    run()
