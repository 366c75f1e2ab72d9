"""
Application bootstrap.
Configures logging from settings and resolves the object graph.
"""

from injector import Injector

from .clients import BoardClient, CompletionClient
from .core import Settings, configure_logging, create_container, get_logger, get_settings
from .storage import SqlScreenStore

logger = get_logger(__name__)


def bootstrap(settings: Settings | None = None) -> Injector:
    """
    Configure logging and build the container.

    Args:
        settings: Explicit settings (defaults to environment)

    Returns:
        Injector resolving handlers, repository, generator and exporter
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.json_logs)

    logger.info(
        "starting",
        model=settings.completion_model,
        timeout=settings.generation_timeout,
        board_api=settings.board_api_url,
    )
    return create_container(settings)


async def shutdown(container: Injector) -> None:
    """Close HTTP clients and the store engine."""
    await container.get(CompletionClient).aclose()
    await container.get(BoardClient).aclose()
    container.get(SqlScreenStore).engine.dispose()
    logger.info("shutdown_complete")


__all__ = ["bootstrap", "shutdown"]
