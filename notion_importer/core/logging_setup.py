"""
Configuracion de logging (loguru) para las corridas del importador.
"""
import sys

from loguru import logger

from notion_importer.core.config import Settings

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
)


def setup_logging(settings: Settings) -> None:
    """
    Reemplaza los sinks por defecto de loguru.

    - stderr con colores al nivel LOG_LEVEL
    - archivo LOG_FILE con rotacion y retencion
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL, format=_CONSOLE_FORMAT, colorize=True)
    if settings.LOG_FILE:
        logger.add(
            settings.LOG_FILE,
            rotation="500 MB",
            retention="10 days",
            level=settings.LOG_LEVEL,
        )


def print_banner(settings: Settings, source: str) -> None:
    """Encabezado de la corrida."""
    logger.opt(colors=True).info("<bold><green>" + "=" * 60 + "</green></bold>")
    logger.opt(colors=True).info(f"<bold><green>{settings.APP_NAME}: {source} -> Notion</green></bold>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 60 + "</green></bold>")
