from loguru import logger

from .config import Settings


def configure_logging(settings: Settings) -> None:
    """Send log records to a file.

    The default stderr sink is removed because anything written to the
    terminal while curses owns it ends up drawn over the interface.
    Records are serialized so the fields bound by ``_log`` helpers survive.
    """
    logger.remove()
    logger.add(
        settings.log_file,
        level=settings.log_level,
        serialize=True,
    )
