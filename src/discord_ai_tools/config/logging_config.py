"""Logging setup for the generation backend."""

import logging

from discord_ai_tools.config.runtime_config import AppConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: AppConfig) -> None:
    """Configure root logging from ``config``.

    Logs go to ``config.log_file`` when set, otherwise to stderr. Any handlers
    installed earlier are replaced.

    Args:
        config: Application configuration providing log_level and log_file.
    """
    log_handler = (
        logging.FileHandler(config.log_file) if config.log_file else logging.StreamHandler()
    )
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=LOG_FORMAT,
        handlers=[log_handler],
        force=True,
    )
