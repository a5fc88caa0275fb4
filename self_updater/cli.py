"""
Command line entry point: ``updater <archivePath> <mainAppDirectory>``.
"""

import asyncio
import logging
import sys
from typing import List, Optional

from .app import UpdaterApp
from .config import Config
from .core.exceptions import ExitCode
from .utils.logging import setup_logging, shutdown_logging


def _wait_for_acknowledgment():
    try:
        input()
    except (EOFError, OSError):
        pass


def install_last_resort_handler(wait: bool = True):
    """Log anything escaping the top-level handler instead of crashing silently."""

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logging.getLogger(__name__).critical(
            f"Unhandled exception: {exc_value}",
            exc_info=(exc_type, exc_value, exc_traceback),
        )
        if wait:
            logging.getLogger(__name__).info("Press Enter to exit...")
            _wait_for_acknowledgment()
        shutdown_logging()

    sys.excepthook = handle_exception


def _log_config_source(config: Config, logger: logging.Logger):
    # Config is read before the log file is open; repeat its outcome there.
    if config.source:
        logger.info(f"Config loaded from {config.source}")
    else:
        logger.info("Using default configuration")
    for warning in config.load_warnings:
        logger.warning(warning)


def main(argv: Optional[List[str]] = None) -> int:
    """Main updater entry point."""
    if argv is None:
        argv = sys.argv[1:]

    config = Config()
    logger = logging.getLogger(__name__)

    try:
        config = Config.load_from_file()
        setup_logging(
            level=config.logging.level,
            log_file=str(config.get_log_file_path()),
            max_bytes=config.logging.max_file_size,
            backup_count=config.logging.backup_count,
            log_to_console=config.logging.log_to_console,
        )
        install_last_resort_handler(config.launch.wait_for_acknowledgment)
        _log_config_source(config, logger)

        if not config.validate():
            logger.error("Configuration validation failed, update check disabled")
            config.updates.check_on_startup = False

        app = UpdaterApp(config)
        return int(asyncio.run(app.run(argv)))

    except KeyboardInterrupt:
        logger.info("Updater interrupted by user")
        return ExitCode.OK
    except Exception as e:
        logger.critical(f"Unhandled exception: {e}", exc_info=True)
        if config.launch.wait_for_acknowledgment:
            logger.info("Press Enter to exit...")
            _wait_for_acknowledgment()
        return ExitCode.UNEXPECTED
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
