"""Loguru setup shared by the CLI, the API and the pipeline services."""

import sys
from pathlib import Path
from typing import Any, Optional, Union

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[run_id]}</magenta> | <cyan>{name}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[run_id]} | {name}:{function}:{line} | {message} | {extra}"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    (Re)configure the loguru sinks.

    Every record carries a ``run_id`` extra ("-" outside a pipeline run) so
    concurrent runs can be told apart in one stream.

    Args:
        log_level: Minimum level for all sinks
        log_file: Optional file sink, rotated and zip-compressed
        rotation: Size or interval at which the file sink rotates
        retention: How long rotated files are kept
    """
    logger.remove()
    logger.configure(extra={"run_id": "-"})

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level.upper(), colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=log_level.upper(),
            rotation=rotation,
            retention=retention,
            compression="zip",
            enqueue=True,
        )


def get_logger(name: str, **context: Any) -> Any:
    """
    Logger bound to a component name plus optional context (run_id, title, stage...).

    Services receive this object in their constructor and may ``bind`` more
    context per run.
    """
    return logger.bind(name=name, **context)


setup_logging()
