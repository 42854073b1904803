"""
Logging setup for command-line entry points.

Library code only calls ``logger``; sinks are configured here, once, by the
process entry point.
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    rotation: str = "10 MB",
    retention: int = 5,
) -> None:
    """
    Replace loguru's default handler with a stderr sink (and optional file).

    stderr keeps stdout free for JSON output.

    Args:
        level: Minimum level for all sinks
        log_file: Optional rotating log file
        rotation: Size or interval at which the file rotates
        retention: Number of rotated files to keep
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=CONSOLE_FORMAT)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            level=level.upper(),
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="zip",
        )
        logger.debug(f"Logging to {path}")
