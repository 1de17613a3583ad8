import logging
import os
import sys
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

LOG_FILE_NAME = "iconsmith.log"


class LoggingConfigModel(BaseModel):
    """Logging configuration model controlling verbosity and output destinations.

    Attributes:
        level: Log verbosity level - DEBUG, INFO, WARNING, ERROR, or CRITICAL.
        format: Log message format string following Python logging formatter spec.
        enable_logs: Enable logging to console (and log_dir when set).
        log_dir: Optional directory receiving a timestamped log file per run.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format")
    enable_logs: bool = Field(default=True, description="When false, logging is completely silent")
    log_dir: Optional[str] = Field(default=None, description="Directory for per-run log files; console only when unset")


def get_log_dir_for_run(log_dir: str) -> str:
    """Create a timestamped (YYYYMMDD_HHMMSS) subdirectory of log_dir for this run.

    Returns:
        Absolute path to the run directory, created if it doesn't exist.
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = os.path.join(os.path.abspath(log_dir), timestamp)
    os.makedirs(run_dir, exist_ok=True)
    return run_dir


def setup_logging(config: Any) -> None:
    """Setup logging with a console handler and an optional file handler.

    When disabled, installs a NullHandler for complete silence.

    Args:
        config: Logging configuration object with enable_logs, level, format and log_dir attributes.
    """
    enable_logs = getattr(config, "enable_logs", False)
    level = config.level.upper() if hasattr(config, "level") else "INFO"
    log_format = config.format if hasattr(config, "format") else "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_dir = getattr(config, "log_dir", None)

    if not enable_logs:
        logging.basicConfig(level=logging.CRITICAL + 1, handlers=[logging.NullHandler()], force=True)
        return

    handlers = [logging.StreamHandler(sys.stdout)]

    log_file_path = None
    if log_dir:
        log_file_path = os.path.join(get_log_dir_for_run(log_dir), LOG_FILE_NAME)
        handlers.append(logging.FileHandler(log_file_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=log_format, handlers=handlers, force=True)

    logging.getLogger(__name__).debug(f"Logging configured: level={level}, file={log_file_path}")
