"""
Centralized logging and error handling for dub-info.

This module provides consistent logging configuration and custom exceptions
across the entire application.
"""

import logging
from typing import Optional, Union
from rich.logging import RichHandler
from rich.console import Console
from rich.panel import Panel

# Global console instance for the entire application
console = Console()

class DubInfoError(Exception):
    """Base exception for all dub-info errors."""
    pass


class ConfigError(DubInfoError):
    """Raised when there's a configuration-related error."""
    pass


class FileError(DubInfoError):
    """Raised when reading the catalog or writing the output fails."""
    pass


class ValidationError(DubInfoError):
    """Raised when data validation fails."""
    pass


class FormatError(ValidationError):
    """Raised when a URL does not have a recognized aniSearch shape."""
    pass


class FetchError(DubInfoError):
    """Base class for failures while fetching an aniSearch page."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class FetchConnectionError(FetchError):
    """Connection, DNS or timeout failure. Retried until the retry ceiling."""
    pass


class RateLimitedError(FetchError):
    """aniSearch answered 429. Retried until the retry ceiling."""
    pass


class ServerError(FetchError):
    """aniSearch answered with a 5xx status. Never retried."""
    pass


class ResponseError(FetchError):
    """Unexpected status, undecodable body or unexpected markup."""
    pass


class FetchCancelledError(FetchError):
    """The run was cancelled while waiting to retry."""
    pass


class DubInfoLogger:
    """
    Centralized logging configuration for dub-info.

    File handler gets full detail, the console gets a RichHandler that only
    shows warnings and errors unless raised with set_console_level.
    """

    def __init__(self, log_file: str = "dub_info.log"):
        self.log_file = log_file
        self.console = console
        self._setup_root_logger()

    def _setup_root_logger(self) -> None:
        """Configure the root logger with file and console handlers."""
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # File handler (full detail) - Use UTF-8, titles are often Japanese
        # Opened on first record so an unused default log file is never created
        file_handler = logging.FileHandler(self.log_file, encoding='utf-8', delay=True)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(file_formatter)

        console_handler = RichHandler(
            console=self.console,
            show_path=False,
            show_time=True,
            show_level=True,
            markup=True,
            keywords=[]
        )
        console_handler.setLevel(logging.WARNING)

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)

        # Clear existing handlers to avoid duplicates
        root_logger.handlers = []
        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)
        self.handlers = [file_handler, console_handler]

    def close(self) -> None:
        """Detach and close the handlers this instance installed."""
        root_logger = logging.getLogger()
        for handler in self.handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self.handlers = []

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def set_console_level(self, level: Union[str, int], clean: bool = False) -> None:
        """
        Set the console logging level.

        Args:
            level: Logging level (e.g., 'DEBUG', 'INFO', 'WARNING')
            clean: If True, hides time and level for a cleaner UI-like look
        """
        self._lower_root_level(level)

        for handler in logging.getLogger().handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(level)
                handler.show_time = not clean
                handler.show_level = not clean
                break

    def set_file_level(self, level: Union[str, int]) -> None:
        """
        Set the file logging level.

        Args:
            level: Logging level (e.g., 'DEBUG', 'INFO', 'WARNING')
        """
        self._lower_root_level(level)

        for handler in logging.getLogger().handlers:
            if isinstance(handler, logging.FileHandler):
                handler.setLevel(level)
                break

    @staticmethod
    def _lower_root_level(level: Union[str, int]) -> None:
        root_logger = logging.getLogger()
        numeric_level = level
        if isinstance(level, str):
            numeric_level = getattr(logging, level.upper(), logging.INFO)

        # Ensure root logger allows this level
        if numeric_level < root_logger.level:
            root_logger.setLevel(numeric_level)


# Global logger instance
_logger_instance: Optional[DubInfoLogger] = None


def setup_logging(log_file: str = "dub_info.log") -> DubInfoLogger:
    """
    Set up the global logging configuration.

    Args:
        log_file: Path to the log file

    Returns:
        The configured DubInfoLogger instance
    """
    global _logger_instance
    if _logger_instance is None or _logger_instance.log_file != log_file:
        if _logger_instance is not None:
            _logger_instance.close()
        _logger_instance = DubInfoLogger(log_file)
    return _logger_instance


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    This should be called in each module as:
        from dub_info.dub_info.logging import get_logger
        logger = get_logger(__name__)
    """
    if _logger_instance is None:
        setup_logging()
    return logging.getLogger(name)


def set_log_level(level: Union[str, int], handler_type: str = "both", clean: bool = False) -> None:
    """
    Set the logging level for console, file, or both handlers.

    Args:
        level: Logging level (e.g., 'DEBUG', 'INFO', 'WARNING', 'ERROR')
        handler_type: 'console', 'file', or 'both'
        clean: If True, hides time and level for console handler
    """
    if _logger_instance is None:
        setup_logging()

    if handler_type in ("console", "both"):
        _logger_instance.set_console_level(level, clean=clean)
    if handler_type in ("file", "both"):
        _logger_instance.set_file_level(level)


def log_step(message: str) -> None:
    """
    Log a major step with a visual panel.
    Logs to file as INFO, prints to console as Panel if level <= INFO.
    """
    if _logger_instance is None:
        setup_logging()

    logging.getLogger("dub_info.step").info(f"STEP: {message}")

    for handler in logging.getLogger().handlers:
        if isinstance(handler, RichHandler):
            if handler.level <= logging.INFO:
                _logger_instance.console.print(Panel(message, style="bold magenta"))
            break


def log_substep(message: str) -> None:
    """
    Log a sub-step with indentation.
    """
    logger = get_logger("dub_info.substep")
    logger.info(f"  [bold cyan]->[/bold cyan] {message}")


def log_api_call(url: str, method: str = "GET", params: Optional[dict] = None) -> None:
    """
    Log an HTTP call at DEBUG level.
    """
    logger = get_logger("dub_info.api")

    # Quick check to avoid formatting if not debug
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"API CALL: {method} {url} | Params: {params}")


__all__ = [
    "DubInfoError",
    "ConfigError",
    "FileError",
    "ValidationError",
    "FormatError",
    "FetchError",
    "FetchConnectionError",
    "RateLimitedError",
    "ServerError",
    "ResponseError",
    "FetchCancelledError",
    "DubInfoLogger",
    "setup_logging",
    "get_logger",
    "set_log_level",
    "log_step",
    "log_substep",
    "log_api_call",
]
