import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(threadName)s] %(name)s: %(message)s"

# Server loggers that share our handler so request and extraction lines interleave in one stream.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class Log:
    """Process-wide logging for request handlers and extraction worker threads."""

    _logger: logging.Logger = logging.getLogger("docextract")
    _handler: logging.Handler | None = None

    @classmethod
    def configure(cls, log_level: str, include_server: bool = True) -> None:
        """Attach a single stdout handler at ``log_level``. Safe to call more than once."""
        level = log_level.upper()
        if cls._handler is None:
            cls._handler = logging.StreamHandler(sys.stdout)
            cls._handler.setFormatter(logging.Formatter(LOG_FORMAT))
            cls._logger.addHandler(cls._handler)
        cls._logger.setLevel(level)

        if not include_server:
            return
        for name in SERVER_LOGGERS:
            server_logger = logging.getLogger(name)
            server_logger.handlers = [cls._handler]
            server_logger.setLevel(level)
            server_logger.propagate = False

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Error plus the traceback of the exception being handled."""
        cls._logger.exception(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
