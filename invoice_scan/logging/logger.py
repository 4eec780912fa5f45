import logging
import sys

_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
}
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class _ContextFormatter(logging.Formatter):
    """Appends keyword context passed through ``extra`` as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} | {pairs}"


class Log:
    """Application logger. Keyword arguments are logged as trailing context."""

    _logger: logging.Logger = logging.getLogger("invoice_scan")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Attach a stdout handler to the app and server loggers at ``log_level``."""
        level = log_level.upper()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_ContextFormatter("%(asctime)s [%(levelname)s] %(message)s"))

        cls._logger.setLevel(level)
        if not cls._logger.handlers:
            cls._logger.addHandler(handler)
        cls._logger.propagate = False

        for name in _SERVER_LOGGERS:
            server_logger = logging.getLogger(name)
            server_logger.setLevel(level)
            server_logger.handlers = [handler]
            server_logger.propagate = False

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log at error level with the active exception's traceback."""
        cls._logger.exception(message, extra=kwargs)
