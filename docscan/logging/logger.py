import logging
import sys


def _render(message: str, context: dict[str, object]) -> str:
    if not context:
        return message
    fields = " ".join(f"{key}={value}" for key, value in context.items())
    return f"{message} [{fields}]"


class Log:
    """Centralized logging for the scan pipeline.

    Keyword arguments passed to the level methods are appended to the
    message as ``key=value`` pairs, e.g. ``Log.info("page done", page=3)``.
    """

    _logger: logging.Logger = logging.getLogger("docscan")

    @classmethod
    def configure(cls, log_level: str, log_file: str | None = None) -> None:
        """Configure the logger with the specified level, stdout and optional file handler."""
        cls._logger.setLevel(log_level.upper())
        if cls._logger.handlers:
            return
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if log_file:
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        for handler in handlers:
            handler.setFormatter(formatter)
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(_render(message, context))

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(_render(message, context))

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(_render(message, context))

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(_render(message, context))

    @classmethod
    def exception(cls, message: str, **context: object) -> None:
        """Log at ERROR level with the active exception's traceback."""
        cls._logger.exception(_render(message, context))
