"""Log file configuration with size based rotation."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


class SafeRotatingFileHandler(RotatingFileHandler):
    """Rotating handler that keeps writing when rotation fails.

    On Windows another process (an editor, a log shipper) holding the file
    open makes the rename inside ``doRollover`` fail.
    """

    def doRollover(self) -> None:  # pragma: no cover - needs a locked file
        try:
            super().doRollover()
        except OSError as exc:
            logging.getLogger(__name__).warning("Log rotation failed: %s", exc)
            if self.stream is None:
                self.stream = self._open()


class LoggingConfig:
    """Attach a rotating log file to a logger."""

    def __init__(
        self,
        log_file: str,
        *,
        max_size_mb: int = 5,
        backup_count: int = 5,
        logger_name: str = "winprocmon",
    ):
        self.log_file = Path(log_file).expanduser()
        self.max_bytes = max_size_mb * 1024 * 1024
        self.backup_count = backup_count
        self.logger_name = logger_name

    def attach(
        self, logger: logging.Logger, formatter: logging.Formatter
    ) -> bool:
        """Add the file handler to ``logger`` unless one already writes there.

        Returns:
            True if file logging is active after the call
        """
        target = str(self.log_file.resolve())
        for handler in logger.handlers:
            if (
                isinstance(handler, RotatingFileHandler)
                and handler.baseFilename == target
            ):
                return True

        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = SafeRotatingFileHandler(
                filename=str(self.log_file),
                maxBytes=self.max_bytes,
                backupCount=self.backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            logging.getLogger(__name__).warning(
                "File logging disabled due to error: %s", exc
            )
            return False

        handler.setFormatter(formatter)
        logger.addHandler(handler)
        return True
