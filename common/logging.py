"""
Logging for the order producer and the notification consumers.

Both processes log to stdout, one line per record, tagged with the service
name ("order-service" or "notification-service") so interleaved container
logs can be told apart. The AMQP client loggers (aio_pika, aiormq) are held
at WARNING or above.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(service_name)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
BROKER_LOGGERS = ("aio_pika", "aiormq")


class _ServiceFormatter(logging.Formatter):
    """Formatter that stamps each record with the owning service."""

    def __init__(self, service_name: str, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        record.service_name = getattr(record, "service_name", self._service_name)
        return super().format(record)


def setup_logging(service_name: str, level: int = logging.INFO) -> None:
    """
    Point the root logger at stdout with the service-tagged format.

    Calling it again swaps the formatter on existing handlers instead of
    adding another one.
    """
    root = logging.getLogger()
    root.setLevel(level)
    formatter = _ServiceFormatter(service_name, fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    else:
        for h in root.handlers:
            h.setFormatter(formatter)
    for name in BROKER_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
