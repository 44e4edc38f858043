from contextvars import ContextVar
import uuid
import logging
from litestar.logging import LoggingConfig
from litestar.middleware.base import ASGIMiddleware
from litestar.types import ASGIApp, Scope, Receive, Send, Message
from litestar.datastructures import MutableScopeHeaders

CORRELATION_HEADER = "X-Correlation-ID"

# Headers checked in order for an incoming correlation id. The whatsapp bridge
# stamps each webhook delivery with X-Event-ID.
INBOUND_HEADERS = (b"x-correlation-id", b"x-event-id")

correlation_id_contextvar: ContextVar[str] = ContextVar("correlation_id")


class CorrelationFormatter(logging.Formatter):
    """Formatter that falls back to 'system' for records logged outside a request."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "system"
        return super().format(record)


class CorrelationFilter(logging.Filter):
    """Stamps each record with the correlation id of the request that logged it."""

    def __init__(self, contextvar: ContextVar[str]):
        super().__init__()
        self.contextvar = contextvar

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = self.contextvar.get("system")
        return True


def correlation_id_from(scope: Scope) -> str:
    headers = {name.lower(): value for name, value in scope.get("headers", [])}
    for name in INBOUND_HEADERS:
        value = headers.get(name)
        if value:
            return value.decode("utf-8")
    return str(uuid.uuid4())


class CorrelationMiddleware(ASGIMiddleware):
    """Tags each HTTP request with a correlation id and echoes it in the response."""

    def __init__(self, contextvar: ContextVar[str]):
        super().__init__()
        self.contextvar = contextvar

    async def handle(self, scope: Scope, receive: Receive, send: Send, next_app: ASGIApp) -> None:
        if scope["type"] != "http":
            await next_app(scope, receive, send)
            return

        correlation_id = correlation_id_from(scope)
        self.contextvar.set(correlation_id)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = MutableScopeHeaders.from_message(message=message)
                response_headers[CORRELATION_HEADER] = correlation_id
            await send(message)

        await next_app(scope, receive, send_wrapper)


def create_logging_config(level: str = "INFO") -> LoggingConfig:
    # Library loggers need the filter too, or their records lack correlation_id
    library_logger = {"level": level, "filters": ["correlation"], "propagate": True}
    return LoggingConfig(
        root={
            "level": level,
            "handlers": ["queue_listener"],
            "filters": ["correlation"],
        },
        formatters={
            "standard": {
                "()": CorrelationFormatter,
                "format": "%(asctime)s - %(correlation_id)s - %(levelname)s - %(message)s",
            }
        },
        filters={
            "correlation": {
                "()": CorrelationFilter,
                "contextvar": correlation_id_contextvar,
            }
        },
        loggers={
            "httpx": library_logger,
            "uvicorn": library_logger,
            "litestar": library_logger,
            "maurine": library_logger,
        },
        log_exceptions="always",
    )
