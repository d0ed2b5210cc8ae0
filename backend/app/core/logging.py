import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s %(upload)s"

request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
# label of the upload being published ("obra:<slug>" or "capitulo:<obra_id>/<n>")
upload_ctx_var: ContextVar[str] = ContextVar("upload", default="-")


def ensure_request_id(value: str | None) -> str:
    return value or uuid.uuid4().hex


@contextmanager
def upload_context(label: str):
    """Tag every record logged inside the block with the upload being processed."""
    token = upload_ctx_var.set(label)
    try:
        yield
    finally:
        upload_ctx_var.reset(token)


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx_var.get()
        record.upload = upload_ctx_var.get()
        return True


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    handler.addFilter(ContextFilter())
    root.handlers = [handler]
    # uvicorn's access log duplicates the request-id middleware's own line
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
