import logging

from fastapi.testclient import TestClient

from app.core.logging import ContextFilter, request_id_ctx_var, upload_context
from app.core.rate_limit import SlidingWindowLimiter, is_upload
from app.main import create_app
from conftest import upload_work


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def make_record():
    return logging.LogRecord("app.services.publishing", logging.INFO, __file__, 1, "Chapter created", None, None)


def test_limiter_blocks_after_limit_until_window_passes():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(limit=2, window_seconds=30, clock=clock)

    assert limiter.allow("10.0.0.1")
    assert limiter.allow("10.0.0.1")
    assert not limiter.allow("10.0.0.1")
    assert limiter.allow("10.0.0.2")
    assert limiter.retry_after("10.0.0.1") == 30

    clock.now += 29.5
    assert not limiter.allow("10.0.0.1")
    assert limiter.retry_after("10.0.0.1") == 1

    clock.now += 0.5
    assert limiter.allow("10.0.0.1")


def test_is_upload_matches_publishing_routes_only():
    assert is_upload("POST", "/works")
    assert is_upload("POST", "/chapters/")
    assert not is_upload("GET", "/works")
    assert not is_upload("POST", "/comments")


def test_context_filter_tags_records_with_upload_label():
    record_filter = ContextFilter()
    token = request_id_ctx_var.set("req-1")
    try:
        with upload_context("capitulo:3/2.5"):
            inside = make_record()
            record_filter.filter(inside)
        outside = make_record()
        record_filter.filter(outside)
    finally:
        request_id_ctx_var.reset(token)

    assert (inside.request_id, inside.upload) == ("req-1", "capitulo:3/2.5")
    assert outside.upload == "-"


def test_upload_context_resets_after_error():
    try:
        with upload_context("obra:berserk"):
            raise RuntimeError("extraction failed")
    except RuntimeError:
        pass

    record = make_record()
    ContextFilter().filter(record)
    assert record.upload == "-"


def test_prod_rate_limits_reads_and_uploads_separately(settings):
    prod = settings.model_copy(update={"environment": "prod", "rate_limit_requests": 3, "upload_rate_limit_requests": 1})

    with TestClient(create_app(prod)) as client:
        assert upload_work(client).status_code == 201
        blocked_upload = upload_work(client, titulo="Berserk")
        reads = [client.get("/health").status_code for _ in range(4)]

    assert blocked_upload.status_code == 429
    assert blocked_upload.json() == {"detail": "Rate limit exceeded"}
    assert int(blocked_upload.headers["Retry-After"]) >= 1
    assert reads == [200, 200, 200, 429]


def test_dev_does_not_rate_limit(client):
    client.app.state.request_limiter.limit = 0
    assert client.get("/health").status_code == 200
