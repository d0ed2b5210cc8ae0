import io
import zipfile

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"
JPG_BYTES = b"\xff\xd8\xff\xe0fake-jpg"


def make_zip(entries: dict[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as zf:
        for name, data in entries.items():
            if name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(name), b"")
            else:
                zf.writestr(name, data)
    return buffer.getvalue()


def corrupt_zip() -> bytes:
    """Stored archive whose second entry fails its CRC check on read."""
    raw = make_zip({"1.jpg": b"FIRST-PAGE", "2.jpg": b"SECOND-PAGE"}, compression=zipfile.ZIP_STORED)
    return raw.replace(b"SECOND-PAGE", b"SECOND-PAGX")


def default_pages() -> dict[str, bytes]:
    return {"2.jpg": b"page-two", "10.jpg": b"page-ten", "1.png": b"page-one"}


def upload_work(client, titulo="Solo Leveling", numero_capitulo="1", pages=None, banner=False, **fields):
    data = {"titulo": titulo, "numero_capitulo": numero_capitulo, **fields}
    files = {
        "capa": ("cover.png", PNG_BYTES, "image/png"),
        "capitulo_zip": ("chapter.zip", make_zip(pages if pages is not None else default_pages()), "application/zip"),
    }
    if banner:
        files["banner"] = ("banner.jpg", JPG_BYTES, "image/jpeg")
    return client.post("/works", data=data, files=files)


def upload_chapter(client, obra_id, numero_capitulo, pages=None, archive=None):
    if archive is None:
        archive = make_zip(pages if pages is not None else default_pages())
    files = {"capitulo_zip": ("chapter.zip", archive, "application/zip")}
    return client.post("/chapters", data={"obra_id": str(obra_id), "numero_capitulo": numero_capitulo}, files=files)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        uploads_dir=str(tmp_path / "uploads"),
        staging_dir=str(tmp_path / "staging"),
        uploads_url_prefix="/uploads",
        log_level="WARNING",
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client):
    session = client.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()
