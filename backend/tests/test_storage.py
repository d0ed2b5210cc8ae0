import io
import os
import re

from app.services.storage import (
    chapter_directory,
    chapter_page_url,
    find_orphan_directories,
    format_chapter_number,
    stage_upload,
)


def test_format_chapter_number():
    assert format_chapter_number(1.0) == "1"
    assert format_chapter_number(10.5) == "10.5"
    assert format_chapter_number(0) == "0"


def test_stage_upload_generates_unique_names(settings):
    first = stage_upload(settings, "capa", "My Cover.PNG", io.BytesIO(b"a"))
    second = stage_upload(settings, "capa", "My Cover.PNG", io.BytesIO(b"b"))

    assert first != second
    assert re.fullmatch(r"capa-\d+-\d+\.PNG", os.path.basename(first))
    assert os.path.dirname(first) == settings.staging_dir
    with open(first, "rb") as f:
        assert f.read() == b"a"


def test_chapter_paths_and_urls_agree(settings):
    directory = chapter_directory(settings, "solo-leveling", 2.5)
    url = chapter_page_url(settings, "solo-leveling", 2.5, "1.jpg")

    assert directory == os.path.join(settings.uploads_dir, "solo-leveling", "cap-2.5")
    assert url == "/uploads/solo-leveling/cap-2.5/1.jpg"


def test_find_orphan_directories(settings):
    for path in ["kept/cap-1", "kept/cap-2", "gone/cap-1", "empty-work"]:
        os.makedirs(os.path.join(settings.uploads_dir, path))
    with open(os.path.join(settings.uploads_dir, "kept", "capa-1.png"), "wb") as f:
        f.write(b"cover")

    orphans = find_orphan_directories(settings, {"kept", "empty-work"}, {("kept", "1")})

    assert orphans == [
        os.path.join(settings.uploads_dir, "gone"),
        os.path.join(settings.uploads_dir, "kept", "cap-2"),
    ]
