import logging
import os
import re
import zipfile
import zlib
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
_DIGITS = re.compile(r"(\d+)")


class ArchiveError(Exception):
    """The archive could not be read or holds no page images."""


class PageWriteError(Exception):
    def __init__(self, entry: str, written_pages: list[int], reason: str):
        super().__init__(f"Failed to extract '{entry}': {reason}")
        self.entry = entry
        self.written_pages = written_pages


@dataclass
class ExtractedPage:
    number: int
    filename: str
    source: str


@dataclass
class ExtractionResult:
    directory: str
    pages: list[ExtractedPage] = field(default_factory=list)


def natural_sort_key(name: str) -> tuple:
    # digit runs compare as integers, everything else case-insensitively
    parts = _DIGITS.split(name.casefold())
    return tuple(int(part) if index % 2 else part for index, part in enumerate(parts)), name


def is_page_entry(info: zipfile.ZipInfo) -> bool:
    if info.is_dir():
        return False
    if info.filename.startswith("__MACOSX/"):
        return False
    return os.path.splitext(info.filename)[1].lower() in IMAGE_EXTENSIONS


def select_page_entries(archive: zipfile.ZipFile) -> list[zipfile.ZipInfo]:
    entries = [info for info in archive.infolist() if is_page_entry(info)]
    return sorted(entries, key=lambda info: natural_sort_key(info.filename))


def extract_pages(archive_path: str, target_dir: str) -> ExtractionResult:
    """Write every page image of the archive into ``target_dir`` as ``{n}{ext}``.

    Pages are numbered 1..N following the natural order of the entry names.
    Raises ArchiveError for unreadable or empty archives and PageWriteError
    when an entry fails midway; files already written are left for the
    caller to remove.
    """
    try:
        archive = zipfile.ZipFile(archive_path)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ArchiveError(f"Invalid chapter archive: {exc}") from exc

    result = ExtractionResult(directory=target_dir)
    with archive:
        entries = select_page_entries(archive)
        if not entries:
            raise ArchiveError("Chapter archive contains no page images")

        os.makedirs(target_dir, exist_ok=True)
        for number, info in enumerate(entries, start=1):
            extension = os.path.splitext(info.filename)[1]
            filename = f"{number}{extension}"
            try:
                data = archive.read(info)
                with open(os.path.join(target_dir, filename), "wb") as f:
                    f.write(data)
            except (zipfile.BadZipFile, zlib.error, OSError) as exc:
                written = [page.number for page in result.pages]
                raise PageWriteError(info.filename, written, str(exc)) from exc
            result.pages.append(ExtractedPage(number=number, filename=filename, source=info.filename))

    logger.info("Archive extracted", extra={"target_dir": target_dir, "pages": len(result.pages)})
    return result
