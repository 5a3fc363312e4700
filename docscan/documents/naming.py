import re
from datetime import datetime
from pathlib import PurePosixPath
from urllib.parse import unquote

_UNSAFE_CHARS_RE = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE_RE = re.compile(r"\s+")
_MAX_FILENAME_LENGTH = 200


def default_doc_title(timestamp_ms: int) -> str:
    """Title such as '2025-10-27 Scan' for the given epoch milliseconds."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d Scan")


def sanitize_filename(name: str) -> str:
    cleaned = _UNSAFE_CHARS_RE.sub("-", name)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    return cleaned[:_MAX_FILENAME_LENGTH]


def filename_from_uri(uri: str) -> str:
    """Last path segment of a path or file:// URI, URL-decoded."""
    bare = uri.split("?", 1)[0].split("#", 1)[0]
    name = PurePosixPath(bare).name or "Document"
    return unquote(name)


def strip_extension(filename: str) -> str:
    idx = filename.rfind(".")
    return filename[:idx] if idx > 0 else filename


def export_filename(title: str | None) -> str:
    safe = sanitize_filename(title or "") or "Scan"
    return f"{safe}.pdf"


def to_fs_path(uri: str) -> str:
    """Plain filesystem path for a path or file:// URI."""
    if uri.startswith("file://"):
        return unquote(uri[len("file://"):])
    return uri
