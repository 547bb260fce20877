import hashlib, mimetypes
from pathlib import Path
from typing import BinaryIO
from slugify import slugify
from utils.constants import PHOTO_PREFIX


def make_photo_prefix(poi_id: str) -> str:
    pid = slugify(str(poi_id))
    if not pid:
        raise ValueError("POI id cannot be empty after sanitization.")
    return f"{PHOTO_PREFIX}/{pid}/"


def _hash_bytes(b: bytes, n: int = 16) -> str:
    return hashlib.sha256(b).hexdigest()[:n]


def read_bytes(file: BinaryIO) -> bytes:
    file.seek(0)
    if hasattr(file, "getvalue"):
        return file.getvalue()
    return file.read()


def safe_filename(name: str, data: bytes) -> str:
    p = Path(name or "")
    stem = slugify(p.stem) or "photo"
    sig = _hash_bytes(data)
    ext = (p.suffix or "").lower()
    return f"{stem}-{sig}{ext}"


def detect_content_type(
    filename: str, fallback: str = "application/octet-stream"
) -> str:
    ctype, _ = mimetypes.guess_type(filename)
    return ctype or fallback


def is_image_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.startswith("image/")
