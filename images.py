import base64
import logging
import os
import posixpath
import re
from typing import Iterable, List, NamedTuple, Optional
from urllib.parse import urlparse

import requests

import client_settings as cs

log = logging.getLogger(__name__)

UA = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
      "(KHTML, like Gecko) Chrome/125.0 Safari/537.36")

EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}
DEFAULT_MIME_TYPE = "image/jpeg"
FETCH_TIMEOUT = 10


class MaterializedImage(NamedTuple):
    data: bytes
    mime_type: str
    filename: str

    def data_url(self) -> str:
        b64 = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{b64}"


class ImageSlot(NamedTuple):
    """One requested image and what came back for it (None on failure)."""
    path: str
    image: Optional[MaterializedImage]

    @property
    def ok(self) -> bool:
        return self.image is not None


def mime_type_for(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return EXTENSION_MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


def content_id_for(index: int, filename: str) -> str:
    """Mail content-id, e.g. image_0_mbt1jpg."""
    return f"image_{index}_{re.sub(r'[^a-z0-9]', '', filename.lower())}"


def _filename(path: str) -> str:
    return posixpath.basename(urlparse(path).path) or "image"


def _is_remote(path: str) -> bool:
    return path.startswith("http")


def _read_local(path: str, static_root: str) -> Optional[MaterializedImage]:
    local_path = os.path.join(static_root, *path.lstrip("/").split("/"))
    if not os.path.isfile(local_path):
        return None
    try:
        with open(local_path, "rb") as f:
            data = f.read()
    except OSError as e:
        log.warning("Could not read %s: %s", local_path, e)
        return None
    name = os.path.basename(local_path)
    return MaterializedImage(data, mime_type_for(name), name)


def _fetch_remote(url: str) -> Optional[MaterializedImage]:
    headers = {"User-Agent": UA, "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"}
    try:
        r = requests.get(url, timeout=FETCH_TIMEOUT, headers=headers)
    except requests.RequestException as e:
        log.warning("Image fetch failed for %s: %s", url, e)
        return None
    if not r.ok or not r.content:
        log.warning("Image fetch for %s returned HTTP %s", url, r.status_code)
        return None
    ctype = r.headers.get("Content-Type") or DEFAULT_MIME_TYPE
    return MaterializedImage(r.content, ctype.split(";")[0].strip(), _filename(url))


def materialize(path: str, base_url: str = "", static_root: Optional[str] = None) -> Optional[MaterializedImage]:
    """
    Load one image as bytes + MIME type.

    Rooted paths ("/blonde/...") are read from the static assets folder first;
    anything not found there is fetched over HTTP from base_url + path.
    Every failure comes back as None so the caller can draw a placeholder.
    """
    if not path:
        return None
    if static_root is None:
        static_root = cs.STATIC_ASSETS_DIR

    if path.startswith("/") and not _is_remote(path):
        image = _read_local(path, static_root)
        if image is not None:
            return image

    if _is_remote(path):
        url = path
    elif base_url:
        url = base_url.rstrip("/") + path
    else:
        log.warning("No local file and no base URL for %s", path)
        return None
    return _fetch_remote(url)


def materialize_all(paths: Iterable[str], base_url: str = "", static_root: Optional[str] = None) -> List[ImageSlot]:
    # One at a time, in order: content-ids are assigned by position.
    return [ImageSlot(p, materialize(p, base_url, static_root)) for p in paths]
