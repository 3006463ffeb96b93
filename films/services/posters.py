"""
Poster archival: download a poster, shrink it, and keep a copy in the
blob store.

Archival never fails the caller. Every step that can go wrong falls
back to the source URL, and the result says which URL was kept.

Policy (stable, archival is never retried with other settings):
- downloads larger than POSTER_MAX_BYTES are not archived
- width bounded to POSTER_MAX_WIDTH pixels, smaller images untouched
- RGB JPEG at POSTER_JPEG_QUALITY
- stored as posters/<imdb_id>.jpg
"""
import logging
from collections import namedtuple
from io import BytesIO

import requests
from django.conf import settings
from PIL import Image

from films.blob import blob_put
from films.omdb import OMDB_MISSING

logger = logging.getLogger(__name__)

POSTER_MAX_WIDTH = 400
POSTER_JPEG_QUALITY = 75
POSTER_MAX_BYTES = 10 * 1024 * 1024

ArchivedPoster = namedtuple("ArchivedPoster", ["url", "archived"])


def poster_key(imdb_id):
    return f"posters/{imdb_id}.jpg"


def compress_poster(raw):
    """Re-encode image bytes as a width-bounded JPEG."""
    with Image.open(BytesIO(raw)) as image:
        image = image.convert("RGB")
        if image.width > POSTER_MAX_WIDTH:
            height = max(1, round(image.height * POSTER_MAX_WIDTH / image.width))
            image = image.resize((POSTER_MAX_WIDTH, height), Image.LANCZOS)

        out = BytesIO()
        image.save(out, format="JPEG", quality=POSTER_JPEG_QUALITY, optimize=True)
    return out.getvalue()


def download_poster(source_url):
    """
    Return the poster bytes, or None when the download fails or the
    body exceeds POSTER_MAX_BYTES.
    """
    try:
        with requests.get(
            source_url, timeout=settings.POSTER_FETCH_TIMEOUT, stream=True
        ) as response:
            if not response.ok:
                logger.warning(
                    "Poster download %s returned HTTP %s",
                    source_url,
                    response.status_code,
                )
                return None

            body = bytearray()
            for chunk in response.iter_content(chunk_size=64 * 1024):
                body.extend(chunk)
                if len(body) > POSTER_MAX_BYTES:
                    logger.warning(
                        "Poster %s is larger than %s bytes, not archiving",
                        source_url,
                        POSTER_MAX_BYTES,
                    )
                    return None
    except requests.RequestException as exc:
        logger.warning("Failed to download poster %s: %s", source_url, exc)
        return None

    return bytes(body)


def archive_poster(source_url, imdb_id):
    """
    Store a compressed copy of `source_url` and return its public URL.

    Falls back to ArchivedPoster(source_url, False) when there is no
    image, archival is not configured, or any step fails.
    """
    fallback = ArchivedPoster(source_url, False)

    if not source_url or source_url == OMDB_MISSING:
        return fallback
    if not settings.BLOB_READ_WRITE_TOKEN:
        return fallback

    raw = download_poster(source_url)
    if raw is None:
        return fallback

    try:
        body = compress_poster(raw)
        url = blob_put(poster_key(imdb_id), body)
    except Exception:
        logger.exception("Poster archival failed for %s", imdb_id)
        return fallback

    return ArchivedPoster(url, True)
