"""
Datasheet Service - Best-effort plain text from PDF datasheets
"""
import io
import logging
import time
from typing import Optional

import requests
from pypdf import PdfReader

from partfinder.settings import Settings

logger = logging.getLogger(__name__)

MAX_PDF_BYTES = 20 * 1024 * 1024
MAX_DOWNLOAD_SECONDS = 30
DOWNLOAD_CHUNK_SIZE = 64 * 1024


class DatasheetExtractor:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.timeout = settings.request_timeout
        self.user_agent = settings.user_agent
        self.default_max_chars = settings.datasheet_max_chars
        self.session = session or requests.Session()

    def _download(self, url: str) -> Optional[bytes]:
        """Fetch the document, giving up (None) past MAX_PDF_BYTES or MAX_DOWNLOAD_SECONDS."""
        started = time.monotonic()
        resp = self.session.get(
            url,
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            stream=True,
        )
        try:
            resp.raise_for_status()

            declared = resp.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > MAX_PDF_BYTES:
                logger.warning("Datasheet %s is too large (%s bytes)", url, declared)
                return None

            chunks = []
            size = 0
            for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                size += len(chunk)
                if size > MAX_PDF_BYTES:
                    logger.warning("Datasheet %s exceeded %d bytes, skipping", url, MAX_PDF_BYTES)
                    return None
                if time.monotonic() - started > MAX_DOWNLOAD_SECONDS:
                    logger.warning("Datasheet %s took longer than %ds to download, skipping", url, MAX_DOWNLOAD_SECONDS)
                    return None
                chunks.append(chunk)
            return b"".join(chunks)
        finally:
            resp.close()

    def extract(self, url: str, max_chars: Optional[int] = None) -> str:
        """
        Return at most `max_chars` characters of the document's text.

        Any fetch or parse failure yields an empty string.
        """
        limit = self.default_max_chars if max_chars is None else max_chars
        if limit <= 0:
            return ""

        try:
            raw = self._download(url)
        except requests.RequestException as e:
            logger.warning("Datasheet fetch failed for %s: %s", url, e)
            return ""
        if raw is None:
            return ""

        try:
            reader = PdfReader(io.BytesIO(raw))
            texts = []
            length = 0
            for idx, page in enumerate(reader.pages):
                try:
                    text = page.extract_text() or ""
                except Exception as e:
                    logger.debug("Page %d of %s could not be read: %s", idx, url, e)
                    continue
                texts.append(text)
                length += len(text)
                if length >= limit:
                    break
        except Exception as e:
            logger.warning("Datasheet %s is not a readable PDF: %s", url, e)
            return ""

        return "".join(texts)[:limit]
