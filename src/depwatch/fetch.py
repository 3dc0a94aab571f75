"""HTTP retrieval of release-notes pages."""
from __future__ import annotations

import codecs
import http.client
import logging
import urllib.error
import urllib.request

from depwatch.errors import FetchError

log = logging.getLogger(__name__)

USER_AGENT = "depwatch-catalog-fetcher"


def _usable_charset(charset: str | None) -> str:
    """Declared charset if Python knows it, else utf-8."""
    if not charset:
        return "utf-8"
    try:
        codecs.lookup(charset)
    except LookupError:
        log.warning("Unknown charset %r, decoding as utf-8", charset)
        return "utf-8"
    return charset


def fetch_text(url: str, *, timeout: float = 30) -> str:
    """GET *url* and return the decoded body.

    Raises:
        FetchError: non-2xx status (``status`` set) or a transport failure
            (``status`` is ``None``), including connections dropped while
            reading the body.
    """
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # noqa: S310
            status = resp.status
            charset = resp.headers.get_content_charset()
            body = resp.read()
    except urllib.error.HTTPError as exc:
        raise FetchError(exc.code, str(exc.reason)) from exc
    except urllib.error.URLError as exc:
        raise FetchError(None, str(exc.reason)) from exc
    except (OSError, http.client.HTTPException) as exc:
        raise FetchError(None, f"{type(exc).__name__}: {exc}") from exc
    if not 200 <= status < 300:
        raise FetchError(status, f"unexpected status fetching {url}")
    log.info("Fetched %s: HTTP %d, %d bytes", url, status, len(body))
    return body.decode(_usable_charset(charset), errors="replace")
