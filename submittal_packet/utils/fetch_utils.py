# utils/fetch_utils.py
import logging
from urllib.parse import quote, urlsplit

import requests

from submittal_packet import config
from submittal_packet.models import FetchResult

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone besides letters, digits and '-_.~'
_SEGMENT_SAFE = "!*'()"


def is_absolute_url(location):
    return urlsplit(location).scheme.lower() in ('http', 'https')


def encode_path(path):
    """Percent-encode each path segment, keeping the '/' separators literal."""
    return '/'.join(quote(segment, safe=_SEGMENT_SAFE) for segment in path.split('/'))


def resolve_document_url(location, base_url=None):
    """
    Turn a document reference into a fetchable URL.

    Absolute http(s) URLs are returned untouched. Anything else is treated as
    a path relative to the document base: one leading slash is dropped and
    every segment is percent-encoded on its own.
    """
    if is_absolute_url(location):
        return location
    base_url = base_url if base_url is not None else config.DOCUMENT_BASE_URL
    clean_path = location[1:] if location.startswith('/') else location
    if not base_url.endswith('/'):
        base_url += '/'
    return f"{base_url}{encode_path(clean_path)}"


def fetch_bytes(url, timeout=None):
    """
    Blocking GET of url. Never raises: any network error or non-2xx status is
    returned as a failed FetchResult.
    """
    timeout = timeout if timeout is not None else config.FETCH_TIMEOUT
    logger.info(f"Fetching: {url}")
    try:
        response = requests.get(url, headers={'User-Agent': config.USER_AGENT}, timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Error fetching {url}: {e}")
        return FetchResult(url=url, error=f"Request failed: {e}")

    if not 200 <= response.status_code < 300:
        logger.error(f"Failed to fetch {url}: {response.status_code} {response.reason}")
        return FetchResult(url=url, error=f"HTTP {response.status_code} {response.reason or ''}".strip())

    content = response.content
    logger.info(f"Fetched {len(content)} bytes from {url}")
    return FetchResult(url=url, content=content)


class BrandImages:
    """
    Light and dark logo bytes, fetched at most once per packet.

    A failed fetch is remembered as None so every page of the packet falls
    back to the text brand mark without retrying.
    """

    def __init__(self, fetcher=fetch_bytes, light_url=None, dark_url=None):
        self.fetcher = fetcher
        self.light_url = light_url or config.LOGO_URL
        self.dark_url = dark_url or config.LOGO_WHITE_URL
        self._cache = {}

    def _get(self, url):
        if url not in self._cache:
            result = self.fetcher(url)
            if not result.ok:
                logger.warning(f"Logo unavailable ({result.error}); using text brand mark")
            self._cache[url] = result.content if result.ok else None
        return self._cache[url]

    def light(self):
        return self._get(self.light_url)

    def dark(self):
        return self._get(self.dark_url)
