"""
Dedup hashing for query history entries.

The hash is a cheap 32-bit rolling fingerprint used to recognise repeat
queries. It is collision-tolerant and NOT suitable for any security use.
"""

from typing import Iterable, Optional


def _utf16_code_units(text: str) -> Iterable[int]:
    data = text.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def hash_string(text: str) -> str:
    """Hash text as h = (h << 5) - h + code_unit, truncated to signed 32 bits.

    Iterates UTF-16 code units so values match hashes persisted by the
    browser-side caches.
    """
    h = 0
    for unit in _utf16_code_units(text or ""):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return str(h)


def crawl_dedup_key(mode: str, query: Optional[str] = None, urls: Optional[Iterable[str]] = None) -> str:
    """Canonical string identifying a crawl operation."""
    return f"{mode}:{query or ''}:{','.join(urls or [])}"
