from collections.abc import Sequence
from typing import Optional
from urllib.parse import urlparse

from .errors import InvalidBatchError

MIN_URL_LENGTH = 5
MAX_URL_LENGTH = 200


def validate_ingest_urls(
    urls: object, expected_count: Optional[int] = None
) -> list[str]:
    if isinstance(urls, str) or not isinstance(urls, Sequence) or not urls:
        raise InvalidBatchError("Please send at least one channel URL.")

    if expected_count is not None and len(urls) != expected_count:
        raise InvalidBatchError(f"Please send exactly {expected_count} channel URLs.")

    cleaned: list[str] = []
    for raw in urls:
        if not isinstance(raw, str):
            raise InvalidBatchError("Channel URLs must be strings.")
        url = raw.strip()
        if not MIN_URL_LENGTH <= len(url) <= MAX_URL_LENGTH:
            raise InvalidBatchError(
                f"Channel URL must be {MIN_URL_LENGTH}-{MAX_URL_LENGTH} characters: {url!r}"
            )
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise InvalidBatchError(f"Not a valid URL: {url!r}")
        cleaned.append(url)
    return cleaned
