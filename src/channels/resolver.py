"""Resolve arbitrary YouTube channel URLs to a stable channel ID."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Optional
from urllib.parse import urlencode

from src.ingestion.config import Settings

from .http_client import HttpError, TextClient

LOGGER = logging.getLogger(__name__)

_CHANNEL_PATH = re.compile(r"channel/([a-zA-Z0-9_-]+)", re.IGNORECASE)
_HANDLE = re.compile(r"(?:@|user/|c/)([a-zA-Z0-9_-]+)")
_EMBEDDED_CHANNEL_ID = re.compile(r'"channelId":"([a-zA-Z0-9_-]+)"')
_CHANNEL_LINK = re.compile(r"youtube\.com/channel/([a-zA-Z0-9_-]+)", re.IGNORECASE)
_FEED_CHANNEL_ID = re.compile(r"<yt:channelId>([\s\S]*?)</yt:channelId>", re.IGNORECASE)


def channel_id_from_path(url: str) -> Optional[str]:
    match = _CHANNEL_PATH.search(url)
    return match.group(1) if match else None


def extract_handle(url: str) -> Optional[str]:
    """Return the ``@handle``, ``user/<name>`` or ``c/<name>`` token, if any."""
    match = _HANDLE.search(url)
    return match.group(1) if match else None


def channel_id_from_markup(html: str) -> Optional[str]:
    match = _EMBEDDED_CHANNEL_ID.search(html) or _CHANNEL_LINK.search(html)
    return match.group(1) if match else None


def channel_id_from_feed(xml: str) -> Optional[str]:
    match = _FEED_CHANNEL_ID.search(xml)
    if not match:
        return None
    return match.group(1).strip() or None


class ChannelResolver:
    """Tries each resolution strategy in order; the first non-empty result wins.

    Strategies, cheapest first:
        1. ``channel/<id>`` already present in the URL (no network call).
        2. Scrape the channel page for an embedded ``"channelId"`` or a
           ``youtube.com/channel/<id>`` link.
        3. Look the handle up through the legacy ``?user=`` feed.

    Network failures in the scraping strategies are logged and the next
    strategy is attempted.
    """

    def __init__(self, client: TextClient, settings: Optional[Settings] = None) -> None:
        self.client = client
        self.settings = settings or Settings()

    def _strategies(self, url: str) -> list[Callable[[], Optional[str]]]:
        return [
            lambda: channel_id_from_path(url),
            lambda: self._from_page(url),
            lambda: self._from_legacy_feed(extract_handle(url)),
        ]

    def resolve(self, url: str) -> Optional[str]:
        for strategy in self._strategies(url):
            channel_id = strategy()
            if channel_id:
                return channel_id
        LOGGER.warning("no channel id found for %s", url)
        return None

    def _browser_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.browser_user_agent,
            "Accept-Language": self.settings.accept_language,
        }

    def _from_page(self, url: str) -> Optional[str]:
        try:
            html = self.client.request_text(url, headers=self._browser_headers())
        except HttpError as exc:
            LOGGER.warning("Failed to resolve channel id for %s: %s", url, exc)
            return None
        return channel_id_from_markup(html)

    def _from_legacy_feed(self, handle: Optional[str]) -> Optional[str]:
        if not handle:
            return None
        feed_url = f"{self.settings.feed_base_url}?{urlencode({'user': handle})}"
        try:
            xml = self.client.request_text(feed_url, headers=self._browser_headers())
        except HttpError as exc:
            LOGGER.warning("Fallback feed lookup failed for %s: %s", handle, exc)
            return None
        return channel_id_from_feed(xml)
