import importlib


resolver_mod = importlib.import_module("src.channels.resolver")
http_client = importlib.import_module("src.channels.http_client")

ChannelResolver = resolver_mod.ChannelResolver
HttpError = http_client.HttpError


class FakeTextClient:
    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def request_text(self, url, headers=None):
        self.calls.append((url, dict(headers or {})))
        response = self.responses.get(url, HttpError(f"GET {url} failed with status 404"))
        if isinstance(response, Exception):
            raise response
        return response


def test_resolver_returns_channel_path_id_without_network_call():
    client = FakeTextClient()
    resolver = ChannelResolver(client)

    assert resolver.resolve("https://www.youtube.com/channel/UC123") == "UC123"
    assert client.calls == []


def test_resolver_scrapes_embedded_channel_id_with_browser_headers():
    url = "https://www.youtube.com/@somecreator"
    client = FakeTextClient(
        {url: '<html><script>var x = {"channelId":"UCembedded_1-x","title":"t"};</script></html>'}
    )
    resolver = ChannelResolver(client)

    assert resolver.resolve(url) == "UCembedded_1-x"
    called_url, called_headers = client.calls[0]
    assert called_url == url
    assert called_headers["Accept-Language"] == "en-US,en;q=0.9"
    assert "Mozilla/5.0" in called_headers["User-Agent"]
    assert len(client.calls) == 1


def test_resolver_falls_back_to_channel_link_in_markup():
    url = "https://www.youtube.com/c/SomeName"
    client = FakeTextClient(
        {url: '<link rel="canonical" href="https://www.youtube.com/channel/UClinked">'}
    )

    assert ChannelResolver(client).resolve(url) == "UClinked"


def test_resolver_uses_legacy_user_feed_when_page_fetch_fails():
    url = "https://www.youtube.com/user/legacyname"
    feed_url = "https://www.youtube.com/feeds/videos.xml?user=legacyname"
    client = FakeTextClient(
        {
            url: HttpError("connection reset"),
            feed_url: "<feed><yt:channelId> UClegacy </yt:channelId></feed>",
        }
    )

    assert ChannelResolver(client).resolve(url) == "UClegacy"
    assert [call[0] for call in client.calls] == [url, feed_url]


def test_resolver_uses_legacy_feed_when_page_has_no_channel_id():
    url = "https://www.youtube.com/@quiet"
    feed_url = "https://www.youtube.com/feeds/videos.xml?user=quiet"
    client = FakeTextClient(
        {
            url: "<html>consent wall</html>",
            feed_url: "<feed><yt:channelId>UCquiet</yt:channelId></feed>",
        }
    )

    assert ChannelResolver(client).resolve(url) == "UCquiet"


def test_resolver_returns_none_when_every_strategy_fails(caplog):
    url = "https://www.youtube.com/@missing"
    client = FakeTextClient()

    with caplog.at_level("WARNING"):
        assert ChannelResolver(client).resolve(url) is None

    assert len(client.calls) == 2
    assert "Failed to resolve channel id" in caplog.text
    assert "Fallback feed lookup failed for missing" in caplog.text


def test_resolver_skips_legacy_feed_without_handle():
    url = "https://example.com/some/page"
    client = FakeTextClient({url: "<html>nothing here</html>"})

    assert ChannelResolver(client).resolve(url) is None
    assert [call[0] for call in client.calls] == [url]


def test_handle_extraction_supports_known_url_shapes():
    assert resolver_mod.extract_handle("https://www.youtube.com/@my_handle") == "my_handle"
    assert resolver_mod.extract_handle("https://www.youtube.com/user/Old-Name") == "Old-Name"
    assert resolver_mod.extract_handle("https://www.youtube.com/c/Custom") == "Custom"
    assert resolver_mod.extract_handle("https://www.youtube.com/watch?v=abc") is None
