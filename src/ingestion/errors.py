class IngestionError(Exception):
    """Base class for errors that abort an ingestion batch.

    ``str(error)`` is safe to show to the caller; upstream detail stays in
    the log and in ``__cause__``.
    """


class InvalidBatchError(IngestionError, ValueError):
    pass


class ChannelResolutionError(IngestionError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Unable to resolve channel ID from {url}")
        self.url = url


class FeedUnavailableError(IngestionError):
    def __init__(self, channel_id: str) -> None:
        super().__init__("Unable to fetch YouTube feed.")
        self.channel_id = channel_id
