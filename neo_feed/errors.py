from typing import Optional


class NeoFeedError(Exception):
    """Base class for every error the feed pipeline raises."""


class SchemaError(NeoFeedError):
    """Upstream payload does not have the expected shape."""

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} (at {self.location})"
        return self.message


class UpstreamError(NeoFeedError):
    """Transport or HTTP failure talking to the NEO provider."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        retry_after: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.retry_after = retry_after


class NotFoundError(NeoFeedError):
    """Detail lookup for an identifier the provider does not know."""

    def __init__(self, neo_id: str):
        super().__init__(f"NEO {neo_id} not found")
        self.neo_id = neo_id


class ValidationError(NeoFeedError):
    """Caller supplied parameters that cannot be used for a fetch."""
