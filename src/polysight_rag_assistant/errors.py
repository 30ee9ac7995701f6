from __future__ import annotations


class AssistantError(Exception):
    """Base class for errors raised by the assistant itself."""


class VectorStoreConnectionError(AssistantError):
    """The Qdrant server could not be reached."""

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Unable to connect to Qdrant at {url}{detail}")
        self.url = url


class NotInitializedError(AssistantError):
    """A question was asked before the chain was built."""


def is_connection_error(exc: BaseException) -> bool:
    if isinstance(exc, (VectorStoreConnectionError, ConnectionError)):
        return True
    message = str(exc)
    return "ECONNREFUSED" in message or "Connection refused" in message or "fetch failed" in message


def is_api_key_error(exc: BaseException) -> bool:
    message = str(exc).lower()
    return "api key" in message or "api_key" in message


__all__ = [
    "AssistantError",
    "VectorStoreConnectionError",
    "NotInitializedError",
    "is_connection_error",
    "is_api_key_error",
]
