"""Simple wrappers for the failure states a single endpoint can end up in during a scrape"""


class TransportError(Exception):
    """Exception for requests that never made it back from the modem in one piece.

    Covers connection failures, timeouts, non-200/OK replies and truncated bodies.
    """

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message, status_code, payload)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class DecodeError(Exception):
    """Exception for payloads that are not the JSON array of objects we expect."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message, status_code, payload)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class EmptyResponseError(DecodeError):
    """Exception for single-record endpoints that came back with zero records."""
