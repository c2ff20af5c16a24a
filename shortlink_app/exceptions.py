"""
Domain exceptions for the shortener.

Services raise these; the HTTP layer maps them to status codes in main.py.
Cache failures have no exception here on purpose: cache strategies log
and degrade to a miss instead of raising.
"""


class ShortlinkError(Exception):
    """Base class for all shortener errors"""


class InvalidInputError(ShortlinkError):
    """Client supplied a URL we refuse to shorten"""


class UrlTooLongError(InvalidInputError):
    def __init__(self, max_length: int):
        self.max_length = max_length
        super().__init__(f"URL exceeds maximum length of {max_length} characters")


class InvalidUrlError(InvalidInputError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid URL format: {reason}")


class UnsupportedSchemeError(InvalidInputError):
    def __init__(self, scheme: str):
        self.scheme = scheme
        super().__init__(f"Unsupported URL scheme: {scheme}. Only http/https allowed")


class CodeCollisionError(ShortlinkError):
    """Insert hit the unique constraint on code"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Code already taken: {code}")


class ExhaustedRetriesError(ShortlinkError):
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not allocate a unique code after {attempts} attempts")


class UrlNotFoundError(ShortlinkError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("URL not found")


class StoreError(ShortlinkError):
    """Durable store could not be reached or the query failed"""


class RateLimitExceeded(ShortlinkError):
    def __init__(self, retry_after: float):
        self.retry_after = retry_after
        super().__init__("Too many requests")
