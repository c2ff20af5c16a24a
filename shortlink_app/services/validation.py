"""
Target URL validation.

Parsing uses pydantic's URL type, but only to check the input: the string
the caller sent is what gets stored, so dedupe stays an exact-string match.
"""

from pydantic import AnyUrl, TypeAdapter, ValidationError

from shortlink_app.exceptions import (
    InvalidUrlError,
    UnsupportedSchemeError,
    UrlTooLongError,
)

ALLOWED_SCHEMES = ("http", "https")

_url_adapter = TypeAdapter(AnyUrl)


def validate_target_url(url: str, max_length: int = 2048) -> None:
    """
    Raise an InvalidInputError subclass unless `url` is an absolute
    http/https URL of at most `max_length` characters.
    """
    if len(url) > max_length:
        raise UrlTooLongError(max_length)

    try:
        parsed = _url_adapter.validate_python(url)
    except ValidationError as e:
        raise InvalidUrlError(e.errors()[0]["msg"]) from e

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise UnsupportedSchemeError(parsed.scheme)
