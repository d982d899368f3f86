"""Custom exception hierarchy for bbm-indonesia."""

from typing import Any


class BbmIndonesiaError(Exception):
    """Base exception for all bbm-indonesia errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(BbmIndonesiaError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field (str): the config field that failed validation
        value (Any): the invalid value
    """


class RegionDirectoryError(BbmIndonesiaError):
    """Failed to fetch or parse the administrative region directory.

    Policy: surface to the caller of RegionDirectory. The region matcher
    degrades to unmatched regions instead of propagating it.

    Context keys:
        url (str): the URL that was being fetched
        status_code (int | None): HTTP status code if applicable
    """


class ProviderError(BbmIndonesiaError):
    """A provider adapter could not produce price records.

    Policy: recover locally. The provider appears in the snapshot as
    {error, data: []}; other providers are unaffected.

    Context keys:
        provider (str): the provider key
        url (str | None): the page being scraped
    """


class ProviderTimeoutError(ProviderError):
    """A provider adapter exceeded its time budget.

    Context keys:
        provider (str): the provider key
        timeout_seconds (float): the budget that was exceeded
    """


class ProviderNotFoundError(BbmIndonesiaError):
    """A query named a provider key that is not configured.

    Policy: user input error, mapped to HTTP 404.

    Context keys:
        provider (str): the requested key
        available (list[str]): the configured provider keys
    """


class CacheError(BbmIndonesiaError):
    """The snapshot cache holds a value of an unexpected shape.

    Policy: raise immediately; surfaced as a server error.

    Context keys:
        key (str): the cache key involved
    """
