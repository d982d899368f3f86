"""Tests for the bbm-indonesia exception hierarchy."""

import pytest

from bbm_indonesia.core.exceptions import (
    BbmIndonesiaError,
    CacheError,
    ConfigError,
    ProviderError,
    ProviderNotFoundError,
    ProviderTimeoutError,
    RegionDirectoryError,
)


@pytest.mark.unit
class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_cls",
        [
            ConfigError,
            RegionDirectoryError,
            ProviderError,
            ProviderTimeoutError,
            ProviderNotFoundError,
            CacheError,
        ],
    )
    def test_subclasses_base(self, exc_cls):
        assert issubclass(exc_cls, BbmIndonesiaError)

    def test_timeout_is_provider_error(self):
        assert issubclass(ProviderTimeoutError, ProviderError)

    def test_not_found_is_not_provider_error(self):
        assert not issubclass(ProviderNotFoundError, ProviderError)


@pytest.mark.unit
class TestContext:
    def test_message_and_context(self):
        exc = RegionDirectoryError("boom", context={"url": "https://x", "status_code": 503})
        assert str(exc) == "boom"
        assert exc.context["status_code"] == 503

    def test_context_defaults_to_empty_dict(self):
        assert ConfigError("bad").context == {}

    def test_catchable_as_base(self):
        with pytest.raises(BbmIndonesiaError):
            raise ProviderTimeoutError("slow", context={"provider": "bp"})
