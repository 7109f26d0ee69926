"""Tests for country/language resolution."""

from unittest.mock import AsyncMock, MagicMock

import httpx

from learn2go.localization.countries import (
    detect_country_from_locale,
    get_all_supported_languages,
    get_country,
    get_total_language_count,
)
from learn2go.localization.geolocation import lookup_country
from learn2go.localization.resolver import LocaleResolver, resolve_locale, select_language
from learn2go.localization.themes import get_country_theme
from learn2go.localization.translations import get_table, translate


class TestSelectLanguage:
    def test_primary_language_when_none_requested(self):
        assert select_language(get_country("DE")) == "de"

    def test_unsupported_request_falls_back_to_english(self):
        assert select_language(get_country("US"), "hi") == "en"

    def test_supported_request_is_kept(self):
        assert select_language(get_country("IN"), "te") == "te"

    def test_request_is_case_insensitive(self):
        assert select_language(get_country("IN"), " TE ") == "te"


class TestCountryLookup:
    def test_case_insensitive(self):
        assert get_country("in").code == "IN"

    def test_unknown_country(self):
        assert get_country("ZZ") is None
        assert get_country(None) is None

    def test_language_catalogue(self):
        codes = [lang.code for lang in get_all_supported_languages()]
        assert len(codes) == len(set(codes))
        assert get_total_language_count() == len(codes)
        assert "te" in codes


class TestDetectCountryFromLocale:
    def test_region_subtag_wins(self):
        assert detect_country_from_locale("te-IN") == "IN"
        assert detect_country_from_locale("en_GB") == "GB"

    def test_language_prefix_hint(self):
        assert detect_country_from_locale("hi") == "IN"
        assert detect_country_from_locale("de-XX") == "DE"

    def test_defaults_to_us(self):
        assert detect_country_from_locale(None) == "US"
        assert detect_country_from_locale("xx") == "US"


class TestLocaleResolver:
    async def test_explicit_country_wins_over_geolocation(self):
        geolocate = AsyncMock(return_value="GB")
        resolver = LocaleResolver(geolocate=geolocate)

        assert await resolver.resolve("IN", "te") == ("IN", "te")
        geolocate.assert_not_called()

    async def test_geolocation_used_without_explicit_country(self):
        resolver = LocaleResolver(geolocate=AsyncMock(return_value="DE"))

        assert await resolver.resolve() == ("DE", "de")

    async def test_geolocation_failure_falls_back_to_browser_locale(self):
        resolver = LocaleResolver(
            geolocate=AsyncMock(side_effect=RuntimeError("network down")),
            browser_locale="te-IN",
        )

        assert await resolver.resolve(explicit_language="te") == ("IN", "te")

    async def test_unknown_explicit_country_falls_through(self):
        resolver = LocaleResolver(browser_locale="fr-FR")

        assert await resolver.resolve("ZZ") == ("FR", "fr")

    async def test_language_always_offered_by_country(self):
        resolver = LocaleResolver()

        country, language = await resolver.resolve("JP", "te")

        assert get_country(country).supports(language)

    async def test_change_callback_fires_once_per_change(self):
        callback = MagicMock()
        resolver = LocaleResolver()
        resolver.on_change(callback)

        await resolver.resolve("IN", "hi")
        await resolver.resolve("IN", "hi")
        resolver.set_language("te")

        assert callback.call_count == 2
        callback.assert_called_with("IN", "te")

    async def test_callback_error_does_not_break_resolution(self):
        resolver = LocaleResolver()
        resolver.on_change(MagicMock(side_effect=ValueError("boom")))

        assert await resolver.resolve("US") == ("US", "en")
        assert resolver.country == "US"

    async def test_set_country_keeps_supported_language(self):
        resolver = LocaleResolver()
        await resolver.resolve("US", "es")

        assert resolver.set_country("MX") == ("MX", "es")
        assert resolver.set_country("DE") == ("DE", "en")

    async def test_resolve_locale_one_shot(self):
        assert await resolve_locale("DE") == ("DE", "de")


def _transport(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestLookupCountry:
    async def test_returns_upper_case_code(self):
        client = _transport(lambda request: httpx.Response(200, json={"country_code": "in"}))

        assert await lookup_country("https://geo.test/json/", client=client) == "IN"

    async def test_http_error_returns_none(self):
        client = _transport(lambda request: httpx.Response(500))

        assert await lookup_country("https://geo.test/json/", client=client) is None

    async def test_provider_error_returns_none(self):
        client = _transport(
            lambda request: httpx.Response(200, json={"error": True, "reason": "RateLimited"})
        )

        assert await lookup_country("https://geo.test/json/", client=client) is None


class TestThemesAndTranslations:
    def test_theme_falls_back_to_us(self):
        assert get_country_theme("JP").emergency_number == "911"
        assert get_country_theme("in").currency == "₹"

    def test_theme_is_a_copy(self):
        theme = get_country_theme("IN")
        theme.traffic_rules.append("mutated")

        assert "mutated" not in get_country_theme("IN").traffic_rules

    def test_translate_falls_back_to_english_then_key(self):
        assert translate("nav.home", "te") == "ముంగిలి"
        assert translate("lessons.quiz", "te") == "Take Safety Quiz"
        assert translate("missing.key", "hi") == "missing.key"

    def test_table_merges_english(self):
        table = get_table("hi")
        assert table["common.error"] == "त्रुटि"
        assert table["lessons.title"] == "Traffic Safety Lessons"
