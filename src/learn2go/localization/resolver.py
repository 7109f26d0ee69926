"""Country/language resolution with deterministic fallback."""

from collections.abc import Awaitable, Callable

import structlog

from learn2go.localization.countries import (
    DEFAULT_COUNTRY,
    DEFAULT_LANGUAGE,
    Country,
    detect_country_from_locale,
    get_country,
)

logger = structlog.get_logger()

LocaleChangeCallback = Callable[[str, str], None]
GeolocateFn = Callable[[], Awaitable[str | None]]


def select_language(country: Country, requested: str | None = None) -> str:
    """Pick a language the country supports.

    Args:
        country: Resolved country.
        requested: Language asked for, if any.

    Returns:
        ``requested`` when supported. Without a request, the country's
        primary (first listed) language. With an unsupported request,
        English when the country offers it, else the primary language.
    """
    requested = requested.strip().lower() if requested else None
    if requested and country.supports(requested):
        return requested
    if requested and country.supports(DEFAULT_LANGUAGE):
        return DEFAULT_LANGUAGE
    return country.languages[0].code


class LocaleResolver:
    """Resolves and tracks the learner's (country, language) pair.

    Country comes from an explicit choice, then IP geolocation, then the
    browser locale. Every change of the pair is pushed to registered
    callbacks; there is no other notification channel.

    Args:
        geolocate: Optional coroutine function returning a country code.
        browser_locale: Browser locale string such as ``"te-IN"``.
    """

    def __init__(
        self,
        geolocate: GeolocateFn | None = None,
        browser_locale: str | None = None,
    ):
        self._geolocate = geolocate
        self._browser_locale = browser_locale
        self._country: str | None = None
        self._language: str | None = None
        self._callbacks: list[LocaleChangeCallback] = []

    @property
    def country(self) -> str | None:
        return self._country

    @property
    def language(self) -> str | None:
        return self._language

    def on_change(self, callback: LocaleChangeCallback) -> None:
        """Register a callback receiving ``(country, language)``."""
        self._callbacks.append(callback)

    async def resolve(
        self,
        explicit_country: str | None = None,
        explicit_language: str | None = None,
    ) -> tuple[str, str]:
        """Resolve a definite locale pair.

        Args:
            explicit_country: Country chosen by the user.
            explicit_language: Language chosen by the user.

        Returns:
            (country, language) where language is offered by country.
        """
        country = await self._pick_country(explicit_country)
        language = select_language(country, explicit_language)
        self._commit(country.code, language)
        return country.code, language

    def set_country(self, code: str) -> tuple[str, str]:
        """Switch country, keeping the current language when possible."""
        country = get_country(code)
        if country is None:
            logger.warning("unsupported_country", country=code)
            country = get_country(self._country or DEFAULT_COUNTRY)
        language = select_language(country, self._language)
        self._commit(country.code, language)
        return country.code, language

    def set_language(self, code: str) -> tuple[str, str]:
        """Switch language within the current country."""
        country = get_country(self._country or DEFAULT_COUNTRY)
        language = select_language(country, code)
        self._commit(country.code, language)
        return country.code, language

    async def _pick_country(self, explicit_country: str | None) -> Country:
        country = get_country(explicit_country)
        if country is not None:
            return country
        if explicit_country:
            logger.warning("unsupported_country", country=explicit_country)

        if self._geolocate is not None:
            try:
                code = await self._geolocate()
            except Exception as e:
                logger.warning("geolocation_error", error=str(e))
                code = None
            country = get_country(code)
            if country is not None:
                logger.debug("country_from_geolocation", country=country.code)
                return country

        return get_country(detect_country_from_locale(self._browser_locale))

    def _commit(self, country: str, language: str) -> None:
        if (country, language) == (self._country, self._language):
            return
        self._country = country
        self._language = language
        logger.info("locale_changed", country=country, language=language)
        for callback in self._callbacks:
            try:
                callback(country, language)
            except Exception:
                logger.exception("locale_callback_error")


async def resolve_locale(
    explicit_country: str | None = None,
    explicit_language: str | None = None,
    browser_locale: str | None = None,
    geolocate: GeolocateFn | None = None,
) -> tuple[str, str]:
    """One-shot resolution without change tracking."""
    resolver = LocaleResolver(geolocate=geolocate, browser_locale=browser_locale)
    return await resolver.resolve(explicit_country, explicit_language)
