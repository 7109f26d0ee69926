"""Supported countries and the languages each one offers."""

from pydantic import BaseModel

DEFAULT_COUNTRY = "US"
DEFAULT_LANGUAGE = "en"


class Language(BaseModel):
    code: str
    name: str
    native_name: str


class Country(BaseModel):
    code: str
    name: str
    flag: str
    languages: list[Language]

    @property
    def language_codes(self) -> list[str]:
        return [lang.code for lang in self.languages]

    def supports(self, language: str) -> bool:
        return language in self.language_codes


def _lang(code: str, name: str, native_name: str) -> Language:
    return Language(code=code, name=name, native_name=native_name)


_EN = _lang("en", "English", "English")

COUNTRIES: list[Country] = [
    Country(code="IN", name="India", flag="🇮🇳", languages=[
        _EN,
        _lang("hi", "Hindi", "हिन्दी"),
        _lang("te", "Telugu", "తెలుగు"),
        _lang("ta", "Tamil", "தமிழ்"),
        _lang("bn", "Bengali", "বাংলা"),
        _lang("kn", "Kannada", "ಕನ್ನಡ"),
        _lang("mr", "Marathi", "मराठी"),
        _lang("ml", "Malayalam", "മലയാളം"),
        _lang("gu", "Gujarati", "ગુજરાતી"),
        _lang("pa", "Punjabi", "ਪੰਜਾਬੀ"),
    ]),
    Country(code="US", name="United States", flag="🇺🇸", languages=[
        _EN,
        _lang("es", "Spanish", "Español"),
    ]),
    Country(code="GB", name="United Kingdom", flag="🇬🇧", languages=[
        _EN,
        _lang("cy", "Welsh", "Cymraeg"),
        _lang("gd", "Scottish Gaelic", "Gàidhlig"),
    ]),
    Country(code="CA", name="Canada", flag="🇨🇦", languages=[
        _EN,
        _lang("fr", "French", "Français"),
    ]),
    Country(code="AU", name="Australia", flag="🇦🇺", languages=[_EN]),
    Country(code="DE", name="Germany", flag="🇩🇪", languages=[
        _lang("de", "German", "Deutsch"),
        _EN,
    ]),
    Country(code="FR", name="France", flag="🇫🇷", languages=[
        _lang("fr", "French", "Français"),
        _EN,
    ]),
    Country(code="ES", name="Spain", flag="🇪🇸", languages=[
        _lang("es", "Spanish", "Español"),
        _lang("ca", "Catalan", "Català"),
        _lang("eu", "Basque", "Euskera"),
        _EN,
    ]),
    Country(code="JP", name="Japan", flag="🇯🇵", languages=[
        _lang("ja", "Japanese", "日本語"),
        _EN,
    ]),
    Country(code="BR", name="Brazil", flag="🇧🇷", languages=[
        _lang("pt", "Portuguese", "Português"),
        _EN,
    ]),
    Country(code="MX", name="Mexico", flag="🇲🇽", languages=[
        _lang("es", "Spanish", "Español"),
        _EN,
    ]),
    Country(code="CN", name="China", flag="🇨🇳", languages=[
        _lang("zh", "Chinese (Simplified)", "简体中文"),
        _EN,
    ]),
    Country(code="IT", name="Italy", flag="🇮🇹", languages=[
        _lang("it", "Italian", "Italiano"),
        _EN,
    ]),
    Country(code="RU", name="Russia", flag="🇷🇺", languages=[
        _lang("ru", "Russian", "Русский"),
        _EN,
    ]),
    Country(code="ZA", name="South Africa", flag="🇿🇦", languages=[
        _EN,
        _lang("af", "Afrikaans", "Afrikaans"),
        _lang("zu", "Zulu", "isiZulu"),
    ]),
    Country(code="SG", name="Singapore", flag="🇸🇬", languages=[
        _EN,
        _lang("zh", "Chinese", "中文"),
        _lang("ms", "Malay", "Bahasa Melayu"),
        _lang("ta", "Tamil", "தமிழ்"),
    ]),
]

_BY_CODE: dict[str, Country] = {c.code: c for c in COUNTRIES}

# Browser language prefix -> country, used when no region subtag matches
LANGUAGE_COUNTRY_HINTS: dict[str, str] = {
    "hi": "IN", "te": "IN", "ta": "IN", "bn": "IN", "kn": "IN",
    "mr": "IN", "ml": "IN", "gu": "IN", "pa": "IN",
    "es": "ES",
    "fr": "FR",
    "de": "DE",
    "ja": "JP",
    "pt": "BR",
    "zh": "CN",
    "it": "IT",
    "ru": "RU",
}


def get_country(code: str | None) -> Country | None:
    """Look up a supported country by ISO code (case-insensitive)."""
    if not code:
        return None
    return _BY_CODE.get(code.upper())


def get_language(code: str) -> Language | None:
    """Find a language definition by code in any country."""
    for country in COUNTRIES:
        for lang in country.languages:
            if lang.code == code:
                return lang
    return None


def get_all_supported_languages() -> list[Language]:
    """All distinct languages, sorted by English name."""
    seen: dict[str, Language] = {}
    for country in COUNTRIES:
        for lang in country.languages:
            seen.setdefault(lang.code, lang)
    return sorted(seen.values(), key=lambda lang: lang.name)


def get_total_language_count() -> int:
    return len({lang.code for country in COUNTRIES for lang in country.languages})


def detect_country_from_locale(locale: str | None) -> str:
    """Guess a supported country from a browser locale such as ``te-IN``.

    A region subtag naming a supported country wins; otherwise the
    language prefix is mapped through ``LANGUAGE_COUNTRY_HINTS``.
    """
    locale = (locale or "en-US").replace("_", "-")
    parts = locale.split("-")
    if len(parts) > 1 and get_country(parts[1]):
        return parts[1].upper()
    return LANGUAGE_COUNTRY_HINTS.get(parts[0].lower(), DEFAULT_COUNTRY)
