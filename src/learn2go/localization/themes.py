"""Country colour palettes and locale-specific road copy."""

from learn2go.localization.countries import DEFAULT_COUNTRY
from learn2go.models.snapshot import CountryTheme

COUNTRY_THEMES: dict[str, CountryTheme] = {
    "IN": CountryTheme(
        primary_color="#FF6B35",
        secondary_color="#138808",
        accent_color="#FFD700",
        road_signs=["🚦", "🛑", "⚠️", "🚸"],
        traffic_rules=[
            "Drive on the left side of the road",
            "Helmet mandatory for two-wheelers",
            "Speed limit in cities: 50 km/h",
            "Honking prohibited in silence zones",
        ],
        cultural_elements=["🏛️", "🕌", "🛺", "🐄"],
        emergency_number="112",
        currency="₹",
    ),
    "US": CountryTheme(
        primary_color="#1E40AF",
        secondary_color="#DC2626",
        accent_color="#FFFFFF",
        road_signs=["🛑", "⚠️", "🚸", "🚧"],
        traffic_rules=[
            "Drive on the right side of the road",
            "Seat belts mandatory for all passengers",
            "Speed limits vary by state",
            "Right turn on red allowed (unless prohibited)",
        ],
        cultural_elements=["🗽", "🏈", "🚗", "🦅"],
        emergency_number="911",
        currency="$",
    ),
    "GB": CountryTheme(
        primary_color="#1E3A8A",
        secondary_color="#DC2626",
        accent_color="#FFFFFF",
        road_signs=["🚦", "🛑", "⚠️", "🚸"],
        traffic_rules=[
            "Drive on the left side of the road",
            "Roundabouts are common",
            "Speed cameras are frequent",
            "MOT test required annually",
        ],
        cultural_elements=["👑", "☂️", "🚌", "☕"],
        emergency_number="999",
        currency="£",
    ),
}


def get_country_theme(country: str | None) -> CountryTheme:
    """Theme for a country, falling back to the US theme.

    Returns a copy so callers can't mutate the shared table.
    """
    theme = COUNTRY_THEMES.get((country or "").upper(), COUNTRY_THEMES[DEFAULT_COUNTRY])
    return theme.model_copy(deep=True)
