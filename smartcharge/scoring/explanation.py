"""
Localized explanation strings for scored stations.

An explanation is a density tier followed by whichever optional clauses
apply, joined with " & ".
"""

from typing import Dict, List


SEPARATOR = " & "

LOW_LOAD_THRESHOLD = 30
HIGH_LOAD_THRESHOLD = 65
NEAR_DISTANCE_KM = 5.0
AFFORDABLE_PRICE = 7.0

MESSAGES: Dict[str, Dict[str, str]] = {
    "tr": {
        "low_density": "Düşük yoğunluk",
        "medium_density": "Orta yoğunluk",
        "high_density": "Yüksek yoğunluk",
        "green": "yeşil tarife",
        "near": "yakın",
        "affordable": "uygun fiyat",
        "experience": "geçmiş deneyim",
        "exploration": "keşif",
    },
    "en": {
        "low_density": "Low density",
        "medium_density": "Medium density",
        "high_density": "High density",
        "green": "green tariff",
        "near": "nearby",
        "affordable": "affordable price",
        "experience": "past experience",
        "exploration": "exploration",
    },
}

DEFAULT_LOCALE = "tr"


def get_messages(locale: str) -> Dict[str, str]:
    """Message catalog for ``locale``; raises ValueError for unknown locales."""
    try:
        return MESSAGES[locale]
    except KeyError:
        raise ValueError(
            f"Unsupported locale '{locale}'. Available: {', '.join(sorted(MESSAGES))}"
        ) from None


def density_key(load: float) -> str:
    if load < LOW_LOAD_THRESHOLD:
        return "low_density"
    if load > HIGH_LOAD_THRESHOLD:
        return "high_density"
    return "medium_density"


def build_explanation(
    load: float,
    green_hour: bool,
    distance_km: float,
    price: float,
    *,
    experienced: bool = False,
    explored: bool = False,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """
    Build the explanation for one station.

    Args:
        load: Effective load (forecast or density fallback), 0-100
        green_hour: Whether the requested hour is in the green-tariff window
        distance_km: Distance from the user
        price: Station price
        experienced: Add the "past experience" clause
        explored: Add the "exploration" clause
        locale: Message catalog to use

    Returns:
        Clauses joined with " & "
    """
    messages = get_messages(locale)
    parts: List[str] = [messages[density_key(load)]]
    if green_hour:
        parts.append(messages["green"])
    if distance_km < NEAR_DISTANCE_KM:
        parts.append(messages["near"])
    if price < AFFORDABLE_PRICE:
        parts.append(messages["affordable"])
    if experienced:
        parts.append(messages["experience"])
    if explored:
        parts.append(messages["exploration"])
    return SEPARATOR.join(parts)
