"""
Currency utilities for payouts and pricing display.
Detects a default currency from the client's timezone and language tags,
with no external lookups.
"""
from typing import Iterable, Optional

import pytz

# Fallback when nothing can be detected
DEFAULT_CURRENCY = 'CAD'

# Currencies the dashboard can price and pay out in
SUPPORTED_CURRENCIES = ['CAD', 'USD', 'EUR', 'GBP', 'AUD', 'JPY', 'INR', 'BRL', 'MXN', 'KRW']

TIMEZONE_CURRENCY_MAP = {
    # Canada
    'America/Toronto': 'CAD',
    'America/Vancouver': 'CAD',
    'America/Edmonton': 'CAD',
    'America/Winnipeg': 'CAD',
    'America/Halifax': 'CAD',
    'America/St_Johns': 'CAD',
    'America/Regina': 'CAD',
    'America/Montreal': 'CAD',

    # USA
    'America/New_York': 'USD',
    'America/Chicago': 'USD',
    'America/Denver': 'USD',
    'America/Los_Angeles': 'USD',
    'America/Phoenix': 'USD',
    'America/Anchorage': 'USD',
    'Pacific/Honolulu': 'USD',

    # UK
    'Europe/London': 'GBP',

    # Eurozone
    'Europe/Paris': 'EUR',
    'Europe/Berlin': 'EUR',
    'Europe/Rome': 'EUR',
    'Europe/Madrid': 'EUR',
    'Europe/Amsterdam': 'EUR',
    'Europe/Brussels': 'EUR',
    'Europe/Vienna': 'EUR',
    'Europe/Dublin': 'EUR',
    'Europe/Lisbon': 'EUR',
    'Europe/Helsinki': 'EUR',
    'Europe/Athens': 'EUR',

    # Asia-Pacific
    'Asia/Tokyo': 'JPY',
    'Asia/Seoul': 'KRW',
    'Asia/Kolkata': 'INR',
    'Asia/Calcutta': 'INR',
    'Australia/Sydney': 'AUD',
    'Australia/Melbourne': 'AUD',
    'Australia/Brisbane': 'AUD',
    'Australia/Perth': 'AUD',
    'Australia/Adelaide': 'AUD',

    # Latin America
    'America/Sao_Paulo': 'BRL',
    'America/Rio_Branco': 'BRL',
    'America/Mexico_City': 'MXN',
    'America/Cancun': 'MXN',
    'America/Tijuana': 'MXN',
}

# Region subtag of a language tag (en-CA -> CA)
LOCALE_CURRENCY_MAP = {
    'CA': 'CAD',
    'US': 'USD',
    'GB': 'GBP',
    'UK': 'GBP',
    'AU': 'AUD',
    'JP': 'JPY',
    'KR': 'KRW',
    'IN': 'INR',
    'BR': 'BRL',
    'MX': 'MXN',
    # Eurozone
    'DE': 'EUR',
    'FR': 'EUR',
    'IT': 'EUR',
    'ES': 'EUR',
    'NL': 'EUR',
    'BE': 'EUR',
    'AT': 'EUR',
    'IE': 'EUR',
    'PT': 'EUR',
    'FI': 'EUR',
    'GR': 'EUR',
}


def is_valid_timezone(tz_string):
    """
    Validate timezone string against pytz database.

    Args:
        tz_string: Timezone string to validate (e.g., 'America/Toronto')

    Returns:
        bool: True if valid IANA timezone
    """
    if not tz_string:
        return False
    return tz_string in pytz.all_timezones_set


def normalize_currency(code) -> Optional[str]:
    """Upper-cased supported currency code, or None."""
    if not isinstance(code, str):
        return None
    code = code.strip().upper()
    return code if code in SUPPORTED_CURRENCIES else None


def _currency_for_timezone(timezone: Optional[str]) -> Optional[str]:
    if not is_valid_timezone(timezone):
        return None
    return normalize_currency(TIMEZONE_CURRENCY_MAP.get(timezone))


def _currency_for_language(language: Optional[str]) -> Optional[str]:
    if not language:
        return None
    parts = language.replace('_', '-').split('-')
    if len(parts) < 2:
        return None
    region = parts[1].upper()
    return normalize_currency(LOCALE_CURRENCY_MAP.get(region))


def _detect(timezone, languages):
    currency = _currency_for_timezone(timezone)
    if currency:
        return currency

    for language in languages or ():
        currency = _currency_for_language(language)
        if currency:
            return currency

    return None


def detect_currency(timezone: Optional[str] = None, languages: Optional[Iterable[str]] = None) -> str:
    """
    Detect the preferred currency of a client.

    Priority order:
    1. Timezone (IANA name reported by the browser)
    2. Region subtag of each language tag, in preference order
    3. Default fallback (CAD)

    Args:
        timezone: IANA timezone string (e.g., 'Europe/Paris')
        languages: Language tags (e.g., ['fr-CA', 'en'])

    Returns:
        str: Supported ISO 4217 currency code
    """
    return _detect(timezone, languages) or DEFAULT_CURRENCY


def was_auto_detected(timezone: Optional[str] = None, languages: Optional[Iterable[str]] = None) -> bool:
    """True when detect_currency found a mapping rather than falling back."""
    return _detect(timezone, languages) is not None
