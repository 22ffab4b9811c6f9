"""
Module for formatting currency, date and size values using Babel.

"""
import datetime
import logging
from typing import List, Optional, Union

from babel import Locale, UnknownLocaleError, numbers, dates
from dateutil import parser as date_parser

DEFAULT_LOCALE: str = 'en_US'
DEFAULT_CURRENCY: str = 'USD'

#: Currencies offered by the expense form.
CURRENCIES: List[str] = ['USD', 'EUR', 'GBP', 'JPY', 'CAD', 'AUD', 'INR']

CURRENCY_MAP: dict[str, str] = {
    'US': 'USD',
    'GB': 'GBP',
    'DE': 'EUR',
    'FR': 'EUR',
    'IT': 'EUR',
    'ES': 'EUR',
    'NL': 'EUR',
    'JP': 'JPY',
    'CA': 'CAD',
    'AU': 'AUD',
    'IN': 'INR',
}

LOCALE_MAP: List[str] = [
    'en_US',
    'en_GB',
    'en_AU',
    'en_CA',
    'en_IN',
    'de_DE',
    'es_ES',
    'fr_FR',
    'it_IT',
    'nl_NL',
    'ja_JP',
]

DATE_FORMAT: str = 'MMM dd, yyyy'
DATETIME_FORMAT: str = 'MMM dd, yyyy HH:mm'
MONTH_FORMAT: str = 'MMM yyyy'


def _locale(locale: Optional[str]) -> Locale:
    try:
        return Locale.parse(locale or DEFAULT_LOCALE)
    except (ValueError, TypeError, UnknownLocaleError):
        logging.warning(f'Unknown locale "{locale}", using {DEFAULT_LOCALE}.')
        return Locale.parse(DEFAULT_LOCALE)


def get_currency_from_locale(locale: str) -> str:
    """
    Retrieve the default currency code based on the locale's territory.

    Args:
        locale (str): Locale string, e.g. 'fr_FR'.

    Returns:
        str: Currency code such as 'EUR'. Defaults to 'USD' if the territory is unknown.
    """
    parts = locale.split('_')
    if len(parts) < 2:
        return DEFAULT_CURRENCY
    return CURRENCY_MAP.get(parts[1], DEFAULT_CURRENCY)


def format_currency_value(value: float, currency: Optional[str] = None, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format a number as a currency string.

    Args:
        value (float): The amount.
        currency (str): ISO 4217 code. Defaults to the currency of the locale's territory.
        locale (str): Locale string, e.g. 'en_US'.

    Returns:
        str: The formatted currency string, e.g. ``$1,234.50``.
    """
    currency = currency or get_currency_from_locale(locale)
    try:
        return numbers.format_currency(value, currency=currency, locale=_locale(locale))
    except (ValueError, TypeError) as ex:
        logging.debug(f'Error formatting currency: {ex}')
        return f'{currency} {value}'


def parse_date(value: Union[str, datetime.date, None]) -> Optional[datetime.date]:
    """Parse a ``YYYY-MM-DD`` string. Returns None when the value is not a valid date."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def format_date(value: Union[str, datetime.date, None], locale: str = DEFAULT_LOCALE) -> str:
    """Format an ISO date as ``MMM dd, yyyy``; unparsable values are returned as-is."""
    d = parse_date(value)
    if d is None:
        return '' if value is None else str(value)
    return dates.format_date(d, DATE_FORMAT, locale=_locale(locale))


def format_datetime(value: Union[str, datetime.datetime, None], locale: str = DEFAULT_LOCALE) -> str:
    """Format an ISO timestamp as ``MMM dd, yyyy HH:mm``; unparsable values are returned as-is."""
    if isinstance(value, datetime.datetime):
        dt = value
    else:
        try:
            dt = date_parser.isoparse(value)
        except (ValueError, TypeError, OverflowError):
            return '' if value is None else str(value)
    return dates.format_datetime(dt, DATETIME_FORMAT, locale=_locale(locale))


def format_month_label(month: str, locale: str = DEFAULT_LOCALE) -> str:
    """Format a ``YYYY-MM`` key as ``MMM yyyy``."""
    d = parse_date(f'{month}-01')
    if d is None:
        return month
    return dates.format_date(d, MONTH_FORMAT, locale=_locale(locale))


def format_percentage(value: float) -> str:
    return f'{value:.1f}%'


def format_file_size(size: int) -> str:
    """Format a byte count as ``B``, ``KB`` or ``MB``."""
    if size < 1024:
        return f'{size} B'
    if size < 1024 * 1024:
        return f'{size / 1024:.2f} KB'
    return f'{size / (1024 * 1024):.2f} MB'
