"""Country -> default timezone and currency for new student profiles."""

from typing import NamedTuple


class Country(NamedTuple):
    code: str
    name: str
    timezone: str
    currency: str


DEFAULT_TIMEZONE = "UTC"
DEFAULT_CURRENCY = "USD"

COUNTRIES: tuple[Country, ...] = (
    Country("SA", "Saudi Arabia", "Asia/Riyadh", "SAR"),
    Country("AE", "United Arab Emirates", "Asia/Dubai", "AED"),
    Country("KW", "Kuwait", "Asia/Kuwait", "KWD"),
    Country("QA", "Qatar", "Asia/Qatar", "QAR"),
    Country("BH", "Bahrain", "Asia/Bahrain", "BHD"),
    Country("OM", "Oman", "Asia/Muscat", "OMR"),
    Country("JO", "Jordan", "Asia/Amman", "JOD"),
    Country("LB", "Lebanon", "Asia/Beirut", "LBP"),
    Country("EG", "Egypt", "Africa/Cairo", "EGP"),
    Country("IQ", "Iraq", "Asia/Baghdad", "IQD"),
    Country("YE", "Yemen", "Asia/Aden", "YER"),
    Country("SY", "Syria", "Asia/Damascus", "SYP"),
    Country("PS", "Palestine", "Asia/Gaza", "ILS"),
    Country("US", "United States", "America/New_York", "USD"),
    Country("GB", "United Kingdom", "Europe/London", "GBP"),
    Country("CA", "Canada", "America/Toronto", "CAD"),
    Country("AU", "Australia", "Australia/Sydney", "AUD"),
    Country("FR", "France", "Europe/Paris", "EUR"),
    Country("DE", "Germany", "Europe/Berlin", "EUR"),
    Country("IT", "Italy", "Europe/Rome", "EUR"),
    Country("ES", "Spain", "Europe/Madrid", "EUR"),
    Country("NL", "Netherlands", "Europe/Amsterdam", "EUR"),
    Country("BE", "Belgium", "Europe/Brussels", "EUR"),
    Country("CH", "Switzerland", "Europe/Zurich", "CHF"),
    Country("AT", "Austria", "Europe/Vienna", "EUR"),
    Country("SE", "Sweden", "Europe/Stockholm", "SEK"),
    Country("NO", "Norway", "Europe/Oslo", "NOK"),
    Country("DK", "Denmark", "Europe/Copenhagen", "DKK"),
    Country("FI", "Finland", "Europe/Helsinki", "EUR"),
    Country("PL", "Poland", "Europe/Warsaw", "PLN"),
    Country("GR", "Greece", "Europe/Athens", "EUR"),
    Country("PT", "Portugal", "Europe/Lisbon", "EUR"),
    Country("IE", "Ireland", "Europe/Dublin", "EUR"),
    Country("TR", "Turkey", "Europe/Istanbul", "TRY"),
    Country("IN", "India", "Asia/Kolkata", "INR"),
    Country("PK", "Pakistan", "Asia/Karachi", "PKR"),
    Country("MY", "Malaysia", "Asia/Kuala_Lumpur", "MYR"),
    Country("SG", "Singapore", "Asia/Singapore", "SGD"),
    Country("ZA", "South Africa", "Africa/Johannesburg", "ZAR"),
    Country("NG", "Nigeria", "Africa/Lagos", "NGN"),
    Country("BR", "Brazil", "America/Sao_Paulo", "BRL"),
    Country("MX", "Mexico", "America/Mexico_City", "MXN"),
)


def find_country(name_or_code: str) -> Country | None:
    """Look up a country by ISO code or full name, case-insensitively."""
    needle = name_or_code.strip().lower()
    for country in COUNTRIES:
        if country.code.lower() == needle or country.name.lower() == needle:
            return country
    return None


def timezone_for(name_or_code: str) -> str:
    country = find_country(name_or_code)
    return country.timezone if country else DEFAULT_TIMEZONE


def currency_for(name_or_code: str) -> str:
    country = find_country(name_or_code)
    return country.currency if country else DEFAULT_CURRENCY
