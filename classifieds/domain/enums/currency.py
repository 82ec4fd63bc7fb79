from enum import Enum


class Currency(str, Enum):
    """ISO 4217 codes accepted for listing prices."""

    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    UAH = "UAH"
