from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from classifieds.domain.enums.currency import Currency
from classifieds.domain.exceptions import InvalidArgumentError

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Non-negative amount with exactly two decimal places, in a given currency."""

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise InvalidArgumentError("Amount must be a Decimal.")
        if not self.amount.is_finite():
            raise InvalidArgumentError("Amount must be a finite number.")
        if self.amount < 0:
            raise InvalidArgumentError("Amount cannot be negative.")
        if not isinstance(self.currency, Currency):
            raise InvalidArgumentError("Currency is required.")
        object.__setattr__(self, "amount", self.amount.quantize(_CENTS, rounding=ROUND_HALF_UP))

    @classmethod
    def of(cls, amount: Decimal | int | float | str, currency: Currency | str) -> "Money":
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except InvalidOperation:
            raise InvalidArgumentError(f"Invalid amount: {amount!r}.") from None
        try:
            code = currency if isinstance(currency, Currency) else Currency(currency)
        except ValueError:
            raise InvalidArgumentError(f"Unsupported currency: {currency!r}.") from None
        return cls(amount=value, currency=code)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.value}"
