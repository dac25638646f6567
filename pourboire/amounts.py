from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pourboire.errors import InvalidAmountError

#: Minor units (1 € = 100 centimes)
MIN_AMOUNT_CENTS = 50
MAX_AMOUNT_CENTS = 100_000
PRESET_AMOUNTS_CENTS = (100, 200, 500, 1000)

CENT = Decimal("0.01")


def format_major(amount_cents: int) -> str:
    """Render minor units as a two-decimal major amount, e.g. 500 -> "5.00"."""
    return str((Decimal(amount_cents) / 100).quantize(CENT))


def validate_amount(value, minimum: int = MIN_AMOUNT_CENTS, maximum: int = MAX_AMOUNT_CENTS) -> int:
    """
    Check an amount expressed in minor units against the accepted bounds.

    Returns the amount as an ``int``; raises ``InvalidAmountError`` when it is
    missing, not an integer, or outside ``[minimum, maximum]``.
    """
    # bool is an int subclass but never an amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(
            f"Montant invalide. Le montant doit être un nombre entier de centimes "
            f"entre {minimum} et {maximum}."
        )
    if value < minimum or value > maximum:
        raise InvalidAmountError(
            f"Montant invalide. Entre {format_major(minimum)} et {format_major(maximum)} €."
        )
    return value


def parse_major_amount(value) -> Decimal:
    """Strictly positive number in major units, rounded to two decimals."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAmountError()
    try:
        amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError()
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError()
    return amount


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value(rounding=ROUND_HALF_UP))
