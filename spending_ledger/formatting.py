"""Money and timestamp helpers shared by models and exporters."""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN

from spending_ledger.config import get_settings
from spending_ledger.exceptions import InvalidAmount

CENTS = Decimal("0.01")

# Smallest unit a Numeric(19, 4) amount column can hold
AMOUNT_QUANTUM = Decimal("0.0001")


def format_money(amount: Decimal, symbol: str | None = None) -> str:
    """
    Format an amount for display, e.g. $1,234.56 or -$5.00.

    Rounds to cents with banker's rounding. The sign goes in
    front of the currency symbol.
    """
    if symbol is None:
        symbol = get_settings().CURRENCY_SYMBOL
    value = Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_EVEN)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def fits_amount_column(value: Decimal) -> bool:
    """True when value is stored without rounding (at most 4 places)."""
    try:
        return value == value.quantize(AMOUNT_QUANTUM)
    except InvalidOperation:
        return False


def parse_amount(amount) -> Decimal:
    """
    Coerce a posting amount to Decimal.

    The amount must be finite, strictly positive and need no
    more than four decimal places, otherwise InvalidAmount.
    """
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(amount)
    if not value.is_finite() or value <= 0 or not fits_amount_column(value):
        raise InvalidAmount(amount)
    return value


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC and stored without tzinfo."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_epoch_seconds(value: datetime) -> float:
    """Seconds since the Unix epoch. Naive datetimes are treated as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def to_float(amount: Decimal) -> float:
    """Decimal to float for snapshot columns (documented lossy step)."""
    return float(amount)
