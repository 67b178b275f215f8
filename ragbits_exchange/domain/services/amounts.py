"""Conversions between wei (ledger integers) and ether strings (API edge)."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

from ragbits_exchange.domain.errors import ValidationError

WEI_PER_ETHER = 10**18
ETHER_DECIMALS = 18


def format_ether(wei: int) -> str:
    """Render wei as an ether decimal string, e.g. ``1500000000000000000 -> "1.5"``.

    Always keeps at least one fractional digit (``0 -> "0.0"``).
    """
    sign = "-" if wei < 0 else ""
    whole, frac = divmod(abs(wei), WEI_PER_ETHER)
    frac_digits = f"{frac:0{ETHER_DECIMALS}d}".rstrip("0") or "0"
    return f"{sign}{whole}.{frac_digits}"


def parse_ether(value: str | int | float) -> int:
    """Parse an ether amount into wei; rejects negatives and sub-wei precision."""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as ex:
        raise ValidationError(f"invalid ether amount: {value!r}") from ex
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"invalid ether amount: {value!r}")
    with localcontext() as ctx:
        # Keep every significant digit; the default context rounds at 28.
        ctx.prec = max(ctx.prec, len(amount.as_tuple().digits))
        wei = amount.scaleb(ETHER_DECIMALS)
    if wei != wei.to_integral_value():
        raise ValidationError(f"more than {ETHER_DECIMALS} decimal places: {value!r}")
    return int(wei)
