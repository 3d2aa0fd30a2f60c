import re
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional
from routefinder.models import ParseResult, RouteParams

ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")
AMOUNT_RE = re.compile(r"\s*[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?\s*", re.ASCII)

DEFAULT_AMOUNT = "1"


def is_valid_address(value: Optional[str]) -> bool:
    """0x followed by exactly 40 hex digits, any case. No checksum check."""
    if not isinstance(value, str):
        return False
    return ADDRESS_RE.fullmatch(value) is not None


def _is_positive_amount(amount: str) -> bool:
    # Decimal alone would also take "1_000", "NaN" and non-ASCII digits
    if AMOUNT_RE.fullmatch(amount) is None:
        return False
    try:
        value = Decimal(amount)
    except (InvalidOperation, ValueError):
        return False
    return value.is_finite() and value > 0


def parse_route_params(query: Mapping[str, str]) -> ParseResult:
    """
    Validate a /route query. The first failing check wins and the result
    is always returned, never raised.
    """
    from_address = query.get("from")
    to_address = query.get("to")
    amount = query.get("amount")
    if amount is None:
        amount = DEFAULT_AMOUNT

    if not from_address or not to_address:
        return ParseResult.fail("Missing required params: from, to (token addresses)")

    if not is_valid_address(from_address):
        return ParseResult.fail(f"Invalid 'from' address: {from_address}")

    if not is_valid_address(to_address):
        return ParseResult.fail(f"Invalid 'to' address: {to_address}")

    if not _is_positive_amount(amount):
        return ParseResult.fail(f"Invalid amount: {amount}")

    return ParseResult.ok(RouteParams(from_=from_address, to=to_address, amount=amount))
