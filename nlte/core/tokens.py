"""Helpers for normalizing token symbols and validating addresses and amounts."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import Dict, Optional

from .models import CeloToken

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

_TOKEN_ALIASES: Dict[str, CeloToken] = {
    "celo": CeloToken.CELO,
    "cel": CeloToken.CELO,
    "cusd": CeloToken.cUSD,
    "usd": CeloToken.cUSD,
    "usdc": CeloToken.cUSD,
    "ceur": CeloToken.cEUR,
    "eur": CeloToken.cEUR,
    "creal": CeloToken.cREAL,
    "real": CeloToken.cREAL,
}

# All four Celo tokens use 18 decimals.
TOKEN_DECIMALS: Dict[CeloToken, int] = {token: 18 for token in CeloToken}

NATIVE_TOKEN = CeloToken.CELO
MAX_AMOUNT_DECIMALS = 18


def default_token() -> CeloToken:
    """Token used when a command names none or names one we don't know.

    Kept as the single switch point for the fallback.
    """

    return CeloToken.cUSD


def normalize_token(symbol: Optional[str]) -> CeloToken:
    """Collapse a user-typed token alias into a canonical token."""

    if not symbol:
        return default_token()
    return _TOKEN_ALIASES.get(symbol.lower().strip(), default_token())


def normalize_token_type(token: str) -> CeloToken:
    return normalize_token(token.upper().strip() if token else token)


def is_supported_token(symbol: Optional[str]) -> bool:
    return symbol in {token.value for token in CeloToken}


def is_valid_address(address: Optional[str]) -> bool:
    if not address:
        return False
    return bool(_ADDRESS_RE.fullmatch(address))


def to_decimal(amount: Optional[str]) -> Optional[Decimal]:
    """Parse an amount string; ``None`` for anything that is not a finite number."""

    if amount is None:
        return None
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def is_valid_amount(amount: Optional[str]) -> bool:
    value = to_decimal(amount)
    return value is not None and value > 0


def has_valid_precision(amount: str, max_decimals: int = MAX_AMOUNT_DECIMALS) -> bool:
    parts = amount.split(".")
    if len(parts) == 1:
        return True
    return len(parts[1]) <= max_decimals


def parse_token_amount(amount: str, decimals: int = 18) -> int:
    """Human-readable amount -> smallest unit."""

    value = to_decimal(amount)
    if value is None:
        raise ValueError(f"Invalid amount: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 80
        return int((value * (Decimal(10) ** decimals)).to_integral_value())


def format_token_amount(amount: int, decimals: int = 18) -> str:
    """Smallest unit -> human-readable amount, without trailing zeros."""

    with localcontext() as ctx:
        ctx.prec = 80
        value = Decimal(amount) / (Decimal(10) ** decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def shorten_address(address: str, chars: int = 4) -> str:
    if not is_valid_address(address):
        return address
    return f"{address[:chars + 2]}...{address[42 - chars:]}"


__all__ = [
    "TOKEN_DECIMALS",
    "NATIVE_TOKEN",
    "MAX_AMOUNT_DECIMALS",
    "default_token",
    "normalize_token",
    "normalize_token_type",
    "is_supported_token",
    "is_valid_address",
    "to_decimal",
    "is_valid_amount",
    "has_valid_precision",
    "parse_token_amount",
    "format_token_amount",
    "shorten_address",
]
