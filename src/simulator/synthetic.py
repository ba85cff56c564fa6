"""Synthetic token identities and transaction hashes for simulated trades."""

from __future__ import annotations

import random

from uuid_extensions import uuid7

from src.core.constants import (
    CONTRACT_ADDRESS_HEX_DIGITS,
    TOKEN_PREFIXES,
    TOKEN_SUFFIXES,
    TX_HASH_HEX_DIGITS,
)
from src.core.types import TokenIdentity


def random_hex(rng: random.Random, digits: int) -> str:
    """Lower-case hex string of exactly *digits* characters."""
    return f"{rng.getrandbits(digits * 4):0{digits}x}"


def generate_token(rng: random.Random) -> TokenIdentity:
    """Random prefix/suffix token with a ``0x``-prefixed 40-hex contract address."""
    prefix = rng.choice(TOKEN_PREFIXES)
    suffix = rng.choice(TOKEN_SUFFIXES)
    return TokenIdentity(
        token_symbol=f"{prefix}{suffix}",
        token_name=f"{prefix.title()} {suffix.title()}",
        contract_address="0x" + random_hex(rng, CONTRACT_ADDRESS_HEX_DIGITS),
    )


def generate_tx_hash(rng: random.Random) -> str:
    return "0x" + random_hex(rng, TX_HASH_HEX_DIGITS)


def new_id() -> str:
    return str(uuid7())
