"""
Account identities for the LFW staking pool.

Callers are identified by EVM-style addresses.  A ``0x``-prefixed 40-hex
address is normalised to its EIP-55 mixed-case checksum form so that
``0xabc…`` and ``0xABC…`` map to the same stake record.  Any other
non-empty string (test labels, contract names) is used verbatim.
"""

from __future__ import annotations

import re

from Crypto.Hash import keccak

_HEX_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (the pre-standard SHA-3 used by the EVM)."""
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


def is_hex_address(value: str) -> bool:
    return bool(_HEX_ADDRESS_RE.match(value))


def to_checksum_address(address: str) -> str:
    """
    Return the EIP-55 checksum encoding of a hex address.

    Each hex letter is upper-cased when the matching nibble of
    keccak256(lowercase hex) is >= 8.
    """
    if not is_hex_address(address):
        raise ValueError(f"Not a 20-byte hex address: {address!r}")
    lower = address[2:].lower()
    digest = keccak256(lower.encode("ascii")).hex()
    out = []
    for ch, nibble in zip(lower, digest):
        if ch.isalpha() and int(nibble, 16) >= 8:
            out.append(ch.upper())
        else:
            out.append(ch)
    return "0x" + "".join(out)


def is_checksum_address(address: str) -> bool:
    return is_hex_address(address) and to_checksum_address(address) == address


def normalize_account(account: str) -> str:
    """Canonical form of a caller identity."""
    if not isinstance(account, str):
        raise TypeError(f"Account must be a str, got {type(account).__name__}")
    account = account.strip()
    if not account:
        raise ValueError("Account identity cannot be empty")
    if is_hex_address(account):
        return to_checksum_address(account)
    return account
