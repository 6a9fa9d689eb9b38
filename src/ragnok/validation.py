"""
ragnok.validation — Structural checks on the claim tuple.

Pure and synchronous: nothing here talks to the network.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from eth_utils import is_checksum_address

from ragnok.errors import (
    InvalidAddress,
    InvalidChatHandleFormat,
    InvalidSocialHandleFormat,
)

SOCIAL_SIGIL = "@"
CHAT_DELIMITER = "#"
ADDRESS_RE = re.compile(r"(0x)?[0-9a-fA-F]{40}")


@dataclass(frozen=True)
class VerificationClaim:
    """Wallet address plus the Twitter and Discord handles claimed for it."""
    wallet_address: str
    social_handle: str
    chat_handle: str

    @property
    def social_username(self) -> str:
        """Twitter username without the leading sigil."""
        if self.social_handle.startswith(SOCIAL_SIGIL):
            return self.social_handle[len(SOCIAL_SIGIL):]
        return self.social_handle

    def split_chat_handle(self) -> tuple[str, str]:
        """Return ``(username, discriminator)``, split on the first ``#``."""
        username, _, discriminator = self.chat_handle.partition(CHAT_DELIMITER)
        return username, discriminator


def is_valid_address(value) -> bool:
    """True for a 20-byte hex address, with or without ``0x``.

    All-lowercase and all-uppercase hex are accepted as-is; mixed case must
    carry a valid EIP-55 checksum.
    """
    if not isinstance(value, str) or not ADDRESS_RE.fullmatch(value):
        return False
    hex_part = value[2:] if value.startswith("0x") else value
    if hex_part == hex_part.lower() or hex_part == hex_part.upper():
        return True
    return is_checksum_address("0x" + hex_part)


def validate_claim(claim: VerificationClaim) -> VerificationClaim:
    """Check the claim fields in order and raise on the first malformed one."""
    if not is_valid_address(claim.wallet_address):
        raise InvalidAddress()

    if not isinstance(claim.social_handle, str) or not claim.social_handle.startswith(SOCIAL_SIGIL):
        raise InvalidSocialHandleFormat()

    if not isinstance(claim.chat_handle, str) or CHAT_DELIMITER not in claim.chat_handle:
        raise InvalidChatHandleFormat()

    return claim
