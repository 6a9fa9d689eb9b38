"""Global test configuration — runs before any test module imports."""
from __future__ import annotations

import os

# Must be set BEFORE any ragnok imports — slowapi reads this at init
os.environ["RATELIMIT_ENABLED"] = "False"

import pytest

from ragnok.verifiers.base import BaseVerifier, LookupStatus

# Well-known development key (Hardhat account #0) and its address
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_SIGNER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

# Hardhat account #1, used as the claimed wallet
WALLET = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
TWITTER = "@alice"
DISCORD = "alice#1234"


class FakeVerifier(BaseVerifier):
    """Verifier with a canned status that records every identity it is asked about."""

    def __init__(self, status: LookupStatus = LookupStatus.FOUND, *,
                 provider: str = "fake", timeout: float = 1.0, error: Exception | None = None):
        super().__init__(timeout=timeout)
        self.provider_name = provider
        self.status = status
        self.error = error
        self.calls: list[tuple[str, ...]] = []

    async def lookup(self, *identity: str) -> LookupStatus:
        self.calls.append(identity)
        if self.error is not None:
            raise self.error
        return self.status


@pytest.fixture
def signer():
    from ragnok.signer import AttestationSigner
    return AttestationSigner(TEST_PRIVATE_KEY)


@pytest.fixture
def claim():
    from ragnok.validation import VerificationClaim
    return VerificationClaim(WALLET, TWITTER, DISCORD)
