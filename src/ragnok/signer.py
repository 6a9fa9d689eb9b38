"""
ragnok.signer — Attestation signing for on-chain verification.

The message hash is ``keccak256(abi.encodePacked(address, string, string))``
over ``(wallet, twitter, discord)``. It is signed as an EIP-191 personal message
(``"\\x19Ethereum Signed Message:\\n32" + hash``), so a contract can check it with
``ECDSA.recover(toEthSignedMessageHash(hash), signature)`` against the signer
address.

Signing uses RFC 6979 deterministic nonces: the same claim and key always
produce the same signature bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from ragnok.errors import SigningFailure
from ragnok.validation import VerificationClaim

logger = logging.getLogger(__name__)

MESSAGE_TYPES = ["address", "string", "string"]


@dataclass(frozen=True)
class Attestation:
    """A signature over a verified claim."""
    claim: VerificationClaim
    message_hash: bytes
    signature: bytes
    signer_address: str

    @property
    def signature_hex(self) -> str:
        return "0x" + self.signature.hex()


def message_hash(claim: VerificationClaim) -> bytes:
    """Packed keccak256 of the claim tuple, as Solidity computes it."""
    return bytes(Web3.solidity_keccak(
        MESSAGE_TYPES,
        [Web3.to_checksum_address(claim.wallet_address), claim.social_handle, claim.chat_handle],
    ))


def _signature_bytes(signature) -> bytes:
    if isinstance(signature, str):
        sig = signature[2:] if signature.startswith(("0x", "0X")) else signature
        return bytes.fromhex(sig)
    return bytes(signature)


def recover_signer(claim: VerificationClaim, signature) -> str:
    """Recover the checksummed address that produced ``signature`` for ``claim``."""
    message = encode_defunct(primitive=message_hash(claim))
    return Account.recover_message(message, signature=_signature_bytes(signature))


def verify_attestation(claim: VerificationClaim, signature, expected_signer: str) -> bool:
    """True if ``signature`` over ``claim`` recovers to ``expected_signer``."""
    try:
        recovered = recover_signer(claim, signature)
    except Exception:
        return False
    return recovered.lower() == expected_signer.lower()


class AttestationSigner:
    """Holds the service signing key for the life of the process.

    The private key is only used inside this object; callers get the public
    ``address`` and signatures.
    """

    def __init__(self, private_key: str):
        if not private_key:
            raise SigningFailure("Signing key is not configured (OWNER_PRIVATE_KEY)")
        try:
            self._account = Account.from_key(private_key)
        except Exception as e:
            raise SigningFailure(f"Signing key is invalid: {type(e).__name__}") from None

    def __repr__(self) -> str:
        return f"AttestationSigner(address={self.address!r})"

    @property
    def address(self) -> str:
        return self._account.address

    def sign(self, claim: VerificationClaim) -> Attestation:
        """Sign the message hash of a verified claim."""
        digest = message_hash(claim)
        try:
            signed = self._account.sign_message(encode_defunct(primitive=digest))
        except Exception as e:
            logger.error("Signing failed: %s", type(e).__name__)
            raise SigningFailure("Signing operation failed") from e
        return Attestation(
            claim=claim,
            message_hash=digest,
            signature=bytes(signed.signature),
            signer_address=self.address,
        )
