"""Error taxonomy for the verification pipeline."""

from __future__ import annotations


class RagnokError(Exception):
    """Base class for all service errors."""

    status_code: int = 500


class ConfigurationError(RagnokError):
    """Settings are missing or malformed. Fatal at startup."""


# ─── Validation (400) ──────────────────────────────────────────────

class ValidationError(RagnokError):
    """A claim field is structurally malformed."""

    status_code = 400
    field: str = ""
    default_message: str = "Invalid request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidAddress(ValidationError):
    field = "walletAddress"
    default_message = "Invalid wallet address"


class InvalidSocialHandleFormat(ValidationError):
    field = "twitterHandle"
    default_message = "Twitter handle must start with @"


class InvalidChatHandleFormat(ValidationError):
    field = "discordHandle"
    default_message = "Discord handle must contain #"


# ─── Verification (403) ────────────────────────────────────────────

class VerificationFailure(RagnokError):
    """One or both identity checks failed."""

    status_code = 403

    def __init__(self, result):
        self.result = result
        super().__init__(
            f"Social verification failed (twitter={result.social_verified}, "
            f"discord={result.chat_verified})"
        )


# ─── Signing (fatal / 500) ─────────────────────────────────────────

class SigningFailure(RagnokError):
    """Signer is misconfigured or the signing operation failed."""
