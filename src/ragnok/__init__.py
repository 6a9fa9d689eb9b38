"""ragnok — Social identity verification and wallet attestation signing."""

__version__ = "1.0.0"

from ragnok.errors import (
    RagnokError, ConfigurationError,
    ValidationError, InvalidAddress, InvalidSocialHandleFormat, InvalidChatHandleFormat,
    VerificationFailure, SigningFailure,
)
from ragnok.validation import VerificationClaim, validate_claim, is_valid_address
from ragnok.signer import (
    Attestation, AttestationSigner, message_hash, recover_signer, verify_attestation,
)
from ragnok.verifiers import (
    BaseVerifier, LookupResult, LookupStatus, TwitterVerifier, DiscordVerifier,
)
from ragnok.orchestrator import (
    VerificationOrchestrator, VerificationResult, Outcome, RequestState,
)
from ragnok.config import Settings, load_settings

__all__ = [
    "__version__",
    "RagnokError",
    "ConfigurationError",
    "ValidationError",
    "InvalidAddress",
    "InvalidSocialHandleFormat",
    "InvalidChatHandleFormat",
    "VerificationFailure",
    "SigningFailure",
    "VerificationClaim",
    "validate_claim",
    "is_valid_address",
    "Attestation",
    "AttestationSigner",
    "message_hash",
    "recover_signer",
    "verify_attestation",
    "BaseVerifier",
    "LookupResult",
    "LookupStatus",
    "TwitterVerifier",
    "DiscordVerifier",
    "VerificationOrchestrator",
    "VerificationResult",
    "Outcome",
    "RequestState",
    "Settings",
    "load_settings",
]
