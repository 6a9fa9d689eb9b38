"""
ragnok.orchestrator — Request pipeline: validate, verify, sign or reject.

States:
    RECEIVED  — claim tuple accepted from the caller
    VALIDATED — structural checks passed
    VERIFYING — both provider checks in flight
    DECIDED   — both checks joined, overall outcome known
    RESPONDED — response body built (terminal)

Validation failures, verification failures and unexpected errors all jump
straight to RESPONDED with a 400, 403 or 500 outcome respectively.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ragnok.errors import ValidationError, VerificationFailure
from ragnok.signer import Attestation, AttestationSigner
from ragnok.validation import VerificationClaim, validate_claim
from ragnok.verifiers.base import BaseVerifier, LookupResult

logger = logging.getLogger(__name__)


class RequestState(Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    VERIFYING = "verifying"
    DECIDED = "decided"
    RESPONDED = "responded"


@dataclass(frozen=True)
class VerificationResult:
    """Per-check outcomes for one claim."""
    social: LookupResult
    chat: LookupResult

    @property
    def social_verified(self) -> bool:
        return self.social.verified

    @property
    def chat_verified(self) -> bool:
        return self.chat.verified

    @property
    def verified(self) -> bool:
        return self.social_verified and self.chat_verified


@dataclass
class Outcome:
    status_code: int
    body: dict
    states: list[RequestState] = field(default_factory=list)
    result: Optional[VerificationResult] = None
    attestation: Optional[Attestation] = None


class VerificationOrchestrator:
    """Runs one claim through the pipeline and maps the result to a response."""

    def __init__(self, signer: AttestationSigner, social_verifier: BaseVerifier,
                 chat_verifier: BaseVerifier, *, debug: bool = False):
        self.signer = signer
        self.social_verifier = social_verifier
        self.chat_verifier = chat_verifier
        self.debug = debug

    async def verify_claim(self, claim: VerificationClaim) -> VerificationResult:
        """Run both provider checks concurrently; raise VerificationFailure unless both pass."""
        social, chat = await asyncio.gather(
            self.social_verifier.check(claim.social_username),
            self.chat_verifier.check(*claim.split_chat_handle()),
        )
        result = VerificationResult(social=social, chat=chat)
        if not result.verified:
            raise VerificationFailure(result)
        return result

    async def handle(self, wallet_address, social_handle, chat_handle) -> Outcome:
        states = [RequestState.RECEIVED]
        outcome = await self._run(
            VerificationClaim(wallet_address, social_handle, chat_handle), states)
        states.append(RequestState.RESPONDED)
        outcome.states = states
        return outcome

    async def _run(self, claim: VerificationClaim, states: list) -> Outcome:
        try:
            validate_claim(claim)
            states.append(RequestState.VALIDATED)

            states.append(RequestState.VERIFYING)
            try:
                result = await self.verify_claim(claim)
            except VerificationFailure:
                states.append(RequestState.DECIDED)
                raise
            states.append(RequestState.DECIDED)

            attestation = self.signer.sign(claim)
        except ValidationError as e:
            logger.info("Claim rejected: %s", e.message, extra={"field": e.field})
            return Outcome(400, {"error": e.message})
        except VerificationFailure as e:
            logger.info(
                "Social verification failed",
                extra={"twitter": e.result.social.status.value,
                       "discord": e.result.chat.status.value},
            )
            return Outcome(403, {
                "error": "Social verification failed",
                "details": {
                    "twitter": e.result.social_verified,
                    "discord": e.result.chat_verified,
                },
            }, result=e.result)
        except Exception as e:
            logger.exception("Verification error")
            body = {"error": "Internal server error"}
            if self.debug:
                body["stack"] = "".join(traceback.format_exception(type(e), e, e.__traceback__))
            return Outcome(500, body)

        logger.info("Attestation issued", extra={"wallet": claim.wallet_address})
        return Outcome(200, {
            "success": True,
            "signature": attestation.signature_hex,
            "socials": {
                "twitter": claim.social_handle,
                "discord": claim.chat_handle,
            },
        }, result=result, attestation=attestation)
