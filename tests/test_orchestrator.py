"""Tests for the request pipeline: validate, verify concurrently, sign or reject."""

import asyncio
from unittest.mock import MagicMock

import pytest

from ragnok.errors import SigningFailure, VerificationFailure
from ragnok.orchestrator import RequestState, VerificationOrchestrator
from ragnok.signer import recover_signer
from ragnok.verifiers.base import BaseVerifier, LookupStatus

from conftest import FakeVerifier, TEST_SIGNER_ADDRESS, WALLET, TWITTER, DISCORD

FULL_PATH = [
    RequestState.RECEIVED, RequestState.VALIDATED, RequestState.VERIFYING,
    RequestState.DECIDED, RequestState.RESPONDED,
]


def _orchestrator(signer, social=LookupStatus.FOUND, chat=LookupStatus.FOUND, debug=False):
    s = FakeVerifier(social, provider="twitter")
    c = FakeVerifier(chat, provider="discord")
    return VerificationOrchestrator(signer, s, c, debug=debug), s, c


@pytest.mark.asyncio
async def test_success_returns_signature(signer):
    orch, social, chat = _orchestrator(signer)
    outcome = await orch.handle(WALLET, TWITTER, DISCORD)

    assert outcome.status_code == 200
    assert outcome.body["success"] is True
    assert outcome.body["socials"] == {"twitter": TWITTER, "discord": DISCORD}
    assert outcome.body["signature"] == outcome.attestation.signature_hex
    assert recover_signer(outcome.attestation.claim, outcome.body["signature"]) == TEST_SIGNER_ADDRESS
    assert outcome.states == FULL_PATH
    assert social.calls == [("alice",)]
    assert chat.calls == [("alice", "1234")]


@pytest.mark.asyncio
async def test_invalid_address_makes_no_provider_calls(signer):
    orch, social, chat = _orchestrator(signer)
    outcome = await orch.handle("not-an-address", TWITTER, DISCORD)

    assert outcome.status_code == 400
    assert outcome.body == {"error": "Invalid wallet address"}
    assert outcome.states == [RequestState.RECEIVED, RequestState.RESPONDED]
    assert social.calls == []
    assert chat.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("twitter, discord, message", [
    ("alice", DISCORD, "Twitter handle must start with @"),
    (None, DISCORD, "Twitter handle must start with @"),
    (TWITTER, "alice1234", "Discord handle must contain #"),
    (TWITTER, None, "Discord handle must contain #"),
])
async def test_handle_format_errors_make_no_provider_calls(signer, twitter, discord, message):
    orch, social, chat = _orchestrator(signer)
    outcome = await orch.handle(WALLET, twitter, discord)
    assert outcome.status_code == 400
    assert outcome.body == {"error": message}
    assert social.calls == [] and chat.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("social_status, chat_status", [
    (LookupStatus.FOUND, LookupStatus.NOT_FOUND),
    (LookupStatus.NOT_FOUND, LookupStatus.FOUND),
    (LookupStatus.NOT_FOUND, LookupStatus.NOT_FOUND),
    (LookupStatus.PROVIDER_ERROR, LookupStatus.FOUND),
    (LookupStatus.FOUND, LookupStatus.TIMEOUT),
])
async def test_failed_check_is_403_without_signing(signer, social_status, chat_status):
    spy = MagicMock(wraps=signer)
    orch, social, chat = _orchestrator(spy, social_status, chat_status)
    outcome = await orch.handle(WALLET, TWITTER, DISCORD)

    assert outcome.status_code == 403
    assert outcome.body == {
        "error": "Social verification failed",
        "details": {
            "twitter": social_status is LookupStatus.FOUND,
            "discord": chat_status is LookupStatus.FOUND,
        },
    }
    assert outcome.states == FULL_PATH
    assert outcome.attestation is None
    spy.sign.assert_not_called()
    # both checks always run
    assert len(social.calls) == 1 and len(chat.calls) == 1


@pytest.mark.asyncio
async def test_provider_exception_becomes_false(signer):
    social = FakeVerifier(provider="twitter", error=RuntimeError("provider down"))
    chat = FakeVerifier(provider="discord")
    orch = VerificationOrchestrator(signer, social, chat)
    outcome = await orch.handle(WALLET, TWITTER, DISCORD)
    assert outcome.status_code == 403
    assert outcome.body["details"] == {"twitter": False, "discord": True}
    assert outcome.result.social.status is LookupStatus.PROVIDER_ERROR


class RendezvousVerifier(BaseVerifier):
    """Completes only if its partner is running at the same time."""

    def __init__(self, mine: asyncio.Event, theirs: asyncio.Event):
        super().__init__(timeout=1.0)
        self.mine = mine
        self.theirs = theirs

    async def lookup(self, *identity):
        self.mine.set()
        await self.theirs.wait()
        return LookupStatus.FOUND


@pytest.mark.asyncio
async def test_verifiers_run_concurrently(signer):
    a, b = asyncio.Event(), asyncio.Event()
    orch = VerificationOrchestrator(signer, RendezvousVerifier(a, b), RendezvousVerifier(b, a))
    outcome = await orch.handle(WALLET, TWITTER, DISCORD)
    assert outcome.status_code == 200


@pytest.mark.asyncio
async def test_verify_claim_raises_with_per_check_detail(signer, claim):
    orch, _, _ = _orchestrator(signer, chat=LookupStatus.NOT_FOUND)
    with pytest.raises(VerificationFailure) as exc:
        await orch.verify_claim(claim)
    assert exc.value.result.social_verified is True
    assert exc.value.result.chat_verified is False
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_signing_failure_is_500(signer):
    broken = MagicMock()
    broken.sign.side_effect = SigningFailure("Signing operation failed")
    orch, _, _ = _orchestrator(broken)
    outcome = await orch.handle(WALLET, TWITTER, DISCORD)
    assert outcome.status_code == 500
    assert outcome.body == {"error": "Internal server error"}
    assert outcome.states[-1] is RequestState.RESPONDED


@pytest.mark.asyncio
async def test_debug_mode_includes_stack(signer):
    broken = MagicMock()
    broken.sign.side_effect = RuntimeError("kaboom")
    orch, _, _ = _orchestrator(broken, debug=True)
    outcome = await orch.handle(WALLET, TWITTER, DISCORD)
    assert outcome.status_code == 500
    assert "kaboom" in outcome.body["stack"]
    assert "Traceback" in outcome.body["stack"]


@pytest.mark.asyncio
async def test_same_claim_same_signature(signer):
    orch, _, _ = _orchestrator(signer)
    first = await orch.handle(WALLET, TWITTER, DISCORD)
    second = await orch.handle(WALLET, TWITTER, DISCORD)
    assert first.body["signature"] == second.body["signature"]
