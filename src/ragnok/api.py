"""
ragnok API — Social verification and attestation signing.

Endpoints:
  GET  /health      — Liveness check
  POST /api/verify  — Verify wallet + Twitter + Discord claims, return a signature
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from pydantic import BaseModel
from starlette.responses import JSONResponse

from ragnok import __version__
from ragnok.config import Settings, load_settings
from ragnok.orchestrator import VerificationOrchestrator
from ragnok.security import apply_security
from ragnok.signer import AttestationSigner
from ragnok.verifiers import BaseVerifier, DiscordVerifier, TwitterVerifier

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class VerifyRequest(BaseModel):
    """Claim tuple as posted by the frontend. Field checks happen in the validator."""
    walletAddress: Any = None
    twitterHandle: Any = None
    discordHandle: Any = None


class HealthResponse(BaseModel):
    status: str = "healthy"


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def build_orchestrator(settings: Settings, *,
                       signer: Optional[AttestationSigner] = None,
                       social_verifier: Optional[BaseVerifier] = None,
                       chat_verifier: Optional[BaseVerifier] = None) -> VerificationOrchestrator:
    """Wire the pipeline. Raises SigningFailure if the key is unusable."""
    signer = signer or AttestationSigner(settings.owner_private_key)
    social_verifier = social_verifier or TwitterVerifier(
        settings.twitter_bearer_token, timeout=settings.verifier_timeout)
    chat_verifier = chat_verifier or DiscordVerifier(
        settings.discord_bot_token, settings.discord_guild_id,
        use_search=settings.discord_member_search,
        timeout=settings.verifier_timeout)
    return VerificationOrchestrator(signer, social_verifier, chat_verifier, debug=settings.debug)


def create_app(settings: Optional[Settings] = None, *,
               signer: Optional[AttestationSigner] = None,
               social_verifier: Optional[BaseVerifier] = None,
               chat_verifier: Optional[BaseVerifier] = None) -> FastAPI:
    """Create the FastAPI app.

    The signer is built here rather than in the lifespan so that a missing or
    invalid key stops the process before it starts listening.
    """
    settings = settings or load_settings()
    orchestrator = build_orchestrator(
        settings, signer=signer,
        social_verifier=social_verifier, chat_verifier=chat_verifier,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Ragnok verification server ready",
                    extra={"signer": orchestrator.signer.address,
                           "cors_origin": settings.frontend_url})
        yield
        await orchestrator.social_verifier.aclose()
        await orchestrator.chat_verifier.aclose()

    app = FastAPI(
        title="Ragnok Verification API",
        description="Verifies Twitter and Discord identities and signs wallet attestations.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.orchestrator = orchestrator
    apply_security(app, settings)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Health check — always returns 200 if the service is up."""
        return HealthResponse()

    @app.post("/api/verify")
    async def verify(body: VerifyRequest, request: Request):
        """Validate the claim, verify both socials, and sign on success."""
        outcome = await request.app.state.orchestrator.handle(
            body.walletAddress, body.twitterHandle, body.discordHandle,
        )
        return JSONResponse(status_code=outcome.status_code, content=outcome.body)

    return app
