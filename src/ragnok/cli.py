#!/usr/bin/env python3
"""
ragnok CLI — Run the verification server and inspect attestations offline.

Commands:
    serve    - Run the HTTP API under uvicorn
    signer   - Show the signer address for OWNER_PRIVATE_KEY
    hash     - Compute the message hash for a claim
    recover  - Recover the signer address from an issued signature
"""

import argparse
import json
import sys
from typing import Optional


def _output(data: dict, args: argparse.Namespace, human_fn=None):
    """Output data as JSON or pretty-printed."""
    if getattr(args, 'json', False):
        print(json.dumps(data, indent=2, default=str))
    elif human_fn:
        human_fn(data)
    else:
        print(json.dumps(data, indent=2, default=str))


def _claim(args):
    from ragnok.validation import VerificationClaim, validate_claim
    return validate_claim(VerificationClaim(args.wallet, args.twitter, args.discord))


# ─── Commands ──────────────────────────────────────────────────────

def cmd_serve(args):
    """Run the API server."""
    import uvicorn
    from ragnok.api import create_app
    from ragnok.config import load_settings

    settings = load_settings(args.env_file)
    app = create_app(settings)
    uvicorn.run(app, host=args.host or settings.host, port=args.port or settings.port)


def cmd_signer(args):
    """Print the signer address derived from the configured key."""
    from ragnok.config import load_settings
    from ragnok.signer import AttestationSigner

    signer = AttestationSigner(load_settings(args.env_file).owner_private_key)
    result = {"signer": signer.address}

    def human(d):
        print(f"Signer address: {d['signer']}")

    _output(result, args, human)
    return result


def cmd_hash(args):
    """Print keccak256(abi.encodePacked(wallet, twitter, discord))."""
    from ragnok.signer import message_hash

    claim = _claim(args)
    result = {"messageHash": "0x" + message_hash(claim).hex()}

    def human(d):
        print(d["messageHash"])

    _output(result, args, human)
    return result


def cmd_recover(args):
    """Recover the signer of an attestation signature."""
    from ragnok.signer import recover_signer, verify_attestation

    claim = _claim(args)
    recovered = recover_signer(claim, args.signature)
    result = {"signer": recovered}
    if args.expect:
        result["matches"] = verify_attestation(claim, args.signature, args.expect)

    def human(d):
        print(f"Recovered signer: {d['signer']}")
        if "matches" in d:
            print("✅ matches expected signer" if d["matches"] else "❌ does NOT match expected signer")

    _output(result, args, human)
    return result


# ─── Parser ────────────────────────────────────────────────────────

def _add_claim_args(p):
    p.add_argument("wallet", help="Wallet address")
    p.add_argument("twitter", help="Twitter handle, including @")
    p.add_argument("discord", help="Discord handle, username#discriminator")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ragnok",
        description="ragnok — social verification and attestation signing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # serve
    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default=None, help="Bind host (default: HOST or 0.0.0.0)")
    p.add_argument("--port", type=int, default=None, help="Bind port (default: PORT or 3001)")

    # signer
    sub.add_parser("signer", help="Show the signer address")

    # hash
    p = sub.add_parser("hash", help="Compute the message hash for a claim")
    _add_claim_args(p)

    # recover
    p = sub.add_parser("recover", help="Recover the signer from a signature")
    _add_claim_args(p)
    p.add_argument("signature", help="0x-prefixed 65-byte signature")
    p.add_argument("-e", "--expect", help="Expected signer address")

    return parser


def main(argv: Optional[list[str]] = None) -> Optional[dict]:
    """CLI entry point. Returns result dict for testing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "serve": cmd_serve,
        "signer": cmd_signer,
        "hash": cmd_hash,
        "recover": cmd_recover,
    }

    try:
        return commands[args.command](args)
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
