"""Operator CLI.

    python -m raahvia.cli scan aud_entrance
    python -m raahvia.cli status
    python -m raahvia.cli serve --port 5000
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import List, Optional

from raahvia.config import ClientConfig, settings
from raahvia.observability.logging import configure_logging
from raahvia.services.retrieval_client import RetrievalClient
from raahvia.services.status_prober import StatusProber


def _client_config(args: argparse.Namespace) -> ClientConfig:
    overrides = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.timeout_ms is not None:
        overrides["timeout_ms"] = args.timeout_ms
    return ClientConfig.from_settings(settings).model_copy(update=overrides)


async def _scan(config: ClientConfig, qr_data: str) -> dict:
    async with RetrievalClient(config) as client:
        resp = await client.scan(qr_data)
    return resp.to_wire()


async def _status(config: ClientConfig) -> dict:
    async with StatusProber(config) as prober:
        return await prober.check_status()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="raahvia", description="RaahVia navigation metadata tools")
    parser.add_argument("--base-url", help="Gateway API base URL (default from BACKEND_BASE_URL)")
    parser.add_argument("--timeout-ms", type=int, help="Scan deadline in milliseconds")
    parser.add_argument("--log-level", default=None, help="Logging level (default from LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Fetch navigation metadata for a QR code")
    scan.add_argument("qr_data")

    sub.add_parser("status", help="Probe gateway health")

    serve = sub.add_parser("serve", help="Run the gateway")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "serve":
        from raahvia.server import run

        run(host=args.host, port=args.port)
        return 0

    config = _client_config(args)
    if args.command == "scan":
        result = asyncio.run(_scan(config, args.qr_data))
    else:
        result = asyncio.run(_status(config))
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
