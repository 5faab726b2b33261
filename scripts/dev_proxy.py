#!/usr/bin/env python3
"""Development-only proxy server exposing the CORS and CKAN relay endpoints.

Usage:
    python scripts/dev_proxy.py --port 3001
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

import uvicorn  # noqa: E402

from thaihousing.core.config import Settings  # noqa: E402
from thaihousing.web.app import create_proxy_app  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the development CORS/CKAN proxy.")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Interface to bind.")
    parser.add_argument("--port", type=int, default=3001, help="Port to listen on.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print(f"Proxy server running on http://{args.host}:{args.port}")
    print(f"CKAN proxy: http://{args.host}:{args.port}/api/ckan-proxy?action=<action>")
    print(f"CORS proxy: http://{args.host}:{args.port}/api/cors-proxy?url=<url>")
    uvicorn.run(create_proxy_app(settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
