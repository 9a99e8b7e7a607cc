"""Operator client for the gateway and its verification code listener.

Usage:
    form-gateway-client fetch https://example.com/form
    form-gateway-client status
    form-gateway-client submit-code 123456
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional

import httpx

from ..config import CHALLENGE_URL, GATEWAY_URL


async def _call(
    base_url: str,
    method: str,
    path: str,
    params: Optional[dict] = None,
    json_body: Optional[dict] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict:
    """Make a request and normalize the outcome to a dict.

    Returns {"text": ...} for HTML bodies, the decoded JSON otherwise,
    or {"error": ...} on any failure.
    """
    url = f"{base_url}{path}"
    try:
        async with httpx.AsyncClient(timeout=120.0, transport=transport) as client:
            if method == "GET":
                resp = await client.get(url, params=params)
            else:
                resp = await client.post(url, json=json_body or {})

            if resp.status_code >= 400:
                try:
                    data = resp.json()
                except ValueError:
                    data = {}
                return {"error": data.get("error", f"HTTP {resp.status_code}")}

            if resp.headers.get("content-type", "").startswith("text/html"):
                return {"text": resp.text}
            return resp.json()

    except httpx.ConnectError:
        return {"error": f"Not reachable at {base_url}. Is the gateway running?"}
    except httpx.TimeoutException:
        return {"error": f"Timed out waiting for {base_url}."}
    except httpx.HTTPError as e:
        return {"error": f"Request to {base_url} failed: {e}"}


async def fetch_form(url: str, base_url: str = GATEWAY_URL, **kwargs) -> dict:
    """Fetch the rendered HTML of ``url`` through the gateway."""
    return await _call(base_url, "GET", "/fetch-form", params={"url": url}, **kwargs)


async def gateway_status(base_url: str = GATEWAY_URL, **kwargs) -> dict:
    return await _call(base_url, "GET", "/status", **kwargs)


async def submit_code(code: str, base_url: str = CHALLENGE_URL, **kwargs) -> dict:
    """Send a verification code to a gateway waiting with CHALLENGE_CODE_SOURCE=http."""
    return await _call(base_url, "POST", "/challenge-code", json_body={"code": code}, **kwargs)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Talk to a running form gateway")
    sub = parser.add_subparsers(dest="command", required=True)

    fetch = sub.add_parser("fetch", help="Fetch a page through the gateway")
    fetch.add_argument("url")
    fetch.add_argument("--gateway", default=GATEWAY_URL)

    status = sub.add_parser("status", help="Show session and cache state")
    status.add_argument("--gateway", default=GATEWAY_URL)

    code = sub.add_parser("submit-code", help="Submit a verification code during login")
    code.add_argument("code")
    code.add_argument("--challenge", default=CHALLENGE_URL)

    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> dict:
    if args.command == "fetch":
        return await fetch_form(args.url, base_url=args.gateway)
    if args.command == "status":
        return await gateway_status(base_url=args.gateway)
    return await submit_code(args.code, base_url=args.challenge)


def main(argv: Optional[list[str]] = None):
    args = parse_args(argv)
    result = asyncio.run(_run(args))

    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        sys.exit(1)

    if "text" in result:
        print(result["text"])
    else:
        print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
