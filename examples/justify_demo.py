#!/usr/bin/env python3
"""Walk through the Justify API against a running server.

This script shows how to:
1. Check the service health endpoint
2. Request a bearer token for an email
3. Justify a paragraph and read the quota headers
4. Inspect per-token usage statistics

Usage:
    pip install -e ".[demo]"
    python examples/justify_demo.py --base-url http://127.0.0.1:8000
"""

from __future__ import annotations

import argparse
import sys

import httpx

SAMPLE_TEXT = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud "
    "exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat. Duis aute irure "
    "dolor in reprehenderit in voluptate velit esse cillum dolore eu fugiat nulla pariatur. "
    "Excepteur sint occaecat cupidatat non proident, sunt in culpa qui officia deserunt "
    "mollit anim id est laborum."
)


def run_demo(base_url: str, email: str, api_prefix: str) -> int:
    """Exercise every public endpoint once. Returns a process exit code."""
    with httpx.Client(base_url=base_url, timeout=10.0) as client:
        print("1. Health check")
        health = client.get("/health")
        health.raise_for_status()
        print(f"   status: {health.json()['status']}")

        print("2. Token issuance")
        token_response = client.post(f"{api_prefix}/token", json={"email": email})
        if token_response.status_code != httpx.codes.OK:
            print(f"   failed: {token_response.status_code} {token_response.text}")
            return 1
        token = token_response.json()["token"]
        print(f"   token: {token[:20]}...")

        print("3. Justification")
        justify_response = client.post(
            f"{api_prefix}/justify",
            content=SAMPLE_TEXT.encode(),
            headers={"Content-Type": "text/plain", "Authorization": f"Bearer {token}"},
        )
        if justify_response.status_code != httpx.codes.OK:
            print(f"   failed: {justify_response.status_code} {justify_response.text}")
            return 1
        for line in justify_response.text.split("\n"):
            print(f"   |{line}|")
        print(f"   words used: {justify_response.headers['X-Words-Used']}")
        print(f"   remaining:  {justify_response.headers['X-Remaining-Words']}")
        print(f"   reset at:   {justify_response.headers['X-Reset-At']}")

        print("4. Usage statistics")
        stats = client.get(
            f"{api_prefix}/justify/stats", headers={"Authorization": f"Bearer {token}"}
        )
        stats.raise_for_status()
        usage = stats.json()["user"]["usage"]
        print(f"   total words: {usage['total_words']} over {usage['record_count']} requests")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--base-url", default="http://127.0.0.1:8000")
    parser.add_argument("--email", default="demo@example.com")
    parser.add_argument("--api-prefix", default="/api")
    args = parser.parse_args()
    try:
        sys.exit(run_demo(args.base_url, args.email, args.api_prefix))
    except httpx.HTTPError as exc:
        print(f"Request failed: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
