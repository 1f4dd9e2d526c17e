#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Lingua Relay — Dev Chat Client
------------------------------
Interactive console tool for talking to a running relay.

Features:
- Starts a session (POST /api/conversation/start) or reuses --session.
- Simple REPL: you type, the model answers in --lang.
- Streams the reply chunk by chunk from /api/conversation/message/stream,
  or uses the one-shot /api/conversation/message with --no-stream.
- Slash commands: /lang <code> switches language, /new starts a new
  session, /quit exits.

This client is meant for development / testing on your laptop:

    lingua-relay-chat --server http://127.0.0.1:8000 --lang fr
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Iterator, Optional

import httpx

DEFAULT_SERVER = "http://127.0.0.1:8000"


class RelayClientError(Exception):
    """Raised when the server answers with an error envelope."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def _raise_for_error(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    try:
        message = resp.json().get("error", resp.text)
    except ValueError:
        message = resp.text
    raise RelayClientError(resp.status_code, message)


class RelayClient:
    """Small synchronous client for the /api/conversation endpoints."""

    def __init__(self, http: httpx.Client) -> None:
        self.http = http

    def start(self) -> str:
        resp = self.http.post("/api/conversation/start")
        _raise_for_error(resp)
        return resp.json()["sessionId"]

    @staticmethod
    def build_payload(
        session_id: str,
        message: str,
        lang: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "sessionId": session_id,
            "message": message,
            "targetLang": lang,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["maxTokens"] = max_tokens
        return payload

    def send(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.http.post("/api/conversation/message", json=payload)
        _raise_for_error(resp)
        return resp.json()

    def stream(self, payload: Dict[str, Any]) -> Iterator[str]:
        with self.http.stream(
            "POST", "/api/conversation/message/stream", json=payload
        ) as resp:
            if not resp.is_success:
                resp.read()
                _raise_for_error(resp)
            yield from resp.iter_text()


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Lingua Relay — Dev Chat Client",
    )
    parser.add_argument(
        "--server",
        type=str,
        default=DEFAULT_SERVER,
        help=f"Relay base URL (default: {DEFAULT_SERVER})",
    )
    parser.add_argument(
        "--session",
        type=str,
        default=None,
        help="Reuse an existing sessionId instead of starting a new one.",
    )
    parser.add_argument(
        "--lang",
        type=str,
        default="en",
        help="Target language code: en, fr, es, ja, ar (default: en).",
    )
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--max-tokens", dest="max_tokens", type=int, default=None)
    parser.add_argument(
        "--no-stream",
        dest="stream",
        action="store_false",
        default=True,
        help="Use the one-shot endpoint instead of streaming.",
    )
    parser.add_argument("--timeout", type=float, default=60.0)
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# REPL
# ---------------------------------------------------------------------------


def run_repl(client: RelayClient, args: argparse.Namespace) -> None:
    session_id = args.session or client.start()
    lang = args.lang
    print(f"[session {session_id}] lang={lang}  (/lang <code>, /new, /quit)")

    while True:
        try:
            line = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return

        if not line:
            continue
        if line in ("/quit", "/exit"):
            return
        if line == "/new":
            session_id = client.start()
            print(f"[session {session_id}]")
            continue
        if line.startswith("/lang "):
            lang = line.split(maxsplit=1)[1].strip()
            print(f"[lang {lang}]")
            continue

        payload = client.build_payload(
            session_id, line, lang, args.temperature, args.max_tokens
        )
        try:
            if args.stream:
                print("bot> ", end="", flush=True)
                for chunk in client.stream(payload):
                    print(chunk, end="", flush=True)
                print()
            else:
                reply = client.send(payload)
                print(f"bot> {reply['message']}  [{reply['responseId']}]")
        except RelayClientError as exc:
            print(f"\n[error] {exc}")
        except httpx.HTTPError as exc:
            print(f"\n[connection error] {exc}")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    with httpx.Client(base_url=args.server, timeout=args.timeout) as http:
        try:
            run_repl(RelayClient(http), args)
        except RelayClientError as exc:
            print(f"[error] {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
