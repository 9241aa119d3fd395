"""
Async demo: per-attempt timeouts, retries, fallback and caller cancellation.

Run with:
    uv pip install httpx
    uv run python docs/snippets/httpx_safe_async.py
"""

import asyncio
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Mapping

import httpx

from safecall import (
    AppError,
    CallContext,
    CancellationSignal,
    ErrorKind,
    SafeExecutor,
    default_classifier,
)


class DemoHandler(BaseHTTPRequestHandler):
    flaky_count = 0

    def do_GET(self) -> None:  # noqa: N802 - BaseHTTPRequestHandler hook name
        path = self.path.split("?", 1)[0]
        if path == "/slow":
            time.sleep(0.5)
        if path == "/flaky":
            DemoHandler.flaky_count += 1
            if DemoHandler.flaky_count < 3:
                self.send_response(503)
                self.end_headers()
                self.wfile.write(b"busy")
                return
        if path == "/broken":
            self.send_response(500)
            self.end_headers()
            self.wfile.write(b"boom")
            return
        self.send_response(200)
        self.end_headers()
        self.wfile.write(b"ok")

    def log_message(self, format: str, *args: object) -> None:
        return


def start_server() -> ThreadingHTTPServer:
    server = ThreadingHTTPServer(("127.0.0.1", 0), DemoHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server


def classify_httpx(err: Any) -> AppError:
    if isinstance(err, httpx.HTTPStatusError):
        return AppError(
            ErrorKind.NETWORK,
            f"HTTP {err.response.status_code}",
            cause=err,
            meta={"status": err.response.status_code},
        )
    if isinstance(err, httpx.TransportError):
        return AppError(ErrorKind.NETWORK, "Transport failure", cause=err)
    return default_classifier(err)


def log_event(event: str, fields: Mapping[str, object]) -> None:
    kind = fields.get("kind", "-")
    fired_by = fields.get("fired_by", "-")
    operation = fields.get("operation", "-")
    print(
        f"  [{operation}] event={event} attempt={fields['attempt']} "
        f"kind={kind} fired_by={fired_by}"
    )


async def run_case(
    executor: SafeExecutor,
    client: httpx.AsyncClient,
    path: str,
    label: str,
    signal: CancellationSignal | None = None,
) -> None:
    async def fetch(ctx: CallContext) -> str:
        resp = await client.get(path, timeout=2.0)
        resp.raise_for_status()
        return resp.text

    print(f"\n=== {label} ===")
    try:
        body = await executor.call(fetch, signal=signal, operation=label, on_log=log_event)
    except AppError as exc:
        print(f"  failed: kind={exc.kind.name} message={exc.message}")
        return
    print(f"  result: {body!r}")


async def demo(base_url: str) -> None:
    retrying = SafeExecutor(timeout_s=0.2, retry=2, classifier=classify_httpx)
    with_fallback = SafeExecutor(retry=1, fallback="cached", classifier=classify_httpx)

    async with httpx.AsyncClient(base_url=base_url) as client:
        await run_case(retrying, client, "/flaky", "retry_until_ok")
        await run_case(retrying, client, "/slow", "timeout_each_attempt")
        await run_case(with_fallback, client, "/broken", "fallback_after_retry")

        cancel = CancellationSignal()
        asyncio.get_running_loop().call_later(0.1, cancel.fire)
        await run_case(retrying, client, "/slow", "caller_cancelled", signal=cancel)


if __name__ == "__main__":
    server = start_server()
    try:
        asyncio.run(demo(f"http://127.0.0.1:{server.server_port}"))
    finally:
        server.shutdown()
        server.server_close()
