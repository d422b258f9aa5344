"""
Page quality scoring with Lighthouse.

Each audit launches its own Chromium (through Playwright) with a remote
debugging port and points the Lighthouse CLI at it, restricted to the
performance, accessibility and SEO categories under desktop emulation.
"""

import asyncio
import json
import logging
import socket
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Optional

from api.models import AuditScore
from config import settings
from core.browser import HeadlessBrowserSession
from core.exceptions import AuditEngineError

logger = logging.getLogger(__name__)

CATEGORIES = ("performance", "accessibility", "seo")


def normalize_score(raw) -> int:
    """Lighthouse 0-1 score to a 0-100 integer, rounding half up; missing is 0"""
    if raw is None:
        return 0
    value = (Decimal(str(raw)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, min(100, int(value)))


def scores_from_report(report: Optional[Dict]) -> AuditScore:
    if not report:
        raise ValueError("Lighthouse audit returned no results")

    categories = report.get("categories") or {}
    return AuditScore(
        **{
            name: normalize_score((categories.get(name) or {}).get("score"))
            for name in CATEGORIES
        }
    )


# Lighthouse output when nothing usable answers on the debugging port
PORT_FAILURE_MARKERS = ("ECONNREFUSED", "Unable to connect to Chrome")
PORT_ATTEMPTS = 2


class DebuggingPortError(RuntimeError):
    """Lighthouse could not reach Chrome on the chosen debugging port"""


def find_free_port() -> int:
    """
    Ask the OS for an unused local port.

    The port is released before Chromium binds it, so another process can
    take it in between; PageAuditEngine relaunches on a new port when that
    happens.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class LighthouseCLI:
    """
    Runs the Lighthouse CLI against an already running Chrome and returns the
    parsed JSON report.
    """

    def __init__(
        self,
        binary: str = settings.LIGHTHOUSE_BIN,
        timeout: int = settings.LIGHTHOUSE_TIMEOUT,
    ):
        self.binary = binary
        self.timeout = timeout

    def command(self, url: str, port: int) -> list:
        return [
            self.binary,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            f"--only-categories={','.join(CATEGORIES)}",
            "--preset=desktop",
            "--quiet",
        ]

    async def __call__(self, url: str, port: int) -> Dict:
        proc = await asyncio.create_subprocess_exec(
            *self.command(url, port),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            try:
                stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
            except asyncio.TimeoutError:
                raise TimeoutError(f"Lighthouse timed out after {self.timeout}s")
        finally:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            output = stderr.decode(errors="replace").strip()
            message = f"Lighthouse exited with code {proc.returncode}: {output[-500:]}"
            if any(marker in output for marker in PORT_FAILURE_MARKERS):
                raise DebuggingPortError(message)
            raise RuntimeError(message)

        if not stdout.strip():
            raise RuntimeError("Lighthouse audit returned no results")

        return json.loads(stdout)


class PageAuditEngine:
    """
    Scores a URL for performance, accessibility and SEO.

    Args:
        session_factory: Callable taking extra Chromium args and returning an
            async context manager that owns the browser process
        runner: Async callable (url, port) -> Lighthouse report dict
    """

    def __init__(
        self,
        session_factory: Callable = None,
        runner: Callable = None,
    ):
        self.session_factory = session_factory or (
            lambda args: HeadlessBrowserSession(extra_args=args)
        )
        self.runner = runner or LighthouseCLI()

    async def audit(self, url: str) -> AuditScore:
        """
        Raises:
            AuditEngineError: If the browser, Lighthouse or the report fails
        """
        start = time.time()
        try:
            report = await self._run_on_free_port(url)
            scores = scores_from_report(report)
        except Exception as e:
            raise AuditEngineError(url, e) from e

        logger.info(
            f"🏁 Lighthouse for {url} in {time.time() - start:.2f}s: "
            f"performance={scores.performance} accessibility={scores.accessibility} seo={scores.seo}"
        )
        return scores

    async def _run_on_free_port(self, url: str) -> Dict:
        for attempt in range(1, PORT_ATTEMPTS + 1):
            port = find_free_port()
            try:
                async with self.session_factory([f"--remote-debugging-port={port}"]):
                    return await self.runner(url, port)
            except DebuggingPortError as e:
                if attempt == PORT_ATTEMPTS:
                    raise
                logger.warning(f"🔌 Debugging port {port} unreachable for {url}, relaunching: {str(e)}")
