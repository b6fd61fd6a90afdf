"""Liveness endpoint for container platforms."""

from __future__ import annotations

import logging

from aiohttp import web

log = logging.getLogger(__name__)

HEALTH_PATH = "/healthz"


async def healthz(_request: web.Request) -> web.Response:
    return web.Response(text="OK", content_type="text/plain")


def build_app() -> web.Application:
    app = web.Application()
    app.router.add_get(HEALTH_PATH, healthz)
    return app


class HealthServer:
    def __init__(self, port: int, host: str = "0.0.0.0") -> None:
        self.port = port
        self.host = host
        self._runner: web.AppRunner | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(build_app(), access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        log.info("Health check listening on %s:%s%s", self.host, self.port, HEALTH_PATH)

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None


__all__ = ["HEALTH_PATH", "HealthServer", "build_app", "healthz"]
