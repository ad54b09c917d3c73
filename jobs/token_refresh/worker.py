"""Local worker that runs the refresh sweep on a fixed interval."""

from __future__ import annotations

import asyncio
import logging

from jobs.token_refresh.handler import build_refresh_service, run_refresh
from social_connect.core.config import get_settings
from social_connect.services import TokenRefreshService

logger = logging.getLogger(__name__)


class TokenRefreshWorker:
    """Run the refresh sweep periodically when no external scheduler exists."""

    def __init__(
        self,
        service: TokenRefreshService,
        interval_seconds: float = 3600.0,
    ) -> None:
        self._service = service
        self._interval = interval_seconds

    async def run_once(self) -> dict:
        try:
            body = await run_refresh(self._service)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Token refresh sweep failed")
            return {"success": False, "results": []}
        logger.info("Token refresh sweep processed %d record(s)", len(body["results"]))
        return body

    async def run_forever(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self._interval)


async def main() -> None:
    settings = get_settings()
    worker = TokenRefreshWorker(
        service=build_refresh_service(),
        interval_seconds=settings.refresh.interval_seconds,
    )
    await worker.run_forever()


if __name__ == "__main__":  # pragma: no cover - manual execution path
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Token refresh worker stopped")
