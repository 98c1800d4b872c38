"""Background worker that delivers queued invitation mails."""

from __future__ import annotations

import asyncio
import signal
from typing import Any

import structlog

from workspace_members_service.db.engine import close_db, get_session_factory, init_db
from workspace_members_service.jobs.connection import close_redis, get_redis, init_redis
from workspace_members_service.jobs.invitations import InvitationDispatcher
from workspace_members_service.jobs.queue import SEND_INVITATION_EMAILS, RedisInvitationQueue
from workspace_members_service.log_config import configure_logging
from workspace_members_service.mail.mailer import build_mailer
from workspace_members_service.settings import settings

logger = structlog.get_logger(__name__)


class InvitationWorker:
    def __init__(
        self,
        queue: RedisInvitationQueue,
        dispatcher: InvitationDispatcher,
        poll_timeout: int = 5,
    ) -> None:
        self._queue = queue
        self._dispatcher = dispatcher
        self._poll_timeout = poll_timeout
        self.running = False

    async def run(self) -> None:
        self.running = True
        logger.info("worker_started", queue=settings.invitation_queue_key)

        while self.running:
            try:
                envelope = await self._queue.dequeue(timeout=self._poll_timeout)
                if envelope:
                    await self.process(envelope)
            except Exception:
                logger.exception("worker_error")
                await asyncio.sleep(1)

        logger.info("worker_stopped")

    async def process(self, envelope: dict[str, Any]) -> int:
        if envelope.get("job") != SEND_INVITATION_EMAILS:
            logger.warning("worker_job_unknown", job=envelope.get("job"), job_id=envelope.get("id"))
            return 0

        invitations = envelope.get("invitations") or []
        sent = await self._dispatcher.perform(invitations)
        logger.info(
            "invitation_job_processed",
            job_id=envelope.get("id"),
            invitations=len(invitations),
            sent=sent,
        )
        return sent

    def stop(self) -> None:
        logger.info("worker_stopping")
        self.running = False


async def main() -> None:
    configure_logging()
    await init_db()
    await init_redis()

    worker = InvitationWorker(
        RedisInvitationQueue(get_redis(), settings.invitation_queue_key),
        InvitationDispatcher(get_session_factory(), build_mailer(settings)),
        poll_timeout=settings.worker_poll_timeout,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)

    try:
        await worker.run()
    finally:
        await close_redis()
        await close_db()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
