"""Kafka trigger: block until a message naming the repository arrives."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import structlog
from aiokafka import AIOKafkaConsumer
from aiokafka.errors import KafkaError

from release_changelog.core.errors import TriggerChannelError, TriggerTimeoutError

log = structlog.get_logger("release_changelog.trigger")

GROUP_ID = "release-changelog"
# Only messages produced after we subscribe are seen.
AUTO_OFFSET_RESET = "latest"

_READ_ERROR_PAUSE = 1.0  # seconds

ConsumerFactory = Callable[..., Any]


def _decode(value: bytes | None) -> str:
    if value is None:
        return ""
    return value.decode("utf-8", errors="replace")


class TriggerListener:
    """Subscribes to one topic and waits for a payload mentioning a repo.

    Matching is plain substring containment; payloads have no schema.
    Read errors are logged and skipped. The consumer is stopped on every
    exit path, including timeout and cancellation.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        topic: str,
        *,
        group_id: str = GROUP_ID,
        consumer_factory: ConsumerFactory = AIOKafkaConsumer,
        read_error_pause: float = _READ_ERROR_PAUSE,
    ) -> None:
        self.bootstrap_servers = bootstrap_servers
        self.topic = topic
        self.group_id = group_id
        self._consumer_factory = consumer_factory
        self._read_error_pause = read_error_pause
        self.messages_seen = 0
        self.read_errors = 0

    async def wait_for(self, repo: str, *, timeout: float | None = None) -> str:
        """Block until a message containing *repo* arrives; return its payload.

        Waits indefinitely unless *timeout* (seconds) is given, in which
        case :class:`TriggerTimeoutError` is raised when it elapses.
        """
        consumer = self._consumer_factory(
            self.topic,
            bootstrap_servers=self.bootstrap_servers,
            group_id=self.group_id,
            auto_offset_reset=AUTO_OFFSET_RESET,
        )
        try:
            try:
                await consumer.start()
            except KafkaError as exc:
                raise TriggerChannelError(
                    f"cannot subscribe to {self.topic!r}: {exc}"
                ) from exc

            log.info("trigger.subscribed", topic=self.topic, repo=repo, group_id=self.group_id)
            if timeout is None:
                return await self._consume_until_match(consumer, repo)
            try:
                return await asyncio.wait_for(
                    self._consume_until_match(consumer, repo), timeout=timeout
                )
            except asyncio.TimeoutError as exc:
                raise TriggerTimeoutError(self.topic, repo, timeout) from exc
        finally:
            await consumer.stop()
            log.info(
                "trigger.unsubscribed",
                topic=self.topic,
                messages_seen=self.messages_seen,
                read_errors=self.read_errors,
            )

    async def _consume_until_match(self, consumer: Any, repo: str) -> str:
        while True:
            try:
                message = await consumer.getone()
            except KafkaError as exc:
                self.read_errors += 1
                log.warning("trigger.read_error", topic=self.topic, error=str(exc))
                await asyncio.sleep(self._read_error_pause)
                continue

            self.messages_seen += 1
            payload = _decode(message.value)
            if repo in payload:
                log.info("trigger.matched", topic=self.topic, repo=repo, payload=payload)
                return payload
            log.debug("trigger.skipped", topic=self.topic, offset=getattr(message, "offset", None))


async def wait_for_repo_signal(
    bootstrap_servers: str,
    topic: str,
    repo: str,
    *,
    timeout: float | None = None,
    consumer_factory: ConsumerFactory = AIOKafkaConsumer,
) -> str:
    """Convenience wrapper: build a :class:`TriggerListener` and wait once."""
    listener = TriggerListener(bootstrap_servers, topic, consumer_factory=consumer_factory)
    return await listener.wait_for(repo, timeout=timeout)
