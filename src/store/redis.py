"""Redis-backed audit store — create/get/update with a creation-ordered index."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

import redis.asyncio as redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from src.api.schemas import Audit

logger = logging.getLogger(__name__)

KEY_PREFIX = "audit:"
INDEX_KEY = "audits:index"


def _generate_audit_id() -> str:
    return uuid.uuid4().hex[:12]


class AuditStore:
    """Thin async wrapper around Redis for persisting audit records.

    Every write replaces the full JSON record; last writer wins per id.
    """

    def __init__(self, client: redis.Redis, default_ttl: int = 0) -> None:
        self._client = client
        self._default_ttl = default_ttl

    async def get(self, audit_id: str) -> Audit | None:
        """Return the stored audit, or ``None`` on miss / error."""
        try:
            raw = await self._client.get(f"{KEY_PREFIX}{audit_id}")
        except redis.RedisError:
            logger.warning("audit get failed", extra={"audit_id": audit_id}, exc_info=True)
            return None
        if raw is None:
            logger.debug("audit not found", extra={"audit_id": audit_id})
            return None
        return Audit.model_validate_json(raw)

    async def get_all(self) -> list[Audit]:
        """Return every stored audit in creation order; expired ids are skipped."""
        try:
            ids = await self._client.lrange(INDEX_KEY, 0, -1)
            if not ids:
                return []
            raws = await self._client.mget([f"{KEY_PREFIX}{audit_id}" for audit_id in ids])
        except redis.RedisError:
            logger.warning("audit list failed", exc_info=True)
            return []
        return [Audit.model_validate_json(raw) for raw in raws if raw is not None]

    async def create(self, url: str) -> Audit | None:
        """Store a new QUEUED audit for *url*. Returns ``None`` on error."""
        audit = Audit(
            id=_generate_audit_id(),
            url=url,
            created_at=datetime.now(timezone.utc),
        )
        if not await self._write(audit):
            return None
        try:
            await self._client.rpush(INDEX_KEY, audit.id)
        except redis.RedisError:
            logger.warning("audit index update failed", extra={"audit_id": audit.id}, exc_info=True)
        logger.info("audit created", extra={"audit_id": audit.id, "url": url})
        return audit

    async def update(self, audit_id: str, **fields: Any) -> Audit | None:
        """Merge *fields* into the stored audit and rewrite it.

        Returns the updated record, or ``None`` if the audit is missing or the
        write failed.
        """
        current = await self.get(audit_id)
        if current is None:
            return None
        updated = Audit.model_validate(current.model_dump() | fields)
        if not await self._write(updated):
            return None
        return updated

    async def _write(self, audit: Audit) -> bool:
        ttl = self._default_ttl if self._default_ttl > 0 else None
        try:
            await self._client.set(
                f"{KEY_PREFIX}{audit.id}",
                audit.model_dump_json(),
                ex=ttl,
            )
            logger.debug("audit stored", extra={"audit_id": audit.id, "status": audit.status.value})
            return True
        except redis.RedisError:
            logger.warning("audit write failed", extra={"audit_id": audit.id}, exc_info=True)
            return False


async def create_redis_client(redis_url: str) -> redis.Redis:
    # Strip credentials for logging (everything before @ if present)
    safe_url = redis_url.split("@")[-1] if "@" in redis_url else redis_url
    logger.info("connecting to redis", extra={"redis_url": safe_url})
    retry = Retry(ExponentialBackoff(), retries=3)
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
        retry=retry,
        retry_on_error=[redis.ConnectionError, redis.TimeoutError],
    )
