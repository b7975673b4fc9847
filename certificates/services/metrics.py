"""
Generation counters for the certificate dashboard, kept in Redis.

Every queued certificate sits in a sorted set scored by its queue time until
it settles. The settled outcome of each certificate ("READY:Merit",
"FAILED:Excellence") is recorded once in an outcomes hash, so a task that
fails on several attempts counts one failure, and a retry that succeeds moves
the certificate from failed to ready. Ready and failed counts and render
timings are kept per tier.
"""
import time
from typing import Dict, Optional, Tuple

import redis
from django.conf import settings

from certificates.services.tiers import EXCELLENCE, MERIT, PARTICIPATION

PREFIX = "certificates:metrics"
QUEUED = f"{PREFIX}:queued"
OUTCOMES = f"{PREFIX}:outcomes"
READY = f"{PREFIX}:ready"
FAILED = f"{PREFIX}:failed"
TIMING = f"{PREFIX}:timing"
START = f"{PREFIX}:start"

TIERS = (EXCELLENCE, MERIT, PARTICIPATION)
OUTCOME_KEYS = {"READY": READY, "FAILED": FAILED}


def _client():
    """
    Redis client for generation counters. Falls back to the Celery broker URL.
    """
    url = getattr(settings, "METRICS_REDIS_URL", None) or getattr(settings, "CELERY_BROKER_URL", "redis://localhost:6379/0")
    return redis.Redis.from_url(url)


def _safe_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _text(value) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


def _split_outcome(value) -> Optional[Tuple[str, str]]:
    if not value:
        return None
    state, _, tier = _text(value).partition(":")
    return state, tier


def reset_metrics():
    cli = _client()
    pipe = cli.pipeline()
    pipe.delete(QUEUED, OUTCOMES, READY, FAILED, TIMING)
    pipe.set(START, time.time())
    pipe.execute()


def _ensure_start(cli):
    if not cli.exists(START):
        cli.set(START, time.time())


def mark_pending(certificate_id: int):
    """Queue a certificate; a regenerated one gives back its earlier outcome."""
    cli = _client()
    _ensure_start(cli)
    pipe = cli.pipeline()
    pipe.hget(OUTCOMES, certificate_id)
    pipe.hdel(OUTCOMES, certificate_id)
    pipe.zadd(QUEUED, {certificate_id: time.time()})
    previous = _split_outcome(pipe.execute()[0])
    if previous and previous[0] in OUTCOME_KEYS:
        cli.hincrby(OUTCOME_KEYS[previous[0]], previous[1], -1)


def mark_ready(certificate_id: int, tier: str, duration_seconds: float):
    cli = _client()
    _ensure_start(cli)
    pipe = cli.pipeline()
    pipe.hget(OUTCOMES, certificate_id)
    pipe.hset(OUTCOMES, certificate_id, f"READY:{tier}")
    pipe.zrem(QUEUED, certificate_id)
    previous = _split_outcome(pipe.execute()[0])
    if previous and previous[0] == "READY":
        return

    pipe = cli.pipeline()
    if previous and previous[0] == "FAILED":
        pipe.hincrby(FAILED, previous[1], -1)
    pipe.hincrby(READY, tier, 1)
    pipe.hincrbyfloat(TIMING, f"{tier}:sum", max(duration_seconds, 0))
    pipe.hincrby(TIMING, f"{tier}:count", 1)
    pipe.execute()


def mark_failed(certificate_id: int, tier: str):
    """Count a failure once per certificate; later calls are no-ops."""
    cli = _client()
    _ensure_start(cli)
    if not cli.hsetnx(OUTCOMES, certificate_id, f"FAILED:{tier}"):
        return
    pipe = cli.pipeline()
    pipe.zrem(QUEUED, certificate_id)
    pipe.hincrby(FAILED, tier, 1)
    pipe.execute()


def _per_tier(raw: dict) -> Dict[str, int]:
    counts = {tier: 0 for tier in TIERS}
    for key, value in raw.items():
        counts[_text(key)] = max(_safe_int(value), 0)
    return counts


def get_metrics(timeout_seconds: int = 120) -> Optional[dict]:
    """
    Counters and timings, or None when Redis is unreachable.
    """
    try:
        cli = _client()
        now = time.time()
        pending = cli.zcard(QUEUED)
        stale = cli.zcount(QUEUED, 0, now - timeout_seconds)
        ready_raw = cli.hgetall(READY)
        failed_raw = cli.hgetall(FAILED)
        timing_raw = cli.hgetall(TIMING)
        start_val = cli.get(START)
    except redis.RedisError:
        return None

    ready_by_tier = _per_tier(ready_raw)
    failed_by_tier = _per_tier(failed_raw)
    timing = {_text(k): v for k, v in timing_raw.items()}

    avg_by_tier = {}
    total = 0.0
    count = 0
    for tier in ready_by_tier:
        tier_sum = float(timing.get(f"{tier}:sum", 0) or 0)
        tier_count = _safe_int(timing.get(f"{tier}:count", 0))
        avg_by_tier[tier] = round(tier_sum / tier_count, 2) if tier_count else None
        total += tier_sum
        count += tier_count

    ready = sum(ready_by_tier.values())
    started_at = float(start_val) if start_val else None
    elapsed = round(now - started_at, 2) if started_at else None
    return {
        "pending": pending,
        "ready": ready,
        "failed": sum(failed_by_tier.values()),
        "stale_pending": stale,
        "ready_by_tier": ready_by_tier,
        "failed_by_tier": failed_by_tier,
        "avg_seconds": round(total / count, 2) if count else None,
        "avg_seconds_by_tier": avg_by_tier,
        "total_seconds": round(total, 2),
        "elapsed_seconds": elapsed,
        "certificates_per_sec": round(ready / elapsed, 2) if elapsed and elapsed > 0 else None,
    }
