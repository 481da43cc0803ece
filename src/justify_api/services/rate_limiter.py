"""Sliding-window word quota tracking per bearer token."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock

from justify_api.core.errors import Err, ErrorKind, Ok, Result, ServiceError
from justify_api.core.log import mask_token
from justify_api.core.settings import settings
from justify_api.services.sweeper import PeriodicSweeper
from justify_api.utils.time import Clock, utcnow

logger = logging.getLogger(__name__)

# Word counts are plain non-negative ints.
WordCount = int


@dataclass(frozen=True)
class UsageSample:
    word_count: WordCount
    timestamp: datetime


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a quota check for one token."""

    allowed: bool
    remaining_words: WordCount
    reset_at: datetime
    current_usage: WordCount
    limit: WordCount
    requested: WordCount


@dataclass(frozen=True)
class UsageStats:
    total_words: WordCount
    record_count: int
    oldest_record: datetime | None


@dataclass(frozen=True)
class LimiterStats:
    active_tokens: int
    total_records: int
    total_words: WordCount
    daily_limit: WordCount


def quota_exceeded(result: RateLimitResult) -> Err:
    """Build the error returned when ``result`` disallows a request."""
    message = (
        f"Rate limit exceeded. Daily limit: {result.limit} words. "
        f"Current usage: {result.current_usage}. Requested: {result.requested}. "
        f"Reset at: {result.reset_at.isoformat()}"
    )
    return Err(
        ServiceError(
            kind=ErrorKind.QUOTA_EXCEEDED,
            message=message,
            details={
                "current_usage": result.current_usage,
                "limit": result.limit,
                "requested": result.requested,
                "remaining_words": result.remaining_words,
                "reset_at": result.reset_at.isoformat(),
            },
        )
    )


class RateLimiter:
    """Track word usage per token over a sliding time window.

    A sample stamped ``t`` counts toward usage at ``now`` iff
    ``t > now - window``. All map mutations happen under one lock, and the
    background sweep takes the same lock.
    """

    def __init__(
        self,
        daily_limit: WordCount | None = None,
        window: timedelta | None = None,
        *,
        sweep_interval_seconds: float | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._limit = daily_limit if daily_limit is not None else settings.daily_word_limit
        if self._limit < 0:
            raise ValueError("daily_limit must be non-negative")
        self._window = (
            window if window is not None else timedelta(seconds=settings.rate_limit_window_seconds)
        )
        if self._window <= timedelta(0):
            raise ValueError("window must be positive")
        self._clock = clock
        self._usage: dict[str, list[UsageSample]] = {}
        self._lock = Lock()
        self.sweeper = PeriodicSweeper(
            "rate-limiter",
            self.sweep,
            sweep_interval_seconds
            if sweep_interval_seconds is not None
            else settings.usage_sweep_interval_seconds,
        )

    @property
    def daily_limit(self) -> WordCount:
        return self._limit

    @property
    def window(self) -> timedelta:
        return self._window

    async def start(self) -> None:
        await self.sweeper.start()

    async def stop(self) -> None:
        await self.sweeper.stop()

    def check_limit(self, token: str, word_count: WordCount) -> RateLimitResult:
        """Compute whether ``word_count`` more words fit in the token's quota.

        A disallowed result is a normal outcome, not an error.
        """
        _ensure_non_negative(word_count)
        with self._lock:
            result = self._check_locked(token, word_count, self._clock())
        if not result.allowed:
            logger.warning(
                "Rate limit exceeded for token %s (%d/%d words)",
                mask_token(token),
                result.current_usage + word_count,
                self._limit,
            )
        return result

    def record_usage(self, token: str, word_count: WordCount) -> None:
        """Append a usage sample stamped now. Does not enforce the limit."""
        _ensure_non_negative(word_count)
        with self._lock:
            self._record_locked(token, word_count, self._clock())
        logger.debug("Recorded %d words usage for token %s", word_count, mask_token(token))

    def consume_words(self, token: str, word_count: WordCount) -> Result[RateLimitResult]:
        """Check and record ``word_count`` atomically.

        Nothing is recorded when the check fails. On success the returned
        result reflects the quota remaining after this consumption.
        """
        _ensure_non_negative(word_count)
        with self._lock:
            now = self._clock()
            check = self._check_locked(token, word_count, now)
            if not check.allowed:
                outcome: Result[RateLimitResult] = quota_exceeded(check)
            else:
                self._record_locked(token, word_count, now)
                outcome = Ok(self._check_locked(token, 0, now))
        if not outcome.ok:
            logger.warning(
                "Rate limit exceeded for token %s (%d/%d words)",
                mask_token(token),
                check.current_usage + word_count,
                self._limit,
            )
        return outcome

    def reset_usage(self, token: str) -> bool:
        """Clear all samples for ``token``. Returns whether anything was removed."""
        with self._lock:
            deleted = self._usage.pop(token, None) is not None
        if deleted:
            logger.info("Usage reset for token %s", mask_token(token))
        return deleted

    def usage_stats(self, token: str) -> UsageStats:
        now = self._clock()
        with self._lock:
            samples = self._valid_samples(token, now)
        return UsageStats(
            total_words=sum(sample.word_count for sample in samples),
            record_count=len(samples),
            oldest_record=min((s.timestamp for s in samples), default=None),
        )

    def global_stats(self) -> LimiterStats:
        """Aggregate in-window usage across all tokens without side effects."""
        now = self._clock()
        active_tokens = total_records = total_words = 0
        with self._lock:
            for token in self._usage:
                samples = self._valid_samples(token, now)
                if samples:
                    active_tokens += 1
                    total_records += len(samples)
                    total_words += sum(sample.word_count for sample in samples)
        return LimiterStats(
            active_tokens=active_tokens,
            total_records=total_records,
            total_words=total_words,
            daily_limit=self._limit,
        )

    def sweep(self) -> int:
        """Drop out-of-window samples and tokens left without samples.

        Returns the number of samples removed.
        """
        now = self._clock()
        cleaned_tokens = cleaned_records = 0
        with self._lock:
            for token in list(self._usage):
                samples = self._usage[token]
                valid = self._valid_samples(token, now)
                if not valid:
                    del self._usage[token]
                    cleaned_tokens += 1
                    cleaned_records += len(samples)
                elif len(valid) < len(samples):
                    self._usage[token] = valid
                    cleaned_records += len(samples) - len(valid)
        if cleaned_tokens or cleaned_records:
            logger.debug(
                "Rate limiter cleanup: %d tokens, %d records", cleaned_tokens, cleaned_records
            )
        return cleaned_records

    def _valid_samples(self, token: str, now: datetime) -> list[UsageSample]:
        cutoff = now - self._window
        return [sample for sample in self._usage.get(token, ()) if sample.timestamp > cutoff]

    def _check_locked(self, token: str, word_count: WordCount, now: datetime) -> RateLimitResult:
        samples = self._valid_samples(token, now)
        current_usage = sum(sample.word_count for sample in samples)
        if samples:
            reset_at = min(sample.timestamp for sample in samples) + self._window
        else:
            reset_at = now + self._window
        return RateLimitResult(
            allowed=word_count == 0 or current_usage + word_count <= self._limit,
            remaining_words=max(0, self._limit - current_usage),
            reset_at=reset_at,
            current_usage=current_usage,
            limit=self._limit,
            requested=word_count,
        )

    def _record_locked(self, token: str, word_count: WordCount, now: datetime) -> None:
        self._usage.setdefault(token, []).append(UsageSample(word_count=word_count, timestamp=now))


def _ensure_non_negative(word_count: WordCount) -> None:
    if isinstance(word_count, bool) or not isinstance(word_count, int) or word_count < 0:
        raise ValueError(f"Word count must be a non-negative integer, got {word_count!r}")
