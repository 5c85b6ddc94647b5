"""
Execution Rate Limiter
======================

Per-agent sliding-window limits with escalating cooldowns.

On every check:
1. Refuse while a cooldown is active (remaining seconds in the message)
2. Prune timestamps older than one hour
3. Refuse and start a base cooldown if the trailing minute is full
4. Refuse and start a 5x cooldown if the trailing hour is full
5. Otherwise record the attempt and allow

State is keyed by agent id only: two users driving the same agent share
one budget. Calls for the same agent are not serialized, so concurrent
checks may admit slightly more than the configured limit.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable

from .constants import HOUR_WINDOW_SECONDS, HOURLY_COOLDOWN_MULTIPLIER, MINUTE_WINDOW_SECONDS
from .models import RateLimitConfig, SeverityLevel, ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    """Execution history for one agent (clock seconds)."""

    timestamps: list[float] = field(default_factory=list)
    blocked_until: float = 0.0


class RateLimiter:
    """
    Sliding-window rate limiter with an injected clock.

    Args:
        config: Limits and base cooldown
        clock: Monotonic clock returning seconds (time.monotonic by default)

    Example:
        limiter = RateLimiter(RateLimitConfig(max_executions_per_minute=5))
        result = limiter.check("agent-1")
        if not result.allowed:
            print(result.reason)
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or RateLimitConfig()
        self._clock = clock or time.monotonic
        self._entries: dict[str, RateLimitEntry] = {}

    def check(self, agent_id: str) -> ValidationResult:
        """
        Check (and on success record) one execution for ``agent_id``.

        Args:
            agent_id: Agent requesting an execution

        Returns:
            ValidationResult, allowed=False with MEDIUM severity on refusal
        """
        now = self._clock()
        entry = self._entries.setdefault(agent_id, RateLimitEntry())

        if entry.blocked_until > now:
            remaining = math.ceil(entry.blocked_until - now)
            return ValidationResult.block(
                reason=f"Rate limit active: wait {remaining}s before running another command",
                severity=SeverityLevel.MEDIUM,
            )

        hour_ago = now - HOUR_WINDOW_SECONDS
        entry.timestamps = [t for t in entry.timestamps if t > hour_ago]

        minute_ago = now - MINUTE_WINDOW_SECONDS
        recent = sum(1 for t in entry.timestamps if t > minute_ago)
        if recent >= self.config.max_executions_per_minute:
            entry.blocked_until = now + self.config.cooldown_after_block_seconds
            logger.warning(
                f"Agent {agent_id} hit {self.config.max_executions_per_minute} "
                f"executions/minute, cooling down "
                f"{self.config.cooldown_after_block_seconds:g}s"
            )
            return ValidationResult.block(
                reason=(
                    f"Rate limit: {self.config.max_executions_per_minute} executions "
                    f"per minute reached. Wait a minute."
                ),
                severity=SeverityLevel.MEDIUM,
            )

        if len(entry.timestamps) >= self.config.max_executions_per_hour:
            cooldown = self.config.cooldown_after_block_seconds * HOURLY_COOLDOWN_MULTIPLIER
            entry.blocked_until = now + cooldown
            logger.warning(
                f"Agent {agent_id} hit {self.config.max_executions_per_hour} "
                f"executions/hour, cooling down {cooldown:g}s"
            )
            return ValidationResult.block(
                reason=(
                    f"Rate limit: {self.config.max_executions_per_hour} executions "
                    f"per hour reached."
                ),
                severity=SeverityLevel.MEDIUM,
            )

        entry.timestamps.append(now)
        return ValidationResult.allow()

    def usage(self, agent_id: str) -> dict[str, float | int]:
        """
        Current counters for an agent, without recording anything.

        Returns:
            Dict with last_minute, last_hour and cooldown_remaining (seconds)
        """
        now = self._clock()
        entry = self._entries.get(agent_id)
        if entry is None:
            return {"last_minute": 0, "last_hour": 0, "cooldown_remaining": 0.0}

        return {
            "last_minute": sum(1 for t in entry.timestamps if t > now - MINUTE_WINDOW_SECONDS),
            "last_hour": sum(1 for t in entry.timestamps if t > now - HOUR_WINDOW_SECONDS),
            "cooldown_remaining": max(0.0, entry.blocked_until - now),
        }

    def reset(self, agent_id: str | None = None) -> None:
        """Forget one agent's history, or every agent's when None."""
        if agent_id is None:
            self._entries.clear()
        else:
            self._entries.pop(agent_id, None)
