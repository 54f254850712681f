"""
Bounded external probes.

Every network read made while drafting (balance, pending rewards, gas)
goes through ``probe``: the call races a fixed timeout and comes back
either with a value or degraded. Probes never raise.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ProbeResult(Generic[T]):
    value: Optional[T] = None
    degraded: bool = False
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.degraded

    @classmethod
    def success(cls, value: T) -> "ProbeResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> "ProbeResult[Any]":
        return cls(degraded=True, reason=reason)


async def probe(
    name: str,
    call: Callable[[], Awaitable[T]],
    timeout_seconds: float,
) -> ProbeResult[T]:
    """Run ``call`` bounded by ``timeout_seconds``."""

    try:
        value = await asyncio.wait_for(call(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %ss", name, timeout_seconds)
        return ProbeResult.failure(f"{name} timed out after {timeout_seconds}s")
    except Exception as exc:  # noqa: BLE001
        logger.warning("%s failed: %s", name, exc, exc_info=True)
        return ProbeResult.failure(f"{name} failed: {exc}")
    return ProbeResult.success(value)


__all__ = ["ProbeResult", "probe"]
