import random
from dataclasses import dataclass

from reelroll.core.config import settings


def ease_out_cubic(fraction: float) -> float:
    """Cubic ease-out on [0, 1]. Never overshoots 1."""
    return 1 - (1 - fraction) ** 3


def target_offset(pool_len: int, pick_index: int, item_width: float, viewport_width: float) -> float:
    """
    Belt offset that centres the middle copy of ``pick_index`` in the viewport.

    >>> target_offset(5, 3, 320, 960)
    2240.0
    """
    return (pool_len + pick_index) * item_width + item_width / 2 - viewport_width / 2


@dataclass(frozen=True)
class SpinPlan:
    """Animation parameters for one spin. Offsets are in pixels, times in milliseconds."""

    start_offset: float
    target_offset: float
    duration_ms: float
    start_timestamp: float

    def progress(self, now: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.start_timestamp) / self.duration_ms))

    def offset_at(self, now: float) -> float:
        fraction = self.progress(now)
        if fraction >= 1.0:
            return self.target_offset
        return self.start_offset + (self.target_offset - self.start_offset) * ease_out_cubic(fraction)


def plan_spin(
    pool_len: int,
    pick_index: int,
    item_width: float,
    viewport_width: float,
    start_timestamp: float,
    rng: random.Random | None = None,
    min_duration_ms: float = settings.SPIN_MIN_DURATION_MS,
    max_duration_ms: float = settings.SPIN_MAX_DURATION_MS,
) -> SpinPlan:
    if pool_len < 1:
        raise ValueError("pool_len must be at least 1")
    if not 0 <= pick_index < pool_len:
        raise ValueError(f"pick_index {pick_index} outside pool of {pool_len}")
    if item_width <= 0:
        raise ValueError("item_width must be positive")
    if min_duration_ms > max_duration_ms:
        raise ValueError("min_duration_ms must not exceed max_duration_ms")

    rng = rng or random.Random()
    return SpinPlan(
        # Anywhere within the first copy; the landing spot is already fixed
        start_offset=rng.random() * pool_len * item_width,
        target_offset=target_offset(pool_len, pick_index, item_width, viewport_width),
        duration_ms=min_duration_ms + rng.random() * (max_duration_ms - min_duration_ms),
        start_timestamp=start_timestamp,
    )
