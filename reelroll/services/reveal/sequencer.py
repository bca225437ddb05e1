import asyncio
import inspect
import random
from collections.abc import Awaitable, Sequence
from enum import Enum

from loguru import logger

from reelroll.core.config import settings
from reelroll.core.exceptions import EmptyPoolError, ReconciliationMismatch
from reelroll.models.catalog import Pick, SelectionPool
from reelroll.services.reveal.motion import SpinPlan, plan_spin
from reelroll.services.reveal.surface import RevealSurface, SlotBox
from reelroll.services.selector import Selector

BELT_COPIES = 3


class RevealState(str, Enum):
    IDLE = "idle"
    SPINNING = "spinning"
    SETTLING = "settling"
    REVEALED = "revealed"


def slot_stride(slots: Sequence[SlotBox]) -> float:
    """Distance between consecutive slots, margins included."""
    if not slots:
        raise ValueError("Belt has no rendered slots")
    if len(slots) == 1:
        return slots[0].width
    return slots[1].left - slots[0].left


def closest_slot(slots: Sequence[SlotBox], viewport_width: float) -> int:
    """Index of the slot whose centre is nearest the viewport centre."""
    if not slots:
        raise ValueError("Belt has no rendered slots")
    middle = viewport_width / 2
    return min(range(len(slots)), key=lambda index: abs(slots[index].center - middle))


def reconcile_index(slots: Sequence[SlotBox], viewport_width: float, pool_len: int) -> int:
    """Pool index of the item the belt visibly stopped on."""
    return closest_slot(slots, viewport_width) % pool_len


class RevealSequencer:
    """
    Drives one belt through Idle -> Spinning -> Settling -> Revealed.

    The pick is fixed before the surface reports any layout. Measurement after
    the belt stops only confirms the landing; a disagreement is a defect and
    raises ReconciliationMismatch instead of revealing the measured item.

    Starting a new spin supersedes the one in flight. The superseded coroutine
    notices at its next suspension point and returns None.
    """

    def __init__(
        self,
        surface: RevealSurface,
        selector: Selector,
        rng: random.Random | None = None,
        min_duration_ms: float = settings.SPIN_MIN_DURATION_MS,
        max_duration_ms: float = settings.SPIN_MAX_DURATION_MS,
    ):
        self.surface = surface
        self.selector = selector
        self.rng = rng or random.Random()
        self.min_duration_ms = min_duration_ms
        self.max_duration_ms = max_duration_ms

        self.state = RevealState.IDLE
        self.plan: SpinPlan | None = None
        self.pick: Pick | None = None
        self._generation = 0

    def _reset(self) -> None:
        self.state = RevealState.IDLE
        self.plan = None
        self.pick = None

    def _superseded(self, generation: int) -> bool:
        return generation != self._generation

    def cancel(self) -> None:
        """Abandon any spin in flight and return to Idle."""
        self._generation += 1
        self._reset()

    async def spin(
        self,
        pool: SelectionPool | Awaitable[SelectionPool],
        pick: Pick | None = None,
    ) -> Pick | None:
        """
        Run one spin to completion.

        Args:
            pool: The candidates, or an awaitable that loads them.
            pick: A pick drawn elsewhere (e.g. by the server) from this same pool.
                  When omitted the sequencer draws one itself.

        Returns:
            The revealed pick, or None if a newer spin superseded this one.
        """
        self.cancel()
        generation = self._generation

        if inspect.isawaitable(pool):
            pool = await pool
            if self._superseded(generation):
                logger.debug("Discarding pool loaded for a superseded spin")
                return None

        if pool is None or len(pool) == 0:
            raise EmptyPoolError()
        if pick is None:
            pick = self.selector.draw(pool)
        elif not pick.matches(pool):
            raise ValueError(f"Pick {pick.item.id} is not at index {pick.pool_index} of this pool")

        try:
            return await self._run_spin(pool, pick, generation)
        except (Exception, asyncio.CancelledError):
            # A newer spin owns the state; only the current one falls back to Idle
            if not self._superseded(generation):
                self._reset()
            raise

    async def _run_spin(self, pool: SelectionPool, pick: Pick, generation: int) -> Pick | None:
        pool_len = len(pool)
        self.state = RevealState.SPINNING
        await self.surface.render_belt(pool.belt(BELT_COPIES))
        if self._superseded(generation):
            return None

        slots = await self.surface.measure_slots()
        if self._superseded(generation):
            return None
        viewport_width = self.surface.viewport_width

        now = await self.surface.next_frame()
        if self._superseded(generation):
            return None
        plan = plan_spin(
            pool_len,
            pick.pool_index,
            slot_stride(slots),
            viewport_width,
            now,
            self.rng,
            self.min_duration_ms,
            self.max_duration_ms,
        )
        self.plan = plan
        self.surface.set_offset(plan.start_offset)

        while True:
            now = await self.surface.next_frame()
            if self._superseded(generation):
                return None
            self.surface.set_offset(plan.offset_at(now))
            if plan.progress(now) >= 1.0:
                break

        self.state = RevealState.SETTLING
        slots = await self.surface.measure_slots()
        if self._superseded(generation):
            return None

        measured = reconcile_index(slots, viewport_width, pool_len)
        if measured != pick.pool_index:
            logger.error(
                f"Reveal defect: belt stopped on pool index {measured} ({pool[measured].title!r}) "
                f"but the pick was {pick.pool_index} ({pick.item.title!r}); "
                f"target offset {plan.target_offset:.1f}, viewport {viewport_width}"
            )
            self._reset()
            raise ReconciliationMismatch(pick.pool_index, measured)

        self.state = RevealState.REVEALED
        self.pick = pick
        self.plan = None
        logger.info(f"Revealed {pick.item.title!r} at pool index {pick.pool_index}/{pool_len}")
        return pick
