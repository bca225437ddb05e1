import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from reelroll.models.catalog import CatalogItem


@dataclass(frozen=True)
class SlotBox:
    """Rendered bounding box of one belt slot, in viewport coordinates."""

    left: float
    width: float

    @property
    def center(self) -> float:
        return self.left + self.width / 2


class RevealSurface(ABC):
    """
    What the reveal sequencer needs from whatever draws the belt.

    Layout is asynchronous: slot boxes are only meaningful once
    ``measure_slots`` resolves after ``render_belt``.
    """

    @property
    @abstractmethod
    def viewport_width(self) -> float:
        """Width available to the belt."""

    @abstractmethod
    async def render_belt(self, items: Sequence[CatalogItem]) -> None:
        """Replace the belt contents with one slot per item."""

    @abstractmethod
    async def measure_slots(self) -> list[SlotBox]:
        """Bounding boxes of every slot at the current offset, after layout."""

    @abstractmethod
    async def next_frame(self) -> float:
        """Wait for the next frame and return its timestamp in milliseconds."""

    @abstractmethod
    def set_offset(self, offset: float) -> None:
        """Scroll the belt so that ``offset`` pixels have passed the viewport's left edge."""


class VirtualBeltSurface(RevealSurface):
    """
    Headless belt: fixed-width slots with a trailing margin, offsets snapped to
    device pixels the way a browser snaps transforms.

    With ``realtime=False`` the frame clock is virtual and advances by
    ``frame_interval_ms`` per frame without sleeping.
    """

    def __init__(
        self,
        slot_width: float = 300.0,
        slot_margin: float = 20.0,
        viewport_width: float = 960.0,
        frame_interval_ms: float = 1000 / 60,
        device_pixel_ratio: float = 1.0,
        realtime: bool = False,
    ):
        self.slot_width = slot_width
        self.slot_margin = slot_margin
        self._viewport_width = viewport_width
        self.frame_interval_ms = frame_interval_ms
        self.device_pixel_ratio = device_pixel_ratio
        self.realtime = realtime

        self.items: list[CatalogItem] = []
        self.offset = 0.0
        self.frames = 0
        self._clock_ms = 0.0

    @property
    def viewport_width(self) -> float:
        return self._viewport_width

    @property
    def rendered_offset(self) -> float:
        return round(self.offset * self.device_pixel_ratio) / self.device_pixel_ratio

    async def render_belt(self, items: Sequence[CatalogItem]) -> None:
        self.items = list(items)
        self.offset = 0.0
        await asyncio.sleep(0)

    async def measure_slots(self) -> list[SlotBox]:
        await asyncio.sleep(0)
        stride = self.slot_width + self.slot_margin
        shift = self.rendered_offset
        return [SlotBox(left=index * stride - shift, width=self.slot_width) for index in range(len(self.items))]

    async def next_frame(self) -> float:
        self.frames += 1
        if self.realtime:
            await asyncio.sleep(self.frame_interval_ms / 1000)
            return asyncio.get_running_loop().time() * 1000
        await asyncio.sleep(0)
        self._clock_ms += self.frame_interval_ms
        return self._clock_ms

    def set_offset(self, offset: float) -> None:
        self.offset = offset
