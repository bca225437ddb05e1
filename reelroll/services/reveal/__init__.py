from .motion import SpinPlan, ease_out_cubic, plan_spin, target_offset
from .sequencer import RevealSequencer, RevealState, closest_slot, reconcile_index, slot_stride
from .surface import RevealSurface, SlotBox, VirtualBeltSurface

__all__ = [
    "RevealSequencer",
    "RevealState",
    "RevealSurface",
    "SlotBox",
    "SpinPlan",
    "VirtualBeltSurface",
    "closest_slot",
    "ease_out_cubic",
    "plan_spin",
    "reconcile_index",
    "slot_stride",
    "target_offset",
]
