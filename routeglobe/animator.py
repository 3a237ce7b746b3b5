"""
Blink-then-settle animation over the current visual set.
"""

import asyncio
import enum
from typing import Any, Optional

from routeglobe.models import VisualSet
from routeglobe.utils import log


class AnimationState(enum.Enum):
    IDLE = "idle"
    BLINKING = "blinking"
    SETTLED = "settled"


class BlinkAnimator:
    """
    Toggle visibility of a visual set until it settles.

    The animator owns the visual set it is animating and the two timer
    handles driving it. Starting a new set always cancels both timers
    before the new set is installed, and every timer callback is bound to
    the generation it was scheduled for, so a callback can never touch a
    set it does not belong to.
    """

    def __init__(
        self,
        renderer: Any = None,
        blink_interval: float = 1.5,
        settle_duration: float = 65,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize the animator.

        Args:
            renderer: Render surface receiving arcs and points (optional)
            blink_interval: Seconds between visibility toggles
            settle_duration: Seconds from blink start until settlement
            loop: Event loop used for timers (defaults to running loop)
        """
        self.renderer = renderer
        self.blink_interval = blink_interval
        self.settle_duration = settle_duration
        self._loop = loop
        self.state = AnimationState.IDLE
        self.visual_set: Optional[VisualSet] = None
        self._blink_handle: Optional[asyncio.TimerHandle] = None
        self._settle_handle: Optional[asyncio.TimerHandle] = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def active_timers(self) -> int:
        """Number of timers currently scheduled."""
        return sum(
            1
            for handle in (self._blink_handle, self._settle_handle)
            if handle is not None and not handle.cancelled()
        )

    def start(self, visual_set: VisualSet):
        """Install a new visual set and start blinking it."""
        blinking = self.state == AnimationState.BLINKING
        if blinking and self.visual_set is not None:
            # Release the superseded set in its settled form
            self.visual_set.set_visible(True)
        self._cancel_timers()

        self.visual_set = visual_set
        visual_set.set_visible(True)
        self.state = AnimationState.BLINKING
        self._push()

        generation = visual_set.generation
        self._blink_handle = self.loop.call_later(
            self.blink_interval, self._on_blink, generation
        )
        self._settle_handle = self.loop.call_later(
            self.settle_duration, self._on_settle, generation
        )
        log(
            "ANIM",
            f"Blinking {len(visual_set)} visuals "
            f"(generation {generation}, settle in {self.settle_duration}s)",
        )

    def tick(self):
        """Toggle every visual and schedule the next toggle."""
        if self.state != AnimationState.BLINKING or self.visual_set is None:
            return
        # At most one blink timer may be pending
        if self._blink_handle is not None:
            self._blink_handle.cancel()
            self._blink_handle = None
        self.visual_set.toggle()
        self._push()
        self._blink_handle = self.loop.call_later(
            self.blink_interval, self._on_blink, self.visual_set.generation
        )

    def settle(self):
        """Stop blinking and force every visual visible."""
        self._cancel_timers()
        if self.visual_set is None:
            return
        settled = self.state == AnimationState.SETTLED
        if settled and self.visual_set.all_visible():
            return
        self.visual_set.set_visible(True)
        self.state = AnimationState.SETTLED
        self._push()
        log("ANIM", f"Settled generation {self.visual_set.generation}")

    def cancel(self):
        """Stop both timers and leave visibility as it is."""
        self._cancel_timers()
        self.state = AnimationState.IDLE

    def _on_blink(self, generation: int):
        if self._owns(generation):
            self._blink_handle = None
            self.tick()

    def _on_settle(self, generation: int):
        if self._owns(generation):
            self._settle_handle = None
            self.settle()

    def _owns(self, generation: int) -> bool:
        return (
            self.visual_set is not None
            and self.visual_set.generation == generation
        )

    def _cancel_timers(self):
        if self._blink_handle is not None:
            self._blink_handle.cancel()
            self._blink_handle = None
        if self._settle_handle is not None:
            self._settle_handle.cancel()
            self._settle_handle = None

    def _push(self):
        if self.renderer is None or self.visual_set is None:
            return
        self.renderer.set_arcs(self.visual_set.arcs)
        self.renderer.set_points(self.visual_set.points)
