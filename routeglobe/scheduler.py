"""
Sync scheduler for periodic route refreshes.
Fetches the latest route events, classifies them, restarts the blink
animation and moves the camera to the newest event.
"""

import asyncio
import time
from typing import Any, Dict, Optional

from routeglobe.animator import BlinkAnimator
from routeglobe.api_clients import FetchResult
from routeglobe.classifier import classify_batch
from routeglobe.focus import ViewFocusController
from routeglobe.models import VisualSet
from routeglobe.utils import format_clock, format_count, log


class SyncScheduler:
    """Drives refresh cycles on an asyncio event loop."""

    def __init__(
        self,
        fetcher: Any,
        animator: BlinkAnimator,
        focus: ViewFocusController,
        renderer: Any = None,
        board: Any = None,
        batch_size: int = 10,
        refresh_interval: float = 60,
        count_label: str = "Total routes planned: ",
        error_text: str = "Error loading route data",
    ):
        if refresh_interval <= 0:
            raise ValueError(
                f"refresh_interval must be positive, got {refresh_interval}"
            )
        self.fetcher = fetcher
        self.animator = animator
        self.focus = focus
        self.renderer = renderer
        self.board = board
        self.batch_size = batch_size
        self.refresh_interval = refresh_interval
        self.count_label = count_label
        self.error_text = error_text

        self.visual_set: Optional[VisualSet] = None
        self.generation = 0
        self.running = False
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.cycles_completed = 0
        self.cycles_skipped = 0
        self.last_cycle_at = 0.0
        self.last_success_at = 0.0
        self.last_total = 0
        self.last_error = ""
        self._cycle_task: Optional[asyncio.Task] = None

    async def run_cycle(self) -> bool:
        """
        Run one refresh cycle.

        Returns:
            True if the backend answered, False if the cycle failed
        """
        self.last_cycle_at = time.time()
        count_result, batch_result = await asyncio.gather(
            self.fetcher.get_total_count(),
            self.fetcher.fetch_latest(self.batch_size),
            return_exceptions=True,
        )
        count_result = self._as_result(count_result, 0)
        batch_result = self._as_result(batch_result, [])

        # Nothing below this point yields to the event loop
        error = count_result.error or batch_result.error
        if error is not None:
            self.last_error = str(error)
            log("SYNC", f"Refresh failed: {error}")
            if self.board is not None:
                self.board.set_error(self.error_text)
            return False

        total = count_result.value
        records = list(batch_result.value)
        self.last_error = ""
        self.last_total = total
        if self.board is not None:
            self.board.set_count(f"{self.count_label}{format_count(total)}")

        if not records:
            log("SYNC", f"No route events returned (total {total})")
            self._finish_cycle()
            return True

        self.generation += 1
        visual_set = classify_batch(records, generation=self.generation)
        self.visual_set = visual_set
        self.animator.start(visual_set)

        camera = self.focus.focus_request(records[0])
        if self.renderer is not None:
            self.renderer.point_of_view(
                camera.lat, camera.lng, camera.altitude, camera.transition_ms
            )

        if self.board is not None:
            self.board.set_last_update(f"Last updated: {format_clock()}")

        log(
            "SYNC",
            f"Route events fetched: {len(records)} Total: {total}",
        )
        self._finish_cycle()
        return True

    def refresh(self) -> Optional[asyncio.Task]:
        """Start a cycle unless one is already in flight."""
        if self._cycle_task is not None and not self._cycle_task.done():
            self.cycles_skipped += 1
            log("SYNC", "Previous refresh still in flight, skipping tick")
            return None
        self._cycle_task = asyncio.ensure_future(self._guarded_cycle())
        return self._cycle_task

    def force_refresh(self) -> asyncio.Task:
        """Start a cycle now, cancelling any cycle still in flight."""
        if self._cycle_task is not None and not self._cycle_task.done():
            log("SYNC", "Superseding in-flight refresh")
            self._cycle_task.cancel()
        self._cycle_task = asyncio.ensure_future(self._guarded_cycle())
        return self._cycle_task

    def request_refresh_threadsafe(self) -> bool:
        """Ask the scheduler loop to force a refresh from another thread."""
        if self.loop is None or not self.running:
            return False
        self.loop.call_soon_threadsafe(self.force_refresh)
        return True

    async def run_forever(self):
        """Refresh immediately, then every refresh interval until stopped."""
        self.loop = asyncio.get_running_loop()
        self.running = True
        log(
            "SYSTEM",
            f"Starting sync scheduler (every {self.refresh_interval}s, "
            f"batch of {self.batch_size})",
        )

        next_tick = self.loop.time()
        try:
            while self.running:
                self.refresh()
                next_tick += self.refresh_interval
                delay = next_tick - self.loop.time()
                if delay < 0:
                    # Skip ticks missed while the loop was busy
                    missed = int(-delay // self.refresh_interval) + 1
                    next_tick += missed * self.refresh_interval
                    delay = next_tick - self.loop.time()
                await asyncio.sleep(delay)
        finally:
            self._shutdown()

    def stop(self):
        """Stop the scheduler after the current sleep."""
        self.running = False

    def get_status(self) -> Dict[str, Any]:
        """Get scheduler status for UI display."""
        in_flight = (
            self._cycle_task is not None and not self._cycle_task.done()
        )
        return {
            "running": self.running,
            "in_flight": in_flight,
            "animation_state": self.animator.state.value,
            "generation": self.generation,
            "visual_count": len(self.visual_set) if self.visual_set else 0,
            "cycles_completed": self.cycles_completed,
            "cycles_skipped": self.cycles_skipped,
            "last_cycle_at": self.last_cycle_at,
            "last_success_at": self.last_success_at,
            "last_total": self.last_total,
            "last_error": self.last_error,
        }

    async def _guarded_cycle(self) -> bool:
        try:
            return await self.run_cycle()
        except asyncio.CancelledError:
            log("SYNC", "Refresh cancelled")
            raise
        except Exception as e:
            self.last_error = str(e)
            log("SYNC", f"Unexpected error during refresh: {e}")
            if self.board is not None:
                self.board.set_error(self.error_text)
            return False

    def _finish_cycle(self):
        self.cycles_completed += 1
        self.last_success_at = time.time()

    def _shutdown(self):
        self.running = False
        if self._cycle_task is not None and not self._cycle_task.done():
            self._cycle_task.cancel()
        self.animator.cancel()
        log("SYSTEM", "Sync scheduler stopped")

    @staticmethod
    def _as_result(outcome: Any, default: Any) -> FetchResult:
        if isinstance(outcome, FetchResult):
            return outcome
        if isinstance(outcome, BaseException):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            return FetchResult(default, outcome)
        return FetchResult(outcome)
