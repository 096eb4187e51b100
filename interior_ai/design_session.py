"""
Design Session - drives one user's upload -> analysis -> redesign flow.

Remote calls run on a small thread pool so the page stays responsive. Their
results are never written to the state from the worker threads: ``poll()``
(called from the Streamlit script thread) collects finished calls and feeds
them through ``transition()``, which drops anything from a superseded
generation.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, Future, wait as wait_futures
from dataclasses import dataclass
from typing import Callable, List, Optional

from .analysis_client import analyze_interior_image, ANALYSIS_FAILED_MESSAGE
from .config import ENABLE_VISUALIZATION
from .errors import AnalysisError
from .image_ingestion import IngestedImage
from .models import UploadStatus, VisualizationStatus
from .session_tracker import SessionTracker
from .state_machine import (
    AppState, Event, transition,
    ImageSelected, AnalysisSucceeded, AnalysisFailed,
    VisualizationSucceeded, VisualizationFailed, Reset, ToggleView,
)
from .visualization_client import generate_room_visualization

logger = logging.getLogger(__name__)

ANALYSIS = "analysis"
VISUALIZATION = "visualization"


@dataclass
class _PendingCall:
    kind: str
    token: int
    future: Future


class DesignSession:
    """Owns the AppState of one browser session."""

    def __init__(self,
                 analyze: Callable = analyze_interior_image,
                 visualize: Callable = generate_room_visualization,
                 tracker: Optional[SessionTracker] = None,
                 enable_visualization: bool = ENABLE_VISUALIZATION,
                 max_workers: int = 2):
        self.state = AppState()
        self._analyze = analyze
        self._visualize = visualize
        self.tracker = tracker
        self.enable_visualization = enable_visualization
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="interior-ai")
        self._pending: List[_PendingCall] = []

    # --- state access ---

    @property
    def status(self) -> UploadStatus:
        return self.state.status

    @property
    def is_busy(self) -> bool:
        """True while a call for the current generation is outstanding."""
        return any(call.token == self.state.generation for call in self._pending)

    @property
    def executor(self) -> ThreadPoolExecutor:
        return self._executor

    def dispatch(self, event: Event) -> AppState:
        self.state = transition(self.state, event)
        return self.state

    def _track(self, kind: str, **details):
        if self.tracker is not None:
            self.tracker.track_event(kind, **details)

    # --- user actions ---

    def select_image(self, image: IngestedImage) -> bool:
        """Start analysing ``image``. Returns False if the event was ignored."""
        before = self.state
        self.dispatch(ImageSelected(data_url=image.data_url, preview=image.preview, media_type=image.media_type))
        if self.state is before:
            return False

        self._track('analyses_started', source=image.source)
        self._submit(ANALYSIS, self._analyze, self.state.image_data_url, self.state.media_type)
        return True

    def reset(self) -> AppState:
        return self.dispatch(Reset())

    def toggle_view(self, show_generated: bool) -> AppState:
        return self.dispatch(ToggleView(show_generated=show_generated))

    # --- remote call plumbing ---

    def _submit(self, kind: str, fn: Callable, *args):
        token = self.state.generation
        future = self._executor.submit(fn, *args)
        self._pending.append(_PendingCall(kind=kind, token=token, future=future))
        logger.info(f"Started {kind} call (generation {token})")

    def poll(self) -> AppState:
        """Apply every finished remote call to the state."""
        still_pending = []
        finished = []
        for call in self._pending:
            (finished if call.future.done() else still_pending).append(call)
        self._pending = still_pending

        for call in finished:
            if call.kind == ANALYSIS:
                self._apply_analysis(call)
            else:
                self._apply_visualization(call)
        return self.state

    def _apply(self, event: Event) -> bool:
        before = self.state
        self.dispatch(event)
        if self.state is before:
            self._track('stale_results_dropped', event=type(event).__name__)
            return False
        return True

    def _apply_analysis(self, call: _PendingCall):
        try:
            result = call.future.result()
        except AnalysisError as e:
            if self._apply(AnalysisFailed(token=call.token, message=str(e))):
                self._track('analyses_failed')
            return
        except Exception as e:
            logger.error(f"Unexpected analysis failure: {e}", exc_info=True)
            if self._apply(AnalysisFailed(token=call.token, message=ANALYSIS_FAILED_MESSAGE)):
                self._track('analyses_failed')
            return

        applied = self._apply(AnalysisSucceeded(token=call.token, result=result,
                                                start_visualization=self.enable_visualization))
        if not applied:
            return
        self._track('analyses_succeeded', style=result.design_style, items=len(result.shopping_list))

        if self.state.visualization == VisualizationStatus.IN_PROGRESS:
            self._submit(VISUALIZATION, self._visualize, self.state.image_data_url,
                         result.design_style, result.item_names, self.state.media_type)

    def _apply_visualization(self, call: _PendingCall):
        try:
            image = call.future.result()
        except Exception as e:
            # Never shown to the user; the toggle simply stays on the original.
            logger.warning(f"Visualization failed (generation {call.token}): {e}")
            if self._apply(VisualizationFailed(token=call.token, reason=str(e))):
                self._track('visualizations_failed', reason=str(e))
            return

        if self._apply(VisualizationSucceeded(token=call.token, image_data_url=image)):
            self._track('visualizations_succeeded')

    def wait(self, timeout: Optional[float] = None) -> AppState:
        """Block until no remote call is outstanding, stale ones included (or ``timeout`` passes)."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while self._pending:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            wait_futures([call.future for call in self._pending], timeout=remaining)
            self.poll()
            if deadline is not None and time.monotonic() >= deadline:
                break
        return self.state

    def shutdown(self):
        self._executor.shutdown(wait=False)
