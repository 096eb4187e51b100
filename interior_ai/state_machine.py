"""
Application state machine.

All user-visible state lives in one immutable AppState. The only way to change
it is ``transition(state, event)``, which returns a new state. Remote results
carry the generation token they were started with; a result whose token no
longer matches ``state.generation`` belongs to a superseded upload (or to a
session that was reset) and is dropped.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from .models import AnalysisResult, UploadStatus, VisualizationStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppState:
    status: UploadStatus = UploadStatus.IDLE
    preview: Optional[Union[str, bytes]] = None
    image_data_url: Optional[str] = None
    media_type: str = "image/jpeg"
    result: Optional[AnalysisResult] = None
    error_message: Optional[str] = None
    visualization: VisualizationStatus = VisualizationStatus.NOT_STARTED
    generated_image: Optional[str] = None
    show_generated: bool = False
    generation: int = 0


# --- Events ---

@dataclass(frozen=True)
class ImageSelected:
    data_url: str
    preview: Union[str, bytes]
    media_type: str = "image/jpeg"


@dataclass(frozen=True)
class AnalysisSucceeded:
    token: int
    result: AnalysisResult
    start_visualization: bool = True


@dataclass(frozen=True)
class AnalysisFailed:
    token: int
    message: str


@dataclass(frozen=True)
class VisualizationSucceeded:
    token: int
    image_data_url: str


@dataclass(frozen=True)
class VisualizationFailed:
    token: int
    reason: str = ""


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class ToggleView:
    show_generated: bool


Event = Union[ImageSelected, AnalysisSucceeded, AnalysisFailed,
              VisualizationSucceeded, VisualizationFailed, Reset, ToggleView]


def is_stale(state: AppState, token: int) -> bool:
    return token != state.generation


def can_toggle_to_generated(state: AppState) -> bool:
    return state.status == UploadStatus.SUCCESS and state.generated_image is not None


def can_reset(state: AppState) -> bool:
    """The reset affordance is hidden while an analysis is running."""
    return state.status != UploadStatus.ANALYZING


def transition(state: AppState, event: Event) -> AppState:
    """Apply ``event`` to ``state``. Events that do not apply return ``state`` unchanged."""
    if isinstance(event, Reset):
        return AppState(generation=state.generation + 1)

    if isinstance(event, ImageSelected):
        if state.status == UploadStatus.ANALYZING:
            logger.info("Image selected while an analysis is running - ignored")
            return state
        return AppState(
            status=UploadStatus.ANALYZING,
            preview=event.preview,
            image_data_url=event.data_url,
            media_type=event.media_type,
            generation=state.generation + 1,
        )

    if isinstance(event, (AnalysisSucceeded, AnalysisFailed)):
        if is_stale(state, event.token) or state.status != UploadStatus.ANALYZING:
            logger.info(f"Dropping stale analysis result (token {event.token}, current {state.generation})")
            return state
        if isinstance(event, AnalysisFailed):
            return replace(state, status=UploadStatus.ERROR, error_message=event.message)
        return replace(
            state,
            status=UploadStatus.SUCCESS,
            result=event.result,
            error_message=None,
            visualization=(VisualizationStatus.IN_PROGRESS if event.start_visualization
                           else VisualizationStatus.NOT_STARTED),
        )

    if isinstance(event, (VisualizationSucceeded, VisualizationFailed)):
        if (is_stale(state, event.token) or state.status != UploadStatus.SUCCESS
                or state.visualization != VisualizationStatus.IN_PROGRESS):
            logger.info(f"Dropping stale visualization result (token {event.token}, current {state.generation})")
            return state
        if isinstance(event, VisualizationFailed):
            return replace(state, visualization=VisualizationStatus.FAILED, show_generated=False)
        # Auto-switch to the new image, even if the user picked "Original" meanwhile.
        return replace(
            state,
            visualization=VisualizationStatus.READY,
            generated_image=event.image_data_url,
            show_generated=True,
        )

    if isinstance(event, ToggleView):
        if state.status != UploadStatus.SUCCESS:
            return state
        if event.show_generated and not can_toggle_to_generated(state):
            return state
        return replace(state, show_generated=event.show_generated)

    raise TypeError(f"Unknown event: {event!r}")
