"""
Interaction Contracts

Responsibility:
Define valid user actions and apply them to one dashboard engine.

USER-CONTROL PATH:
==================
Speeds coming from controls are CLAMPED into bounds, never rejected.
Every other invalid input becomes a rejected outcome; nothing raises
past this boundary.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union
import logging
import uuid

from backend.contracts.base import DashboardError, ErrorCode, utc_now
from backend.engine import DashboardEngine
from backend.ingestion.adapters import ImportFormat
from backend.ingestion.importer import ImportResult

from frontend.dtos import TimelineControlDTO
from frontend.mapper import DTOMapper

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Types of user interaction."""
    # Temporal
    SEEK_YEAR = "seek_year"
    PLAY = "play"
    PAUSE = "pause"
    TOGGLE_PLAYBACK = "toggle_playback"
    SPEED_UP = "speed_up"
    SLOW_DOWN = "slow_down"
    SET_SPEED = "set_speed"

    # Dataset
    RESET_DATASET = "reset_dataset"


@dataclass(frozen=True)
class InteractionRequest:
    """A specific user intent."""
    request_id: str
    action: ActionType
    payload: dict
    timestamp: datetime
    source_component: str

    @classmethod
    def create(cls, action: ActionType, source_component: str = "timeline", **payload) -> InteractionRequest:
        return cls(
            request_id=f"req_{uuid.uuid4().hex[:12]}",
            action=action,
            payload=dict(payload),
            timestamp=utc_now(),
            source_component=source_component,
        )


@dataclass(frozen=True)
class InteractionOutcome:
    """Result of applying one request. Rejections carry the reason."""
    request_id: str
    action: ActionType
    accepted: bool
    timeline: TimelineControlDTO
    message: Optional[str] = None
    error_code: Optional[str] = None


# =============================================================================
# IMPORT FEEDBACK
# =============================================================================

IMPORT_SUCCESS_MESSAGE = "Data imported successfully!"
UNSUPPORTED_FORMAT_MESSAGE = "Unsupported file format. Please upload CSV or JSON."
CSV_DATA_ERROR_MESSAGE = "Failed to parse CSV data. Please check the format."
CSV_FILE_ERROR_MESSAGE = "Failed to parse CSV file."
JSON_DATA_ERROR_MESSAGE = "Failed to parse JSON data. Please check the format."
SUPERSEDED_MESSAGE = "Import discarded: the dataset was changed while it was processed."


class ImportStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ImportFeedback:
    """What the upload form shows after a file was submitted."""
    status: ImportStatus
    message: str
    filename: str
    reasons: Tuple[str, ...] = field(default_factory=tuple)
    records: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status is ImportStatus.SUCCESS


def describe_import(result: ImportResult, filename: str) -> ImportFeedback:
    """Turn an ImportResult into the upload form's message."""
    if result.is_applied:
        return ImportFeedback(
            status=ImportStatus.SUCCESS,
            message=IMPORT_SUCCESS_MESSAGE,
            filename=filename,
            records=len(result.series),
        )
    if result.superseded:
        return ImportFeedback(status=ImportStatus.ERROR, message=SUPERSEDED_MESSAGE, filename=filename)

    error = result.error
    if error.code is ErrorCode.UNSUPPORTED_FORMAT:
        message = UNSUPPORTED_FORMAT_MESSAGE
    elif result.format is ImportFormat.TABULAR:
        message = CSV_FILE_ERROR_MESSAGE if error.code is ErrorCode.MALFORMED_PAYLOAD \
            else CSV_DATA_ERROR_MESSAGE
    else:
        message = JSON_DATA_ERROR_MESSAGE
    return ImportFeedback(
        status=ImportStatus.ERROR,
        message=message,
        filename=filename,
        reasons=result.reasons or (error.message,),
    )


# =============================================================================
# CONTROLLER
# =============================================================================

class InteractionController:
    """Applies user requests to one engine and reports outcomes."""

    def __init__(self, engine: DashboardEngine, mapper: Optional[DTOMapper] = None):
        self._engine = engine
        self._mapper = mapper or DTOMapper()

    def control_state(self) -> TimelineControlDTO:
        return self._mapper.map_timeline(
            self._engine.timeline.snapshot(), self._engine.config.timeline
        )

    def apply(self, request: InteractionRequest) -> InteractionOutcome:
        timeline = self._engine.timeline
        action = request.action
        try:
            if action is ActionType.SEEK_YEAR:
                timeline.set_year(self._required(request, 'year'))
            elif action is ActionType.PLAY:
                timeline.play()
            elif action is ActionType.PAUSE:
                timeline.pause()
            elif action is ActionType.TOGGLE_PLAYBACK:
                timeline.toggle_playback()
            elif action is ActionType.SPEED_UP:
                timeline.step_speed(1)
            elif action is ActionType.SLOW_DOWN:
                timeline.step_speed(-1)
            elif action is ActionType.SET_SPEED:
                timeline.adjust_speed(self._required(request, 'speed'))
            elif action is ActionType.RESET_DATASET:
                self._engine.reset_dataset()
            else:
                raise DashboardError(f"Unhandled action: {action}")
        except DashboardError as error:
            logger.debug("Rejected %s (%s): %s", action.value, request.request_id, error.message)
            return self._outcome(
                request, accepted=False, message=error.message,
                error_code=error.code.name if error.code else None
            )
        return self._outcome(request, accepted=True)

    async def submit_import(self, raw: Union[bytes, str], filename: str) -> ImportFeedback:
        """Import a dropped or selected file and describe the result."""
        result = await self._engine.import_named(raw, filename)
        feedback = describe_import(result, filename)
        logger.info("Import of %s: %s", filename, feedback.status.value)
        return feedback

    @staticmethod
    def _required(request: InteractionRequest, key: str) -> object:
        if key not in request.payload:
            raise DashboardError(f"{request.action.value} requires '{key}'", ErrorCode.MALFORMED_PAYLOAD)
        return request.payload[key]

    def _outcome(
        self,
        request: InteractionRequest,
        accepted: bool,
        message: Optional[str] = None,
        error_code: Optional[str] = None
    ) -> InteractionOutcome:
        return InteractionOutcome(
            request_id=request.request_id,
            action=request.action,
            accepted=accepted,
            timeline=self.control_state(),
            message=message,
            error_code=error_code,
        )
