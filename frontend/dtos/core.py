"""
Core DTO Types

Foundational enums and version types for all DTOs.

VERSIONING REQUIREMENT:
=======================
Every DTO includes a version field.
Views MUST fail fast on unknown versions.
"""

from __future__ import annotations
from enum import Enum
from typing import Final


# =============================================================================
# VERSION CONSTANTS
# =============================================================================

class DTOVersion(Enum):
    """
    DTO schema versions.

    Views MUST reject unknown versions.
    """
    V1 = "v1"

    @classmethod
    def current(cls) -> 'DTOVersion':
        return cls.V1


CURRENT_DTO_VERSION: Final[DTOVersion] = DTOVersion.V1


# =============================================================================
# AVAILABILITY STATES (Explicit Absence)
# =============================================================================

class AvailabilityState(Enum):
    """
    Availability of a piece of data.

    EXPLICIT ABSENCE:
    =================
    Missing data MUST be flagged, never guessed. Views render MISSING as
    "no data" and LOADING as a placeholder.
    """
    PRESENT = "present"     # Data is available
    MISSING = "missing"     # Year or section not in the active series
    LOADING = "loading"     # Default dataset not generated yet


# =============================================================================
# PLAYBACK STATES
# =============================================================================

class PlaybackState(Enum):
    """Which control the play/pause button shows."""
    PLAYING = "playing"
    PAUSED = "paused"
