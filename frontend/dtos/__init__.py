"""
Frontend DTO Package

Read-only, immutable Data Transfer Objects for view consumption.

VIEW BOUNDARY ENFORCEMENT:
==========================
1. All DTOs are frozen (immutable)
2. All DTOs are versioned
3. Views receive ONLY these types, never backend records
4. Missing data is EXPLICIT, never inferred
"""

from .core import (
    DTOVersion,
    CURRENT_DTO_VERSION,
    AvailabilityState,
    PlaybackState,
)
from .records import PartyValuesDTO, YearRecordDTO, TimelineControlDTO

__all__ = [
    # Enums
    'DTOVersion',
    'CURRENT_DTO_VERSION',
    'AvailabilityState',
    'PlaybackState',
    # Records
    'PartyValuesDTO',
    'YearRecordDTO',
    'TimelineControlDTO',
]
