from .temporal import (
    ActionType,
    InteractionRequest,
    InteractionOutcome,
    InteractionController,
    ImportFeedback,
    ImportStatus,
    describe_import,
)

__all__ = [
    'ActionType',
    'InteractionRequest',
    'InteractionOutcome',
    'InteractionController',
    'ImportFeedback',
    'ImportStatus',
    'describe_import',
]
