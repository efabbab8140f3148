"""
Ingestion Layer

RESPONSIBILITY: Turn user-supplied files into validated Series
ALLOWED INPUTS: Raw bytes/text plus a declared format (or file name)
OUTPUTS: ImportResult (Valid series or Invalid reasons)

WHAT THIS LAYER MUST NOT DO:
============================
- Activate the imported series (dataset layer's job)
- Accept a partially valid file
- Check anything beyond record shape (completeness, plausibility)
- Raise past the import boundary for bad input
"""

from .adapters import (
    ImportFormat, FormatAdapter, TabularAdapter, StructuredAdapter,
    TABULAR_HEADER, SECTIONS,
)
from .schema import PartyValuesModel, YearRecordModel
from .importer import DatasetImporter, ImportResult, detect_format

__all__ = [
    'ImportFormat', 'FormatAdapter', 'TabularAdapter', 'StructuredAdapter',
    'TABULAR_HEADER', 'SECTIONS',
    'PartyValuesModel', 'YearRecordModel',
    'DatasetImporter', 'ImportResult', 'detect_format',
]
