"""
Dataset Importer

Parses an external file into a Series, all or nothing.

IMPORT CONTRACT:
================
- Returns an ImportResult: Valid(series) or Invalid(reasons)
- Never raises past this boundary for bad input
- One failing record fails the whole import
- Every failing record is reported, not just the first
- The accepted series is sorted by year; gaps are allowed
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import PurePath
from typing import List, Optional, Tuple, Union
import logging

from pydantic import ValidationError as SchemaError

from ..contracts.base import ErrorCode, ValidationError
from ..contracts.events import AuditEventType
from ..contracts.records import Series, YearRecord
from ..observability import AuditLog, MetricsCollector
from .adapters import ADAPTERS, ImportFormat
from .schema import YearRecordModel

logger = logging.getLogger(__name__)

MAX_REPORTED_REASONS = 50


@dataclass(frozen=True)
class ImportResult:
    """
    Tagged import outcome.

    Either contains a series OR an error, never both.
    """
    series: Optional[Series] = None
    error: Optional[ValidationError] = None
    format: Optional[ImportFormat] = None
    superseded: bool = False  # valid, but a newer dataset request won

    @property
    def is_valid(self) -> bool:
        return self.error is None

    @property
    def is_applied(self) -> bool:
        return self.is_valid and not self.superseded

    @property
    def reasons(self) -> Tuple[str, ...]:
        return self.error.reasons if self.error else ()

    @staticmethod
    def valid(series: Series, fmt: ImportFormat) -> ImportResult:
        return ImportResult(series=series, error=None, format=fmt)

    @staticmethod
    def invalid(error: ValidationError, fmt: Optional[ImportFormat] = None) -> ImportResult:
        return ImportResult(series=None, error=error, format=fmt)

    def unwrap(self) -> Series:
        """Return the series or raise the ValidationError."""
        if self.error is not None:
            raise self.error
        return self.series


def detect_format(filename: str) -> ImportFormat:
    """Map a file name to its format by extension (.csv / .json)."""
    suffix = PurePath(filename).suffix
    if not suffix:
        raise ValidationError(
            f"Cannot determine format of {filename!r}: no file extension",
            code=ErrorCode.UNSUPPORTED_FORMAT
        )
    return ImportFormat.parse(suffix)


def _format_location(loc: Tuple[Union[str, int], ...]) -> str:
    return '.'.join(str(part) for part in loc) or 'record'


class DatasetImporter:
    """
    Validating importer for tabular and structured files.

    The importer holds no dataset state; activating an accepted series is
    the dataset provider's job.
    """

    def __init__(
        self,
        audit: Optional[AuditLog] = None,
        metrics: Optional[MetricsCollector] = None,
        max_reasons: int = MAX_REPORTED_REASONS
    ):
        self._audit = audit
        self._metrics = metrics
        self._max_reasons = max_reasons

    def import_bytes(
        self,
        raw: Union[bytes, str],
        declared_format: Union[ImportFormat, str]
    ) -> ImportResult:
        """Decode, validate and build a Series."""
        fmt: Optional[ImportFormat] = None
        try:
            fmt = ImportFormat.parse(declared_format)
            candidates = ADAPTERS[fmt].decode(raw)
            series = self._validate(candidates)
        except ValidationError as error:
            return self._rejected(error, fmt)

        logger.info("Accepted %s import with %d records", fmt.value, len(series))
        if self._metrics:
            self._metrics.increment("imports_accepted_total", labels={"format": fmt.value})
        if self._audit:
            self._audit.record(
                AuditEventType.IMPORT, "import_accepted",
                layer="ingestion", format=fmt.value, records=len(series),
                contiguous=series.is_contiguous
            )
        return ImportResult.valid(series, fmt)

    def import_named(self, raw: Union[bytes, str], filename: str) -> ImportResult:
        """Import using the file extension to pick the format."""
        try:
            fmt = detect_format(filename)
        except ValidationError as error:
            return self._rejected(error, None)
        return self.import_bytes(raw, fmt)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def _validate(self, candidates: List[object]) -> Series:
        if not candidates:
            raise ValidationError("Dataset contains no records", code=ErrorCode.EMPTY_DATASET)

        reasons: List[str] = []
        records: List[YearRecord] = []
        seen_years = {}
        duplicates = 0

        for index, candidate in enumerate(candidates):
            try:
                model = YearRecordModel.model_validate(candidate)
            except SchemaError as exc:
                for detail in exc.errors():
                    reasons.append(
                        f"record {index}: {_format_location(detail['loc'])}: {detail['msg']}"
                    )
                continue

            record = model.to_record()
            if record.year in seen_years:
                reasons.append(
                    f"record {index}: year {record.year} duplicates record {seen_years[record.year]}"
                )
                duplicates += 1
                continue
            seen_years[record.year] = index
            records.append(record)

        if reasons:
            code = ErrorCode.DUPLICATE_YEAR if duplicates == len(reasons) else ErrorCode.SCHEMA_VIOLATION
            shown = reasons[:self._max_reasons]
            if len(reasons) > self._max_reasons:
                shown.append(f"... and {len(reasons) - self._max_reasons} more")
            raise ValidationError(
                f"{len(reasons)} problem(s) found in {len(candidates)} record(s)",
                reasons=tuple(shown),
                code=code
            )

        return Series.of(records)

    def _rejected(self, error: ValidationError, fmt: Optional[ImportFormat]) -> ImportResult:
        logger.warning("Rejected import: %s", error.message)
        label = fmt.value if fmt else "unknown"
        if self._metrics:
            self._metrics.increment("imports_rejected_total", labels={"format": label})
        if self._audit:
            self._audit.record(
                AuditEventType.IMPORT, "import_rejected",
                layer="ingestion", error=error.to_error(),
                format=label, reasons=len(error.reasons)
            )
        return ImportResult.invalid(error, fmt)
