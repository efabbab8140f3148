"""
Format Adapters

Decode raw bytes of one import format into plain record dicts.

Adapters only DECODE. They never validate field types or build
YearRecords; that happens against the schema afterwards, so both
formats share one validation path.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union
import csv
import io
import json

from ..contracts.base import ErrorCode, ValidationError


class ImportFormat(Enum):
    """Accepted import formats."""
    TABULAR = "tabular"        # delimited text with a header row
    STRUCTURED = "structured"  # JSON array of record objects

    @classmethod
    def parse(cls, value: Union[ImportFormat, str]) -> ImportFormat:
        """Accept the enum, its value, or a file extension."""
        if isinstance(value, ImportFormat):
            return value
        key = str(value).strip().lower().lstrip('.')
        aliases = {
            'tabular': cls.TABULAR, 'csv': cls.TABULAR,
            'structured': cls.STRUCTURED, 'json': cls.STRUCTURED,
        }
        if key not in aliases:
            raise ValidationError(
                f"Unsupported import format: {value!r}",
                code=ErrorCode.UNSUPPORTED_FORMAT
            )
        return aliases[key]


SECTIONS: Tuple[str, ...] = ('population', 'casualties', 'prisoners', 'territory')

# Accepted column suffixes per party, after header normalization
PARTY_SUFFIXES: Dict[str, Tuple[str, ...]] = {
    'party_a': ('_party_a', '_partya'),
    'party_b': ('_party_b', '_partyb'),
}

TABULAR_HEADER: Tuple[str, ...] = ('year',) + tuple(
    f"{section}{suffixes[0]}"
    for section in SECTIONS
    for suffixes in PARTY_SUFFIXES.values()
)


def decode_text(raw: Union[bytes, str]) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return bytes(raw).decode('utf-8-sig')
    except UnicodeDecodeError as exc:
        raise ValidationError(
            f"File is not valid UTF-8 text: {exc.reason} at byte {exc.start}",
            code=ErrorCode.MALFORMED_PAYLOAD
        ) from None


class FormatAdapter(ABC):
    """Decoder for one import format."""

    @property
    @abstractmethod
    def format(self) -> ImportFormat:
        pass

    @abstractmethod
    def decode(self, raw: Union[bytes, str]) -> List[object]:
        """
        Turn raw input into a list of candidate records.

        Raises ValidationError when the payload itself is unreadable.
        """
        pass


class StructuredAdapter(FormatAdapter):
    """JSON array of nested record objects."""

    @property
    def format(self) -> ImportFormat:
        return ImportFormat.STRUCTURED

    def decode(self, raw: Union[bytes, str]) -> List[object]:
        text = decode_text(raw)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(
                f"Invalid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}",
                code=ErrorCode.MALFORMED_PAYLOAD
            ) from None

        if not isinstance(data, list):
            raise ValidationError(
                f"Expected a list of records, got {type(data).__name__}",
                code=ErrorCode.MALFORMED_PAYLOAD
            )
        return data


class TabularAdapter(FormatAdapter):
    """
    Delimited text with a header row.

    Columns map onto the nested record shape:
    population_party_a -> population.party_a, and so on.
    Empty cells count as missing. A section with no filled cells is
    omitted entirely.
    """

    def __init__(self, delimiter: Optional[str] = None):
        self._delimiter = delimiter

    @property
    def format(self) -> ImportFormat:
        return ImportFormat.TABULAR

    def decode(self, raw: Union[bytes, str]) -> List[object]:
        text = decode_text(raw)
        if not text.strip():
            return []

        delimiter = self._delimiter or self._sniff_delimiter(text)
        try:
            reader = csv.DictReader(io.StringIO(text, newline=''), delimiter=delimiter)
            columns = self._map_columns(reader.fieldnames or [])
            return [self._to_record(row, columns) for row in reader]
        except csv.Error as exc:
            raise ValidationError(
                f"Invalid delimited text: {exc}",
                code=ErrorCode.MALFORMED_PAYLOAD
            ) from None

    @staticmethod
    def _sniff_delimiter(text: str) -> str:
        header = text.splitlines()[0]
        for candidate in (',', ';', '\t'):
            if candidate in header:
                return candidate
        return ','

    @staticmethod
    def _normalize(name: str) -> str:
        return name.strip().lower().replace('-', '_').replace(' ', '_')

    def _map_columns(self, fieldnames: List[str]) -> Dict[str, Tuple[str, Optional[str]]]:
        """Original header name -> (section or 'year', party key or None)."""
        mapping: Dict[str, Tuple[str, Optional[str]]] = {}
        for name in fieldnames:
            if name is None:
                continue
            key = self._normalize(name)
            if key == 'year':
                mapping[name] = ('year', None)
                continue
            for section in SECTIONS:
                for party, suffixes in PARTY_SUFFIXES.items():
                    if any(key == section + suffix for suffix in suffixes):
                        mapping[name] = (section, party)
        return mapping

    def _to_record(self, row: Dict[str, object], columns: Dict[str, Tuple[str, Optional[str]]]) -> dict:
        record: dict = {}
        for name, (section, party) in columns.items():
            value = self._parse_cell(row.get(name))
            if value is None:
                continue
            if party is None:
                record['year'] = value
            else:
                record.setdefault(section, {})[party] = value
        return record

    @staticmethod
    def _parse_cell(cell: object) -> object:
        """Numeric text becomes int/float; anything else is passed through for the schema to reject."""
        if cell is None:
            return None
        text = str(cell).strip()
        if text == '':
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return text


ADAPTERS: Dict[ImportFormat, FormatAdapter] = {
    ImportFormat.TABULAR: TabularAdapter(),
    ImportFormat.STRUCTURED: StructuredAdapter(),
}
