"""
Import Schema

Explicit shape check for one imported record.

REQUIRED:
=========
- year: numeric and a whole number
- population.party_a, population.party_b: numeric

OPTIONAL (but two numeric fields each when present):
====================================================
- casualties, territory, prisoners

Booleans, strings and non-finite numbers are never numeric.
"""

from __future__ import annotations
from typing import Annotated, Optional, Union
import math

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from ..contracts.records import PartyValues, YearRecord


def _require_number(value: object) -> object:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("expected a finite number")
    return value


Numeric = Annotated[Union[int, float], BeforeValidator(_require_number)]


class PartyValuesModel(BaseModel):
    """Two numeric fields, one per party."""
    model_config = ConfigDict(extra='ignore', frozen=True)

    party_a: Numeric = Field(validation_alias=AliasChoices('party_a', 'partyA'))
    party_b: Numeric = Field(validation_alias=AliasChoices('party_b', 'partyB'))

    def to_values(self) -> PartyValues:
        return PartyValues(party_a=self.party_a, party_b=self.party_b)


class YearRecordModel(BaseModel):
    """One imported yearly record."""
    model_config = ConfigDict(extra='ignore', frozen=True)

    year: Numeric
    population: PartyValuesModel
    casualties: Optional[PartyValuesModel] = None
    territory: Optional[PartyValuesModel] = None
    prisoners: Optional[PartyValuesModel] = None

    @field_validator('year')
    @classmethod
    def _whole_year(cls, value: Union[int, float]) -> int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"year must be a whole number, got {value}")
        return int(value)

    def to_record(self) -> YearRecord:
        return YearRecord(
            year=self.year,
            population=self.population.to_values(),
            casualties=self.casualties.to_values() if self.casualties else None,
            territory=self.territory.to_values() if self.territory else None,
            prisoners=self.prisoners.to_values() if self.prisoners else None,
        )
