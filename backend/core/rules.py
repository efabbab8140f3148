"""
Era Rule Table

Historical-event rules from which the default series is derived.

RULE SEMANTICS:
===============
- Rules are totally ordered by threshold year (strictly increasing)
- For a given year, every rule with threshold <= year applies, in order
- Later rules override earlier ones field by field
- Fields not named by any applicable rule keep their EraState default

The values are illustrative, not historical data.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import FrozenSet, Iterable, Mapping, Tuple

from ..contracts.base import ConfigurationError, ErrorCode
from ..contracts.records import Number, PartyValues


# =============================================================================
# ERA STATE
# =============================================================================

@dataclass(frozen=True)
class EraState:
    """Cumulative field values in force for one year."""
    population_growth_a: int = 0
    population_growth_b: int = 0
    territory_a: int = 50
    prisoners_base_a: int = 0
    prisoners_jitter_a: int = 0
    prisoners_base_b: int = 0
    prisoners_jitter_b: int = 0

    @property
    def territory(self) -> PartyValues:
        # party_b is always the complement, never sampled
        return PartyValues(party_a=self.territory_a, party_b=100 - self.territory_a)

    def apply(self, rule: EraRule) -> EraState:
        return replace(self, **dict(rule.updates))


ERA_FIELDS: FrozenSet[str] = frozenset(f.name for f in fields(EraState))


@dataclass(frozen=True)
class EraRule:
    """A threshold year and the field values active from that year onward."""
    threshold_year: int
    updates: Tuple[Tuple[str, Number], ...]
    label: str = ""

    @classmethod
    def of(cls, threshold_year: int, label: str = "", **updates: Number) -> EraRule:
        return cls(
            threshold_year=threshold_year,
            updates=tuple(sorted(updates.items())),
            label=label,
        )

    def as_dict(self) -> Mapping[str, Number]:
        return dict(self.updates)


# =============================================================================
# CASUALTY PROFILE
# =============================================================================

@dataclass(frozen=True)
class SampleRange:
    """Integer sample drawn as base + uniform [0, spread)."""
    base: int
    spread: int

    def __post_init__(self):
        if self.base < 0 or self.spread < 0:
            raise ConfigurationError(
                f"Sample range must be non-negative, got {self.base}+[0,{self.spread})",
                ErrorCode.INVALID_ERA_RULE
            )


@dataclass(frozen=True)
class GeneratorProfile:
    """Constants that are not year dependent."""
    base_population: PartyValues
    baseline_casualties_a: SampleRange
    baseline_casualties_b: SampleRange
    conflict_casualties_a: SampleRange
    conflict_casualties_b: SampleRange
    conflict_years: FrozenSet[int] = field(default_factory=frozenset)

    def is_conflict_year(self, year: int) -> bool:
        return year in self.conflict_years


CONFLICT_YEARS: FrozenSet[int] = frozenset({
    1948, 1956, 1967, 1973, 1982, 1987, 2000, 2006, 2008, 2014, 2021, 2023,
})

DEFAULT_PROFILE = GeneratorProfile(
    base_population=PartyValues(party_a=1_500_000, party_b=800_000),
    baseline_casualties_a=SampleRange(base=50, spread=100),
    baseline_casualties_b=SampleRange(base=10, spread=30),
    conflict_casualties_a=SampleRange(base=1000, spread=2000),
    conflict_casualties_b=SampleRange(base=200, spread=500),
    conflict_years=CONFLICT_YEARS,
)

DEFAULT_ERA_RULES: Tuple[EraRule, ...] = (
    EraRule.of(
        1948, "partition and aftermath",
        population_growth_a=100_000, population_growth_b=150_000,
        territory_a=45,
        prisoners_base_a=2000, prisoners_jitter_a=0,
        prisoners_base_b=20, prisoners_jitter_b=0,
    ),
    EraRule.of(
        1967, "six-day war",
        population_growth_a=110_000, territory_a=22,
        prisoners_base_a=4000, prisoners_jitter_a=2000,
    ),
    EraRule.of(
        1987, "first intifada",
        population_growth_a=120_000,
        prisoners_base_a=8000, prisoners_jitter_a=3000,
    ),
    EraRule.of(1990, "immigration wave", population_growth_b=180_000),
    EraRule.of(1994, "oslo accords", territory_a=25),
    EraRule.of(
        2000, "second intifada",
        population_growth_a=125_000,
        prisoners_base_a=7000, prisoners_jitter_a=3000,
    ),
    EraRule.of(
        2005, "disengagement",
        population_growth_a=130_000, population_growth_b=160_000,
    ),
    EraRule.of(2006, "", prisoners_base_b=10, prisoners_jitter_b=15),
)


# =============================================================================
# VALIDATION
# =============================================================================

def validate_era_rules(rules: Iterable[EraRule]) -> Tuple[EraRule, ...]:
    """
    Check ordering and field values of a rule table.

    Raises ConfigurationError on the first problem found.
    """
    checked = tuple(rules)
    previous = None
    for rule in checked:
        threshold = rule.threshold_year
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise ConfigurationError(
                f"Rule threshold must be an integer year, got {threshold!r}",
                ErrorCode.INVALID_ERA_RULE
            )
        if previous is not None and threshold <= previous:
            raise ConfigurationError(
                f"Rule thresholds must be strictly increasing: {threshold} after {previous}",
                ErrorCode.INVALID_ERA_RULE
            )
        previous = threshold

        for name, value in rule.updates:
            if name not in ERA_FIELDS:
                raise ConfigurationError(
                    f"Rule {threshold} names unknown field {name!r}",
                    ErrorCode.INVALID_ERA_RULE
                )
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(
                    f"Rule {threshold} field {name} must be a non-negative integer, got {value!r}",
                    ErrorCode.INVALID_ERA_RULE
                )
            if name == 'territory_a' and value > 100:
                raise ConfigurationError(
                    f"Rule {threshold} territory share {value} exceeds 100",
                    ErrorCode.INVALID_ERA_RULE
                )
    return checked


def era_state_for(year: int, rules: Iterable[EraRule], initial: EraState = EraState()) -> EraState:
    """Fold every rule with threshold <= year over the initial state."""
    state = initial
    for rule in rules:
        if rule.threshold_year > year:
            break
        state = state.apply(rule)
    return state
