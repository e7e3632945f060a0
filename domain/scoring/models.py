"""Wire-facing records for the city ranking engine.

Every metric leaf is optional: ``None`` means "unknown", never zero. Models are
frozen so a preference snapshot handed to the engine cannot change mid-call.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.json_schema import SkipJsonSchema


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ============================================================================
# Enumerations
# ============================================================================


class Category(str, Enum):
    CLIMATE = "climate"
    COST = "cost"
    DEMOGRAPHICS = "demographics"
    QUALITY_OF_LIFE = "quality_of_life"
    VALUES = "values"
    ENTERTAINMENT = "entertainment"


CATEGORY_ORDER: List[Category] = list(Category)


class HousingSituation(str, Enum):
    RENTER = "renter"
    HOMEOWNER = "homeowner"
    PROSPECTIVE_BUYER = "prospective-buyer"


class WorkSituation(str, Enum):
    LOCAL_EARNER = "local-earner"
    STANDARD = "standard"
    RETIREE = "retiree"


class PartisanPreference(str, Enum):
    NEUTRAL = "neutral"
    STRONG_DEM = "strong-dem"
    LEAN_DEM = "lean-dem"
    SWING = "swing"
    LEAN_REP = "lean-rep"
    STRONG_REP = "strong-rep"


SPORTS_LEAGUES = ("nfl", "nba", "mlb", "nhl", "mls")

MINORITY_SUBGROUPS = frozenset(
    {
        "hispanic",
        "black",
        "asian",
        "pacific-islander",
        "native-american",
        "mexican",
        "puerto-rican",
        "cuban",
        "salvadoran",
        "guatemalan",
        "colombian",
        "chinese",
        "indian",
        "filipino",
        "vietnamese",
        "korean",
        "japanese",
    }
)


# ============================================================================
# Reference data
# ============================================================================


class City(_Frozen):
    id: str
    name: str
    state: str
    region_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    # None = unknown; {} = known to have no teams
    sports_teams: Optional[Dict[str, List[str]]] = None
    has_international_airport: Optional[bool] = None
    teleport_slug: Optional[str] = None
    walkscore_slug: Optional[str] = None

    def team_count(self, league: Optional[str] = None) -> Optional[int]:
        if self.sports_teams is None:
            return None
        if league is not None:
            return len([team for team in self.sports_teams.get(league, []) if team.strip()])
        return sum(
            len([team for team in teams if team.strip()])
            for teams in self.sports_teams.values()
        )


class ClimateMetrics(_Frozen):
    avg_temp: Optional[float] = None
    avg_summer_temp: Optional[float] = None
    avg_winter_temp: Optional[float] = None
    sunshine_days: Optional[float] = None
    rain_days: Optional[float] = None
    comfort_days: Optional[float] = None
    extreme_heat_days: Optional[float] = None
    freeze_days: Optional[float] = None
    snow_days: Optional[float] = None
    cloudy_days: Optional[float] = None
    july_dewpoint: Optional[float] = None
    cooling_degree_days: Optional[float] = None
    heating_degree_days: Optional[float] = None
    growing_season_days: Optional[float] = None


class CostMetrics(_Frozen):
    per_capita_income: Optional[float] = None
    per_capita_disposable_income: Optional[float] = None
    median_household_income: Optional[float] = None
    effective_tax_rate: Optional[float] = None
    state_tax_rate: Optional[float] = None
    property_tax_rate: Optional[float] = None
    regional_price_parity: Optional[float] = None
    rpp_housing: Optional[float] = None
    rpp_goods: Optional[float] = None
    rpp_utilities: Optional[float] = None
    rpp_other_services: Optional[float] = None
    median_home_price: Optional[float] = None
    home_price_change_1yr: Optional[float] = None


class DemographicsMetrics(_Frozen):
    population: Optional[float] = None
    diversity_index: Optional[float] = None
    median_age: Optional[float] = None
    bachelors_percent: Optional[float] = None
    foreign_born_percent: Optional[float] = None
    poverty_rate: Optional[float] = None
    non_english_at_home_percent: Optional[float] = None
    community_percent: Dict[str, Optional[float]] = Field(default_factory=dict)


class QualityOfLifeMetrics(_Frozen):
    walk_score: Optional[float] = None
    transit_score: Optional[float] = None
    bike_score: Optional[float] = None
    violent_crime_rate: Optional[float] = None
    healthy_air_days_percent: Optional[float] = None
    fiber_coverage_percent: Optional[float] = None
    broadband_provider_count: Optional[int] = None
    student_teacher_ratio: Optional[float] = None
    graduation_rate: Optional[float] = None
    physicians_per_100k: Optional[float] = None


class CultureMetrics(_Frozen):
    partisan_index: Optional[float] = None
    voter_turnout: Optional[float] = None
    religious_diversity_index: Optional[float] = None
    religious_adherents: Dict[str, Optional[float]] = Field(default_factory=dict)
    bars_per_10k: Optional[float] = None
    museums: Optional[float] = None
    restaurants_per_10k: Optional[float] = None
    cuisine_diversity: Optional[float] = None


class RecreationMetrics(_Frozen):
    trail_miles: Optional[float] = None
    park_acres_per_1k: Optional[float] = None
    protected_land_percent: Optional[float] = None
    max_elevation_delta: Optional[float] = None
    coastline_within_15mi: Optional[bool] = None


class CityMetrics(_Frozen):
    climate: ClimateMetrics = Field(default_factory=ClimateMetrics)
    cost: CostMetrics = Field(default_factory=CostMetrics)
    demographics: DemographicsMetrics = Field(default_factory=DemographicsMetrics)
    quality_of_life: QualityOfLifeMetrics = Field(default_factory=QualityOfLifeMetrics)
    culture: CultureMetrics = Field(default_factory=CultureMetrics)
    recreation: RecreationMetrics = Field(default_factory=RecreationMetrics)


class CityRecord(_Frozen):
    """One (City, CityMetrics) pair as it travels over the wire."""

    city: City
    metrics: CityMetrics = Field(default_factory=CityMetrics)


METRIC_GROUPS: Dict[str, type] = {
    "climate": ClimateMetrics,
    "cost": CostMetrics,
    "demographics": DemographicsMetrics,
    "quality_of_life": QualityOfLifeMetrics,
    "culture": CultureMetrics,
    "recreation": RecreationMetrics,
}


# Dict-valued leaves, addressed as ``group.field.key``
KEYED_METRIC_FIELDS: Dict[str, str] = {
    "demographics": "community_percent",
    "culture": "religious_adherents",
}


def is_raw_metric_path(path: str) -> bool:
    """True for a scalar ``group.field`` or a keyed ``group.field.key`` path."""

    parts = path.split(".")
    model = METRIC_GROUPS.get(parts[0])
    if model is None:
        return False
    if len(parts) == 3:
        return KEYED_METRIC_FIELDS.get(parts[0]) == parts[1] and bool(parts[2])
    if len(parts) != 2 or parts[1] not in model.model_fields:
        return False
    return KEYED_METRIC_FIELDS.get(parts[0]) != parts[1]


def read_raw_metric(metrics: CityMetrics, path: str) -> Any:
    group, field, *key = path.split(".")
    value = getattr(getattr(metrics, group), field)
    if key:
        return value.get(key[0])
    return value


# ============================================================================
# Preferences
# ============================================================================


class CategoryWeights(_Frozen):
    climate: float = Field(default=1.0, ge=0)
    cost: float = Field(default=1.0, ge=0)
    demographics: float = Field(default=1.0, ge=0)
    quality_of_life: float = Field(default=1.0, ge=0)
    values: float = Field(default=1.0, ge=0)
    entertainment: float = Field(default=1.0, ge=0)

    def as_dict(self) -> Dict[Category, float]:
        return {category: float(getattr(self, category.value)) for category in CATEGORY_ORDER}


class MinorityTarget(_Frozen):
    subgroup: str
    importance: float = Field(default=0.5, ge=0, le=1)

    @model_validator(mode="after")
    def _known_subgroup(self) -> "MinorityTarget":
        if self.subgroup not in MINORITY_SUBGROUPS:
            raise ValueError(f"Unknown minority subgroup '{self.subgroup}'")
        return self


ConstraintKind = Literal["team", "metric", "airport", "state", "predicate"]
ComparisonOperator = Literal["<", "<=", ">", ">=", "==", "!="]


class HardConstraint(_Frozen):
    """A boolean requirement; the first failing one excludes the city."""

    label: str
    kind: ConstraintKind
    league: Optional[str] = None
    metric: Optional[str] = None
    operator: Optional[ComparisonOperator] = None
    value: Optional[float] = None
    states: Optional[List[str]] = None
    predicate: SkipJsonSchema[Optional[Callable[[City, CityMetrics], bool]]] = Field(
        default=None, exclude=True
    )

    @model_validator(mode="after")
    def _check_shape(self) -> "HardConstraint":
        if self.kind == "team":
            if self.league not in SPORTS_LEAGUES:
                raise ValueError(f"Team constraint needs a league in {SPORTS_LEAGUES}")
        elif self.kind == "metric":
            if self.metric is None or self.operator is None or self.value is None:
                raise ValueError("Metric constraint needs metric, operator and value")
            from .catalogue import is_known_metric_key

            if not (is_known_metric_key(self.metric) or is_raw_metric_path(self.metric)):
                raise ValueError(f"Unknown metric '{self.metric}'")
        elif self.kind == "state":
            if not self.states:
                raise ValueError("State constraint needs at least one state")
        elif self.kind == "predicate":
            if self.predicate is None:
                raise ValueError("Predicate constraint needs a callable")
        return self


class Preferences(_Frozen):
    weights: CategoryWeights = Field(default_factory=CategoryWeights)
    housing_situation: HousingSituation = HousingSituation.RENTER
    work_situation: WorkSituation = WorkSituation.STANDARD
    minority_target: Optional[MinorityTarget] = None
    constraints: List[HardConstraint] = Field(default_factory=list)
    ideal_temperature: float = 65.0
    partisan_preference: PartisanPreference = PartisanPreference.NEUTRAL
    religious_traditions: List[str] = Field(default_factory=list)


# ============================================================================
# Output
# ============================================================================


class MetricContribution(_Frozen):
    metric: str
    label: str
    raw_value: Optional[float]
    score: Optional[float]
    weight: float
    effective_weight: float
    contribution: float
    low_confidence: bool = False


class CategoryBreakdown(_Frozen):
    category: Category
    score: Optional[float]
    category_weight: float
    contributions: List[MetricContribution]
    minority_bonus: Optional[float] = None


class CityScore(_Frozen):
    city_id: str
    city_name: str
    state: str
    climate_score: Optional[float]
    cost_score: Optional[float]
    demographics_score: Optional[float]
    quality_of_life_score: Optional[float]
    values_score: Optional[float]
    entertainment_score: Optional[float]
    total_score: Optional[float]
    excluded: bool = False
    exclusion_reason: Optional[str] = None
    rank: int = 0
    grade: Optional[str] = None
    rating_label: Optional[str] = None
    color_code: Optional[str] = None
    breakdown: Dict[Category, CategoryBreakdown] = Field(default_factory=dict)

    def category_score(self, category: Category) -> Optional[float]:
        return getattr(self, f"{category.value}_score")


class ScoringResult(_Frozen):
    rankings: List[CityScore]
    included_count: int
    excluded_count: int


__all__ = [
    "CATEGORY_ORDER",
    "Category",
    "CategoryBreakdown",
    "CategoryWeights",
    "City",
    "CityMetrics",
    "CityRecord",
    "CityScore",
    "ClimateMetrics",
    "CostMetrics",
    "CultureMetrics",
    "DemographicsMetrics",
    "HardConstraint",
    "HousingSituation",
    "METRIC_GROUPS",
    "MINORITY_SUBGROUPS",
    "MetricContribution",
    "MinorityTarget",
    "PartisanPreference",
    "Preferences",
    "QualityOfLifeMetrics",
    "RecreationMetrics",
    "SPORTS_LEAGUES",
    "ScoringResult",
    "WorkSituation",
    "is_raw_metric_path",
    "read_raw_metric",
]
