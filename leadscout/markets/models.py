"""
Market data records.

Records are built fresh per request and replaced wholesale
(dataclasses.replace), never patched in place. to_dict() gives the camelCase
JSON shape the API returns.
"""
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Optional

MAIN = 'main'
SECONDARY = 'secondary'
TERTIARY = 'tertiary'
MARKET_CLASSIFICATIONS = (MAIN, SECONDARY, TERTIARY)


def _camel(name):
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def serialize(value):
    """Dataclass -> camelCase dict, recursively. Plain dict keys are data and stay as-is."""
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    return value


class Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return serialize(self)


# ── Census records ───────────────────────────────────────────────────────────

@dataclass
class CountyBusinessData(Serializable):
    """County Business Patterns totals for one county."""
    fips_code: str
    county_name: str
    state: str
    total_establishments: int
    total_employees: int
    annual_payroll: int
    avg_business_size: int


@dataclass
class CountyDemographics(Serializable):
    fips_code: str
    population: int
    median_age: float
    median_income: int


@dataclass
class BusinessTypeEstimate(Serializable):
    business_type: str
    estimated_count: int
    naics_codes: List[str] = field(default_factory=list)


@dataclass
class IndustryCategoryData(Serializable):
    total_establishments: int
    business_types: List[BusinessTypeEstimate] = field(default_factory=list)


@dataclass
class GreyTsunamiIndustryData(Serializable):
    """Per-category establishment estimates for one county."""
    fips_code: str
    county_name: str
    industries: Dict[str, IndustryCategoryData] = field(default_factory=dict)
    total_grey_tsunami_establishments: int = 0


# ── County metrics ───────────────────────────────────────────────────────────

@dataclass
class Demographics(Serializable):
    population: int
    median_age: float
    median_income: int
    population_growth: Optional[float] = None


@dataclass
class BusinessMetrics(Serializable):
    total_businesses: int
    boomer_owned_estimate: int
    boomer_ownership_percentage: float
    avg_business_size: int
    annual_payroll: int
    payroll_per_employee: int = 0


@dataclass
class BoomerLikelihood(Serializable):
    score: int
    percentage: float
    confidence: str


@dataclass
class IndustryFocus(Serializable):
    top_grey_tsunami_industries: List[str] = field(default_factory=list)
    industry_concentration: Dict[str, int] = field(default_factory=dict)
    has_real_industry_data: bool = False
    total_grey_tsunami_establishments: Optional[int] = None


@dataclass
class DataSource(Serializable):
    census: bool
    economic: bool
    industry_data: bool
    last_updated: str


@dataclass
class CountyMarketMetrics(Serializable):
    fips_code: str
    county_name: str
    state: str
    state_abbr: str
    opportunity_score: int
    market_classification: str
    demographics: Demographics
    business_metrics: BusinessMetrics
    industry_focus: IndustryFocus
    data_source: DataSource
    boomer_likelihood: Optional[BoomerLikelihood] = None


@dataclass
class CountyFilter:
    states: Optional[List[str]] = None
    min_population: Optional[int] = None
    max_population: Optional[int] = None
    market_classification: Optional[List[str]] = None
    min_opportunity_score: Optional[int] = None
    grey_tsunami_tiers: Optional[List[str]] = None


# ── Metro metrics ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MetroArea:
    city: str
    state: str
    state_code: str
    metro_code: str
    fips: str
    lat: float
    lng: float


@dataclass
class MarketDemographics(Serializable):
    boomer_business_owners: int
    avg_owner_age: float
    retirement_risk_score: float
    businesses_without_succession_plan: int


@dataclass
class MarketConditions(Serializable):
    avg_multiple: float           # x EBITDA
    median_revenue: int
    yearly_transactions: int
    competition_level: str        # Low / Medium / High
    avg_days_on_market: int


@dataclass
class IndustrySnapshot(Serializable):
    name: str
    business_count: int
    avg_multiple: float           # x SDE
    avg_revenue: int
    retirement_risk: int          # 0-10
    growth_rate: float            # percent


@dataclass
class GrowthIndicators(Serializable):
    population_growth: float      # percent per year
    business_growth: float
    employment_growth: float
    new_construction_permits: int
    gdp_growth: float


@dataclass
class CompetitionSnapshot(Serializable):
    active_buyers: int
    pe_presence: str
    avg_bids_per_deal: float
    top_buyers: List[str] = field(default_factory=list)


@dataclass
class MarketMetrics(Serializable):
    city: str
    state: str
    state_code: str
    coordinates: Dict[str, float]
    opportunity_score: int
    demographics: MarketDemographics
    market: MarketConditions
    top_industries: List[IndustrySnapshot]
    growth: GrowthIndicators
    competition: CompetitionSnapshot
    data_source: Dict[str, str] = field(default_factory=dict)


@dataclass
class MarketFilter:
    states: Optional[List[str]] = None          # state codes, e.g. ['FL', 'TX']
    min_opportunity_score: Optional[int] = None
    competition_level: Optional[List[str]] = None
    min_revenue: Optional[int] = None
    max_revenue: Optional[int] = None
