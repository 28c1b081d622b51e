import math
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_serializer

ShadingLevel = Literal["low", "medium", "high"]
Complexity = Literal["simple", "moderate", "complex"]
Priority = Literal["high", "medium", "low"]
PropertyType = Literal["residential", "farm", "business"]
DataSource = Literal["live", "cached", "default"]
IncentiveCategory = Literal["grant", "loan", "interest-free-loan"]
Valuation = Literal["flat", "per_watt", "cost_share"]
AnalysisMode = Literal["strict", "heuristic"]


class Address(BaseModel):
    street: str
    city: str
    postal_code: str
    country: str

    def missing_fields(self) -> List[str]:
        return [name for name in ("street", "city", "postal_code", "country") if not getattr(self, name).strip()]


class RoofImage(BaseModel):
    data: bytes
    mime_type: str = "image/jpeg"


class GeocodedLocation(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str
    is_default: bool = False
    reason: Optional[str] = None


class IrradianceProfile(BaseModel):
    annual_ghi: float  # kWh/m²/year
    monthly_ghi: List[float]  # kWh/m²/day, January first
    average_peak_sun_hours: float
    photovoltaic_potential: float  # kWh/kWp/year
    data_source: DataSource
    latitude: float
    longitude: float


class ImprovementSuggestion(BaseModel):
    type: str
    title: str
    description: str
    priority: Priority
    estimated_efficiency_gain: float = 0.0
    estimated_cost: Optional[float] = None


class RoofAnalysis(BaseModel):
    roof_area_sq_m: float
    shading_level: ShadingLevel
    roof_pitch_degrees: float
    complexity: Complexity
    usable_area_percentage: float
    orientation: str = "south"
    obstacles: List[str] = Field(default_factory=list)
    condition: Optional[str] = None

    # Existing installation details, populated by the improvement analysis
    current_panel_count: Optional[int] = None
    current_panel_count_max: Optional[int] = None
    estimated_system_size_kw: Optional[float] = None
    estimated_system_size_kw_max: Optional[float] = None
    current_efficiency: Optional[float] = None
    potential_efficiency: Optional[float] = None
    estimated_additional_production_kwh: Optional[float] = None
    suggestions: List[ImprovementSuggestion] = Field(default_factory=list)

    ai_confidence: Optional[float] = None
    used_ai: bool = False
    model_name: Optional[str] = None
    image_count: int = 1

    @property
    def usable_area_sq_m(self) -> float:
        return self.roof_area_sq_m * self.usable_area_percentage / 100


class Suggestion(BaseModel):
    category: Literal["shading", "orientation", "equipment", "maintenance", "financial", "incentive"]
    title: str
    description: str
    priority: Priority


class SystemSpecs(BaseModel):
    panel_count: int
    system_size_kw: float
    roof_area_used_sq_m: float
    annual_production_kwh: float


class YearProjection(BaseModel):
    year: int
    production_kwh: float
    rate: float
    savings: float
    cumulative_savings: float


class CostRange(BaseModel):
    low: float
    mid: float
    high: float


class FinancialAnalysis(BaseModel):
    installation_cost: float
    cost_per_watt: float
    cost_range: CostRange
    annual_savings: float
    monthly_savings: float
    simple_payback_years: float  # inf when annual savings <= 0
    twenty_five_year_savings: float
    net_profit: float
    return_on_investment: float
    first_year_production_kwh: float
    lifetime_production_kwh: float
    yearly_projection: List[YearProjection]
    annual_co2_offset_kg: float
    lifetime_co2_offset_kg: float
    equivalent_trees_planted: int
    electricity_rate: float
    monthly_basic_charge: float
    utility_name: str

    @property
    def pays_back(self) -> bool:
        return not math.isinf(self.simple_payback_years)

    @field_serializer("simple_payback_years", when_used="json")
    def _serialize_payback(self, value: float) -> Optional[float]:
        return None if math.isinf(value) else value


class EligibilityRules(BaseModel):
    property_types: List[PropertyType] = Field(default_factory=lambda: ["residential", "farm", "business"])
    min_system_kw: Optional[float] = None
    max_system_kw: Optional[float] = None
    min_cost: Optional[float] = None
    max_cost: Optional[float] = None


class IncentiveProgram(BaseModel):
    id: str
    name: str
    category: IncentiveCategory
    available: bool = True
    description: str
    max_amount: Optional[float] = None
    eligibility_criteria: List[str] = Field(default_factory=list)
    rules: EligibilityRules = Field(default_factory=EligibilityRules)
    valuation: Valuation = "flat"
    valuation_rate: float = 1.0
    max_cost_share: Optional[float] = None
    application_url: Optional[str] = None
    deadline: str = "Ongoing"  # ISO date or free text such as "Ongoing"
    requires_pre_approval: bool = False
    processing_weeks: Optional[int] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None


class IncentiveRequest(BaseModel):
    system_size_kw: float
    estimated_cost: float
    property_type: PropertyType = "residential"


class IncentiveEligibility(BaseModel):
    program_id: str
    name: str
    category: IncentiveCategory
    eligible: bool
    reasons: List[str]
    estimated_value: float
    requires_pre_approval: bool = False


class IncentiveSummary(BaseModel):
    property_type: PropertyType
    results: List[IncentiveEligibility]
    eligible_programs: List[IncentiveEligibility]
    total_grants: float
    total_loans: float
    uncapped_total: float
    stacking_cap: float
    total_funding: float
    cap_applied: bool
    coverage_percentage: float


class SolarRecommendation(BaseModel):
    suitability_score: int
    system_size_kw: float
    panel_count: int
    estimated_annual_production_kwh: float
    monthly_production_kwh: List[float]
    consumption_coverage_percentage: float
    layout_suggestion: str
    explanation: str
    suggestions: List[Suggestion]
    financials: FinancialAnalysis
    incentives: IncentiveSummary


class SolarAssessment(BaseModel):
    recommendation: SolarRecommendation
    roof_analysis: RoofAnalysis
    irradiance: IrradianceProfile
    geocoded_location: GeocodedLocation
    used_ai: bool
    ai_confidence: Optional[float] = None
    used_real_geocoding: bool
    ai_summary: Optional[str] = None


class ImprovementAssessment(BaseModel):
    installation: RoofAnalysis
    irradiance: IrradianceProfile
    geocoded_location: GeocodedLocation
    efficiency_gain: float
    used_ai: bool
    ai_confidence: Optional[float] = None
    used_real_geocoding: bool


class ApiError(BaseModel):
    code: str
    message: str


class ApiErrorResponse(BaseModel):
    success: Literal[False] = False
    error: ApiError
