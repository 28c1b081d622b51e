"""
Solar incentive programs available to Prince Edward Island properties.

Each program carries its own valuation: a flat amount, a per-watt rebate or a
share of installation cost. Loans are valued at the amount that can actually be
borrowed, i.e. ``min(max_amount, cost)``.
"""

from typing import Dict, List

from models.schemas import EligibilityRules, IncentiveProgram

# Per-watt programs are headlined at this size when listing maximum funding
HEADLINE_SYSTEM_KW = 10

RESIDENTIAL_INCENTIVES: List[IncentiveProgram] = [
    IncentiveProgram(
        id="pei-grebate-001",
        name="PEI Home Energy Efficiency Loan Program",
        category="loan",
        description="Interest-free loans for energy efficiency upgrades including solar PV installations",
        max_amount=10000,
        eligibility_criteria=[
            "PEI homeowner",
            "Primary residence",
            "Must complete energy assessment",
        ],
        rules=EligibilityRules(property_types=["residential"]),
        valuation="cost_share",
        application_url="https://www.princeedwardisland.ca/en/service/apply-for-energy-efficiency-loan",
        requires_pre_approval=True,
        processing_weeks=4,
        contact_phone="1-877-734-6336",
        contact_email="energy@gov.pe.ca",
    ),
    IncentiveProgram(
        id="fed-grebate-002",
        name="Canada Greener Homes Grant",
        category="grant",
        description="Federal grant for home energy retrofits including solar panel installation",
        max_amount=5000,
        eligibility_criteria=[
            "Canadian homeowner",
            "Primary residence",
            "Pre-and-post retrofit EnerGuide evaluation required",
        ],
        rules=EligibilityRules(property_types=["residential"]),
        application_url="https://natural-resources.canada.ca/energy-efficiency/homes/canada-greener-homes-grant",
        deadline="2027-03-31",
        requires_pre_approval=True,
        processing_weeks=12,
        contact_phone="1-833-674-8282",
        contact_email="greenerhomesgrant-subventionsmaisonsvertes@nrcan-rncan.gc.ca",
    ),
    IncentiveProgram(
        id="fed-loan-003",
        name="Canada Greener Homes Loan",
        category="interest-free-loan",
        description="Interest-free loan of up to $40,000 for home energy improvements",
        max_amount=40000,
        eligibility_criteria=[
            "Approved for Greener Homes Grant",
            "Canadian homeowner",
            "Good credit history",
        ],
        rules=EligibilityRules(property_types=["residential"]),
        valuation="cost_share",
        application_url="https://natural-resources.canada.ca/energy-efficiency/homes/canada-greener-homes-loan",
        deadline="2027-03-31",
        requires_pre_approval=True,
        processing_weeks=8,
        contact_phone="1-866-292-9517",
        contact_email="greenerhomesloan-pretsmaisonsvertes@nrcan-rncan.gc.ca",
    ),
]

FARM_INCENTIVES: List[IncentiveProgram] = [
    IncentiveProgram(
        id="pei-farm-001",
        name="PEI Agricultural Energy Solutions Program",
        category="grant",
        description="Financial assistance for farmers to implement renewable energy and energy efficiency projects",
        max_amount=35000,
        eligibility_criteria=[
            "Registered farm operation in PEI",
            "Farm Business Registration Number",
            "Project reduces energy consumption or generates renewable energy",
        ],
        rules=EligibilityRules(property_types=["farm"]),
        application_url="https://www.princeedwardisland.ca/en/service/agricultural-energy-solutions-program",
        requires_pre_approval=True,
        processing_weeks=8,
        contact_phone="902-368-4880",
        contact_email="agenergy@gov.pe.ca",
    ),
    IncentiveProgram(
        id="fed-farm-002",
        name="On-Farm Climate Action Fund",
        category="grant",
        description="Federal funding for agricultural climate action projects including renewable energy",
        max_amount=100000,
        eligibility_criteria=[
            "Agricultural producer",
            "Member of participating organization",
            "Project aligns with program priorities",
        ],
        rules=EligibilityRules(property_types=["farm"]),
        application_url="https://agriculture.canada.ca/en/agricultural-programs-and-services/on-farm-climate-action-fund",
        deadline="2028-03-31",
        requires_pre_approval=True,
        processing_weeks=12,
        contact_phone="1-866-367-8506",
        contact_email="ofaaf-cpadaa@agr.gc.ca",
    ),
    IncentiveProgram(
        id="pei-farm-003",
        name="Farm Solar PV Rebate Program",
        category="grant",
        description="Per watt rebate for solar PV installations on farm buildings and operations",
        eligibility_criteria=[
            "Active farm business in PEI",
            "Minimum 5kW system",
            "Must be grid-connected",
        ],
        rules=EligibilityRules(property_types=["farm"], min_system_kw=5),
        valuation="per_watt",
        valuation_rate=1.0,
        max_cost_share=0.3,
        application_url="https://www.princeedwardisland.ca/en/service/farm-solar-pv-rebate-program",
        deadline="Funds available",
        requires_pre_approval=True,
        processing_weeks=10,
        contact_phone="902-368-4880",
        contact_email="agriculture@gov.pe.ca",
    ),
    IncentiveProgram(
        id="pei-farm-004",
        name="Agricultural Clean Technology Program",
        category="loan",
        description="Support for adoption of clean technology including solar energy systems",
        max_amount=250000,
        eligibility_criteria=[
            "Agricultural or agri-food business",
            "Project reduces GHG emissions",
            "Minimum 50% equity contribution",
        ],
        rules=EligibilityRules(property_types=["farm"]),
        valuation="cost_share",
        application_url="https://agriculture.canada.ca/en/agricultural-programs-and-services/agricultural-clean-technology-program",
        deadline="2028-03-31",
        requires_pre_approval=True,
        processing_weeks=16,
        contact_phone="1-855-773-0241",
        contact_email="agclean.agpropre@agr.gc.ca",
    ),
]

BUSINESS_INCENTIVES: List[IncentiveProgram] = [
    IncentiveProgram(
        id="pei-business-001",
        name="Commercial Solar Investment Program",
        category="grant",
        description="Funding for commercial solar installations (Contact for more details)",
        max_amount=50000,
        eligibility_criteria=[
            "Registered business in PEI",
            "Commercial property",
            "Minimum 10kW system",
        ],
        rules=EligibilityRules(property_types=["business"], min_system_kw=10),
        application_url="https://www.princeedwardisland.ca",
        requires_pre_approval=True,
        processing_weeks=12,
        contact_phone="902-368-4880",
        contact_email="business@gov.pe.ca",
    ),
]

INCENTIVE_CATALOG: Dict[str, List[IncentiveProgram]] = {
    "residential": RESIDENTIAL_INCENTIVES,
    "farm": FARM_INCENTIVES,
    "business": BUSINESS_INCENTIVES,
}

# Ceiling on combined incentive value per property type
STACKING_CAPS: Dict[str, float] = {
    "residential": 50000,
    "farm": 250000,
    "business": 50000,
}


def get_incentives(property_type: str) -> List[IncentiveProgram]:
    return INCENTIVE_CATALOG.get(property_type, RESIDENTIAL_INCENTIVES)


def get_max_funding(property_type: str) -> float:
    total = 0.0
    for program in get_incentives(property_type):
        if program.valuation == "per_watt":
            total += program.valuation_rate * HEADLINE_SYSTEM_KW * 1000
        else:
            total += program.max_amount or 0
    return total
