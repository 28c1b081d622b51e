from engine.incentives.catalog import (
    INCENTIVE_CATALOG,
    STACKING_CAPS,
    get_incentives,
    get_max_funding,
)
from engine.incentives.eligibility import (
    IncentiveEligibilityEngine,
    check_eligibility,
    estimate_value,
)
