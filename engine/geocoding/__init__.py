from engine.geocoding.resolver import (
    GeocodingResolver,
    build_address_string,
    calculate_distance,
    default_location,
    is_location_in_region,
    is_valid_postal_code,
)
