from typing import Optional


class SolarAssessmentError(Exception):
    """Base class for engine errors."""


class ValidationError(SolarAssessmentError):
    """Caller input is malformed or incomplete. Never retried."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ExternalServiceError(SolarAssessmentError):
    """A geocoding, irradiance or vision provider is unavailable or erroring."""

    def __init__(self, message: str, service: Optional[str] = None):
        super().__init__(message)
        self.service = service


class DataQualityError(ExternalServiceError):
    """The provider answered but none of its samples are usable."""


class VisionAnalysisError(ExternalServiceError):
    """Every vision model in the chain failed, or none is configured."""


class InvalidImageError(VisionAnalysisError):
    """The vision model reports that the photo does not show a building."""
