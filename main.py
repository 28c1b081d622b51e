import logging
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from engine.errors import InvalidImageError, ValidationError
from engine.incentives import STACKING_CAPS, get_incentives, get_max_funding
from engine.irradiance import IrradianceCache
from engine.pipeline import build_assessment_engine
from models.schemas import Address, ApiError, ApiErrorResponse, RoofImage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png")
MAX_IMAGE_BYTES = 10 * 1024 * 1024
PROPERTY_TYPES = ("residential", "farm", "business")

app = FastAPI(title="PEI Solar Assessment API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One cache per process, shared by every request
irradiance_cache = IrradianceCache(ttl_seconds=config.IRRADIANCE_CACHE_TTL_SECONDS)
assessment_engine = build_assessment_engine(config.get_settings(), irradiance_cache)


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ApiErrorResponse(error=ApiError(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(str(error["loc"][-1]) for error in exc.errors() if error.get("loc")) or "request"
    logger.warning(f"[api] Rejected {request.url.path}: invalid {fields}")
    return error_response(400, "INVALID_INPUT", f"Invalid value for: {fields}")


async def read_image(upload: Optional[UploadFile]) -> RoofImage:
    if upload is None or not upload.filename:
        raise ValidationError("MISSING_IMAGE", "Please upload an image of your roof")
    if upload.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("INVALID_TYPE", "Only JPEG and PNG images are supported")
    data = await upload.read()
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError("FILE_TOO_LARGE", "Image must be smaller than 10MB")
    return RoofImage(data=data, mime_type=upload.content_type)


def build_address(street: str, city: str, postal_code: str, country: str) -> Address:
    address = Address(street=street, city=city, postal_code=postal_code, country=country)
    missing = address.missing_fields()
    if missing:
        raise ValidationError("INCOMPLETE_ADDRESS", f"Please provide a complete address (missing: {', '.join(missing)})")
    return address


def check_property_type(property_type: str) -> str:
    if property_type not in PROPERTY_TYPES:
        raise ValidationError(
            "INVALID_PROPERTY_TYPE", f"Property type must be one of: {', '.join(PROPERTY_TYPES)}"
        )
    return property_type


@app.get("/")
async def root():
    """Root endpoint - health check"""
    return {"message": "PEI Solar Assessment API is running", "status": "healthy"}


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "pei-solar-assessment"}


@app.post("/api/analyze")
async def analyze(
    image: Optional[UploadFile] = File(None),
    street: str = Form(""),
    city: str = Form(""),
    postal_code: str = Form("", alias="postalCode"),
    country: str = Form(""),
    monthly_bill: Optional[float] = Form(None, alias="monthlyBill"),
    property_type: str = Form("residential", alias="propertyType"),
):
    """Full assessment for a planned installation: roof photo plus address."""
    try:
        roof_image = await read_image(image)
        address = build_address(street, city, postal_code, country)
        check_property_type(property_type)

        logger.info(f"[api] Analyzing {address.city} {address.postal_code} ({property_type})")
        assessment = await assessment_engine.assess(address, [roof_image], property_type, monthly_bill)
    except ValidationError as e:
        return error_response(400, e.code, e.message)
    except InvalidImageError as e:
        return error_response(400, "INVALID_IMAGE", str(e))
    except Exception:
        logger.exception("[api] Analysis failed")
        return error_response(500, "ANALYSIS_FAILED", "Failed to analyze your roof. Please try again.")

    return {"success": True, "data": assessment.model_dump(mode="json")}


@app.post("/api/improve")
async def improve(
    image1: Optional[UploadFile] = File(None),
    image2: Optional[UploadFile] = File(None),
    image3: Optional[UploadFile] = File(None),
    street: str = Form(""),
    city: str = Form(""),
    postal_code: str = Form("", alias="postalCode"),
    country: str = Form(""),
):
    """Efficiency review of an existing installation from one to three photos."""
    try:
        images: List[RoofImage] = [await read_image(image1)]
        for extra in (image2, image3):
            if extra is not None and extra.filename:
                images.append(await read_image(extra))
        address = build_address(street, city, postal_code, country)

        logger.info(f"[api] Reviewing existing installation in {address.city} with {len(images)} image(s)")
        assessment = await assessment_engine.assess_existing_installation(address, images)
    except ValidationError as e:
        return error_response(400, e.code, e.message)
    except InvalidImageError as e:
        return error_response(400, "INVALID_IMAGE", str(e))
    except Exception:
        logger.exception("[api] Improvement analysis failed")
        return error_response(500, "ANALYSIS_FAILED", "Failed to analyze your installation. Please try again.")

    return {"success": True, "data": assessment.model_dump(mode="json")}


@app.get("/api/incentives/{property_type}")
async def list_incentives(property_type: str):
    try:
        check_property_type(property_type)
    except ValidationError as e:
        return error_response(400, e.code, e.message)

    return {
        "success": True,
        "data": {
            "property_type": property_type,
            "programs": [p.model_dump() for p in get_incentives(property_type)],
            "max_funding": get_max_funding(property_type),
            "stacking_cap": STACKING_CAPS[property_type],
        },
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
