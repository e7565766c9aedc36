import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

package_dir = Path(__file__).parent
load_dotenv(package_dir / ".env")

from .config.config_loader import load_runtime_config
from .middleware.auth import verify_bearer_token
from .services.field_normalizer import FieldNormalizer
from .utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

app = FastAPI(title="Checkout Field Normalizer")

# CORS configuration - the checkout page fetches /settings from the storefront origin
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
if allowed_origins_env:
    allowed_origins = [origin.strip() for origin in allowed_origins_env.split(",")]
else:
    allowed_origins = ["http://localhost:8000", "http://127.0.0.1:8000"]

# For wildcard, we can't use credentials, so disable credentials
use_credentials = "*" not in allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=use_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to logs for tracing."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestIDMiddleware)

try:
    normalizer: Optional[FieldNormalizer] = FieldNormalizer(load_runtime_config())
    logger.info("Field normalizer initialized successfully")
except ConfigurationError as e:
    logger.error(f"Failed to load normalizer config: {e}", exc_info=True)
    normalizer = None
    logger.warning("Field normalizer not available - normalization endpoints will return 503")


def get_normalizer() -> FieldNormalizer:
    if normalizer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Normalizer configuration not loaded",
        )
    return normalizer


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


class TextRequest(BaseModel):
    mode: Literal["uppercase", "lowercase", "phone"]
    value: Optional[str] = ""
    remove_greek_accents: Optional[bool] = None


class FieldRequest(BaseModel):
    field: str
    value: Optional[str] = ""


class BlockCheckoutRequest(BaseModel):
    billing_address: Dict[str, Any] = Field(default_factory=dict)
    shipping_address: Dict[str, Any] = Field(default_factory=dict)


class LabelsRequest(BaseModel):
    countries: Dict[str, str] = Field(default_factory=dict)
    states: Dict[str, Any] = Field(default_factory=dict)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors for debugging."""
    logger.error(
        "Request validation error",
        extra={
            "url": str(request.url),
            "method": request.method,
            "errors": jsonable_encoder(exc.errors()),
        },
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.get("/health")
def health():
    """Health check endpoint - responds even when the config failed to load."""
    return {
        "status": "ok",
        "normalizer_available": normalizer is not None,
        "config_version": normalizer.config.metadata.get("config_version") if normalizer else None,
    }


@app.get("/settings")
def client_settings(service: FieldNormalizer = Depends(get_normalizer)):
    """Field lists, Greek map and phone rules for the live checkout script."""
    return service.client_settings()


@app.post("/normalize/text")
def normalize_text(payload: TextRequest, service: FieldNormalizer = Depends(get_normalizer)):
    value = service.normalize_text(payload.mode, payload.value, payload.remove_greek_accents)
    return {"mode": payload.mode, "value": value}


@app.post("/normalize/field")
def normalize_field(payload: FieldRequest, service: FieldNormalizer = Depends(get_normalizer)):
    return {
        "field": payload.field,
        "category": service.classify(payload.field),
        "value": service.normalize_value(payload.field, payload.value),
    }


@app.post("/checkout/normalize")
def normalize_checkout(
    request: Request,
    data: Dict[str, Any] = Body(...),
    service: FieldNormalizer = Depends(get_normalizer),
):
    """Normalize a submitted checkout form (shipping only when shipping elsewhere)."""
    return service.normalize_posted_data(
        data,
        require_ship_flag=True,
        request_id=_request_id(request),
        stage="checkout",
    )


@app.post("/checkout/block")
def normalize_block_checkout(payload: BlockCheckoutRequest, service: FieldNormalizer = Depends(get_normalizer)):
    return {
        "billing_address": service.normalize_address("billing", payload.billing_address),
        "shipping_address": service.normalize_address("shipping", payload.shipping_address),
    }


@app.post("/orders/normalize", dependencies=[Depends(verify_bearer_token)])
def normalize_order(
    request: Request,
    order: Dict[str, Any] = Body(...),
    service: FieldNormalizer = Depends(get_normalizer),
):
    """Authoritative normalization of an order record before it is stored."""
    return service.normalize_order(order, request_id=_request_id(request))


@app.post("/labels/uppercase")
def uppercase_labels(payload: LabelsRequest, service: FieldNormalizer = Depends(get_normalizer)):
    return {
        "countries": service.uppercase_labels(payload.countries),
        "states": service.uppercase_states(payload.states),
    }
