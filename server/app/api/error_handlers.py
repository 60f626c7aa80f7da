"""
Exception handlers mapping service errors to HTTP responses.

Routers wrap unexpected failures as 500; the errors listed in
``PASSTHROUGH_ERRORS`` are re-raised so the handlers below can answer them.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from app.services.document_comparison_service import DocumentNotFoundError, TooManyTargetsError
from app.services.gemini import ParseError, UpstreamError
from app.services.plan_features import FeatureNotAvailableError

logger = logging.getLogger(__name__)

PASSTHROUGH_ERRORS = (
    HTTPException,
    UpstreamError,
    ParseError,
    DocumentNotFoundError,
    TooManyTargetsError,
    FeatureNotAvailableError
)


async def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.error(f"❌ Upstream failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "upstream_status": exc.status_code}
    )


async def parse_error_handler(request: Request, exc: ParseError):
    logger.error(f"❌ Unparseable model response on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "response_preview": exc.response_preview}
    )


async def document_not_found_handler(request: Request, exc: DocumentNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def too_many_targets_handler(request: Request, exc: TooManyTargetsError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def feature_not_available_handler(request: Request, exc: FeatureNotAvailableError):
    return JSONResponse(
        status_code=403,
        content={
            "detail": str(exc),
            "feature": exc.feature,
            "plan": exc.plan,
            "required_plan": exc.required_plan
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(ParseError, parse_error_handler)
    app.add_exception_handler(DocumentNotFoundError, document_not_found_handler)
    app.add_exception_handler(TooManyTargetsError, too_many_targets_handler)
    app.add_exception_handler(FeatureNotAvailableError, feature_not_available_handler)
