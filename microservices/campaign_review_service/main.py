"""
Campaign Review Service Main Application

FastAPI application for the campaign review console.
Port: 8251
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from core.auth_dependencies import require_caller_context
from core.config import get_settings

from . import __version__
from .factory import CampaignReviewServiceFactory
from .fallback_data import is_mock_id
from .models import (
    ApproveCampaignRequest,
    ApproveEditRequest,
    CallerIdentity,
    CampaignCollection,
    CampaignDetail,
    CampaignListType,
    CampaignResponse,
    CompleteCampaignRequest,
    EditRequestListResponse,
    EditRequestResponse,
    EditReviewSummary,
    HealthResponse,
    PauseCampaignRequest,
    RejectCampaignRequest,
    RejectEditRequest,
    SubmitEditRequest,
)
from .protocols import CampaignReviewError, MutationDisabledOnFallbackDataError

settings = get_settings()
settings.logging.configure()
logger = logging.getLogger(__name__)

# Service configuration
SERVICE_NAME = "campaign_review_service"
SERVICE_PORT = settings.console.service_port
SERVICE_VERSION = __version__
API_PREFIX = "/api/v1/campaign-review"

ERROR_STATUS = {
    "ValidationError": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "InvalidTransition": status.HTTP_409_CONFLICT,
    "EditNotFound": status.HTTP_404_NOT_FOUND,
    "EditAlreadyResolved": status.HTTP_409_CONFLICT,
    "MutationDisabledOnFallbackData": status.HTTP_409_CONFLICT,
    "StoreUnavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "StoreWriteFailure": status.HTTP_502_BAD_GATEWAY,
    "Unauthorized": status.HTTP_403_FORBIDDEN,
    "CampaignNotFound": status.HTTP_404_NOT_FOUND,
    "StoreFatal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Global factory instance
factory: Optional[CampaignReviewServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    factory = CampaignReviewServiceFactory(settings)
    await factory.initialize()

    # Background refresh keeps the fallback cache warm
    factory.controller.start_polling()

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    await factory.close()
    factory = None


app = FastAPI(
    title="Campaign Review Service",
    description="Operations console for reviewing creator campaigns and brand edit requests",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


@app.exception_handler(CampaignReviewError)
async def campaign_review_error_handler(request: Request, exc: CampaignReviewError):
    status_code = ERROR_STATUS.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_code": exc.error_code},
    )


# ====================
# Dependencies
# ====================


def get_factory_dependency() -> CampaignReviewServiceFactory:
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return factory


def get_caller(auth: dict = Depends(require_caller_context)) -> CallerIdentity:
    return CallerIdentity(**auth)


def refuse_placeholder(campaign_id: str) -> None:
    if is_mock_id(campaign_id):
        raise MutationDisabledOnFallbackDataError(
            f"Campaign {campaign_id} is placeholder data and cannot be changed",
            campaign_id=campaign_id,
        )


# ====================
# Health Endpoints
# ====================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}

    if factory:
        db_healthy = await factory.gateway.health_check()
        dependencies["postgres"] = "healthy" if db_healthy else "unhealthy"

        if factory.nats_client:
            dependencies["nats"] = "healthy" if factory.nats_client.is_connected else "unhealthy"
        else:
            dependencies["nats"] = "not_configured"

    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


@app.get("/health/ready", tags=["Health"])
async def readiness_check():
    """Ready once components are wired; the console serves fallback data while the store is down"""
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return {"ready": True, "store": await factory.gateway.health_check()}


@app.get("/health/live", tags=["Health"])
async def liveness_check():
    return {"alive": True}


# ====================
# Campaign Lists & Detail
# ====================


@app.get(
    f"{API_PREFIX}/lists/{{list_type}}",
    response_model=CampaignCollection,
    tags=["Campaigns"],
)
async def list_campaigns(
    list_type: CampaignListType,
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    search: Optional[str] = Query(None),
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    """
    One page of the pending, active or completed list.

    Served from the last good copy (``is_stale``) or placeholder data
    (``is_mock_data``) when the store is unavailable.
    """
    return await f.reader.list_campaigns(list_type, page, page_size, search)


@app.get(
    f"{API_PREFIX}/campaigns/{{campaign_id}}",
    response_model=CampaignDetail,
    tags=["Campaigns"],
)
async def get_campaign_detail(
    campaign_id: str,
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    return await f.reader.get_with_creators(campaign_id)


# ====================
# Lifecycle Transitions
# ====================


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/submit",
    response_model=CampaignResponse,
    tags=["Lifecycle"],
)
async def submit_campaign(
    campaign_id: str,
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    refuse_placeholder(campaign_id)
    campaign = await f.lifecycle.submit(caller, campaign_id)
    return CampaignResponse(campaign=campaign, message="Campaign submitted for review")


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/approve",
    response_model=CampaignResponse,
    tags=["Lifecycle"],
)
async def approve_campaign(
    campaign_id: str,
    request: ApproveCampaignRequest = ApproveCampaignRequest(),
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    refuse_placeholder(campaign_id)
    campaign = await f.lifecycle.approve(caller, campaign_id, request.notes)
    return CampaignResponse(campaign=campaign, message="Campaign approved")


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/reject",
    response_model=CampaignResponse,
    tags=["Lifecycle"],
)
async def reject_campaign(
    campaign_id: str,
    request: RejectCampaignRequest,
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    refuse_placeholder(campaign_id)
    campaign = await f.lifecycle.reject(caller, campaign_id, request.reasons, request.recommendations)
    return CampaignResponse(campaign=campaign, message="Campaign rejected")


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/pause",
    response_model=CampaignResponse,
    tags=["Lifecycle"],
)
async def pause_campaign(
    campaign_id: str,
    request: PauseCampaignRequest,
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    refuse_placeholder(campaign_id)
    campaign = await f.lifecycle.pause(caller, campaign_id, request.reason)
    return CampaignResponse(campaign=campaign, message="Campaign paused")


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/resume",
    response_model=CampaignResponse,
    tags=["Lifecycle"],
)
async def resume_campaign(
    campaign_id: str,
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    refuse_placeholder(campaign_id)
    campaign = await f.lifecycle.resume(caller, campaign_id)
    return CampaignResponse(campaign=campaign, message="Campaign resumed")


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/complete",
    response_model=CampaignResponse,
    tags=["Lifecycle"],
)
async def complete_campaign(
    campaign_id: str,
    request: CompleteCampaignRequest = CompleteCampaignRequest(),
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    refuse_placeholder(campaign_id)
    campaign = await f.lifecycle.complete(caller, campaign_id, request.reason)
    return CampaignResponse(campaign=campaign, message="Campaign completed")


# ====================
# Edit Requests
# ====================


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/edits",
    response_model=EditRequestResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Edits"],
)
async def submit_edit(
    campaign_id: str,
    request: SubmitEditRequest,
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    """Propose changes to a live campaign; the campaign is untouched until approval"""
    refuse_placeholder(campaign_id)
    edit = await f.edit_review.submit_edit(caller, campaign_id, request.new_data, request.change_reason)
    return EditRequestResponse(edit_request=edit, message="Edit request submitted for review")


@app.get(f"{API_PREFIX}/edits", response_model=EditRequestListResponse, tags=["Edits"])
async def list_pending_edits(
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    edits = await f.edit_review.list_pending_edits(caller)
    return EditRequestListResponse(edit_requests=edits, total=len(edits))


@app.get(
    f"{API_PREFIX}/edits/{{edit_id}}/summary",
    response_model=EditReviewSummary,
    tags=["Edits"],
)
async def get_edit_summary(
    edit_id: str,
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    return await f.edit_review.get_review_summary(caller, edit_id)


@app.post(
    f"{API_PREFIX}/edits/{{edit_id}}/approve",
    response_model=EditRequestResponse,
    tags=["Edits"],
)
async def approve_edit(
    edit_id: str,
    request: ApproveEditRequest = ApproveEditRequest(),
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    campaign, edit = await f.edit_review.approve_edit(caller, edit_id, request.notes)
    return EditRequestResponse(edit_request=edit, campaign=campaign, message="Edit request approved")


@app.post(
    f"{API_PREFIX}/edits/{{edit_id}}/reject",
    response_model=EditRequestResponse,
    tags=["Edits"],
)
async def reject_edit(
    edit_id: str,
    request: RejectEditRequest,
    f: CampaignReviewServiceFactory = Depends(get_factory_dependency),
    caller: CallerIdentity = Depends(get_caller),
):
    edit = await f.edit_review.reject_edit(caller, edit_id, request.reason)
    return EditRequestResponse(edit_request=edit, message="Edit request rejected")


# ====================
# Main Entry Point
# ====================


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.campaign_review_service.main:app",
        host=settings.console.service_host,
        port=SERVICE_PORT,
        reload=settings.debug,
        log_level=settings.logging.log_level.lower(),
    )


if __name__ == "__main__":
    main()
