from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from database import AsyncSessionLocal
from schemas.application import ApplicationDraftRequest, LoanApplicationView, TransitionResponse
from services.applications import LoanApplicationService, TransitionResult
from services.errors import ApplicationNotFound
from services.persistence import LoanApplicationGateway

router = APIRouter(prefix="/api/applications", tags=["applications"])


def get_application_service() -> LoanApplicationService:
    return LoanApplicationService(LoanApplicationGateway(AsyncSessionLocal))


def _app_to_response(view: LoanApplicationView) -> dict[str, Any]:
    """Serialize the composed view; timestamps ISO-8601, amount as a number."""
    return view.model_dump(mode="json")


def _transition_response(application_id: str, result: TransitionResult) -> JSONResponse:
    body = TransitionResponse(
        id=application_id,
        success=result.success,
        status=result.status,
        reason=result.reason,
    )
    return JSONResponse(
        status_code=200 if result.success else 409,
        content=body.model_dump(mode="json", exclude_none=True),
    )


@router.post("", status_code=201)
async def create_application(
    body: ApplicationDraftRequest,
    service: LoanApplicationService = Depends(get_application_service),
    x_actor: Optional[str] = Header(None),
):
    view = await service.create_draft(
        customer=body.customer,
        collateral=body.collateral,
        proposed_loan=body.proposed_loan,
        actor=x_actor,
    )
    return _app_to_response(view)


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    service: LoanApplicationService = Depends(get_application_service),
):
    view = await service.get_application(application_id)
    if view is None:
        raise ApplicationNotFound(application_id)
    return _app_to_response(view)


@router.post("/{application_id}/submit")
async def submit_application(
    application_id: str,
    service: LoanApplicationService = Depends(get_application_service),
    x_actor: Optional[str] = Header(None),
):
    result = await service.submit_application(application_id, actor=x_actor)
    return _transition_response(application_id, result)


@router.post("/{application_id}/cancel")
async def cancel_application(
    application_id: str,
    service: LoanApplicationService = Depends(get_application_service),
    x_actor: Optional[str] = Header(None),
):
    result = await service.cancel_application(application_id, actor=x_actor)
    return _transition_response(application_id, result)
