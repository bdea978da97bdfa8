"""
Application service: the entry point the API layer calls.
Validates raw input, applies lifecycle rules and delegates storage to the gateway.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Optional, TypeVar

from config import settings
from schemas.application import LoanApplicationView
from services.errors import ConflictError, StorageFault, ValidationError
from services.lifecycle import ApplicationStatus, rejection_reason
from services.persistence import LoanApplicationGateway
from services.validation import validate_draft

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TransitionResult:
    success: bool
    status: Optional[ApplicationStatus] = None
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success


class LoanApplicationService:
    def __init__(
        self,
        gateway: LoanApplicationGateway,
        default_actor: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self._gateway = gateway
        self._default_actor = default_actor or settings.default_actor
        self._timeout = settings.storage_timeout_seconds if timeout_seconds is None else timeout_seconds

    async def _bounded(self, operation: str, call: Awaitable[T]) -> T:
        # wait_for cancels the storage coroutine on expiry; its session rolls back on the way out
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.error("%s exceeded %.1fs storage timeout", operation, self._timeout)
            raise StorageFault(f"{operation} timed out") from exc

    def _actor(self, actor: Optional[str]) -> str:
        return actor or self._default_actor

    async def create_draft(
        self,
        customer: Any,
        collateral: Any,
        proposed_loan: Any,
        actor: Optional[str] = None,
    ) -> LoanApplicationView:
        """Validate all sections, then persist applicant + DRAFT application in one transaction."""
        try:
            draft = validate_draft(customer, collateral, proposed_loan)
        except ValidationError as exc:
            logger.warning("Draft rejected: %s", exc.message)
            raise
        try:
            view = await self._bounded(
                "create_draft",
                self._gateway.create_draft(
                    draft.customer, draft.proposed_loan, draft.collateral, self._actor(actor)
                ),
            )
        except ConflictError as exc:
            logger.warning("Draft rejected: %s", exc.message)
            raise
        logger.info("Created draft application %s for customer %s", view.id, view.customer.id)
        return view

    async def get_application(self, application_id: str) -> Optional[LoanApplicationView]:
        return await self._bounded("get", self._gateway.get(application_id))

    async def submit_application(self, application_id: str, actor: Optional[str] = None) -> TransitionResult:
        accepted = await self._bounded("submit", self._gateway.submit(application_id, self._actor(actor)))
        return await self._outcome(application_id, ApplicationStatus.SUBMITTED, accepted)

    async def cancel_application(self, application_id: str, actor: Optional[str] = None) -> TransitionResult:
        accepted = await self._bounded("cancel", self._gateway.cancel(application_id, self._actor(actor)))
        return await self._outcome(application_id, ApplicationStatus.CANCELLED, accepted)

    async def _outcome(self, application_id: str, target: ApplicationStatus, accepted: bool) -> TransitionResult:
        if accepted:
            logger.info("Application %s -> %s", application_id, target.value)
            return TransitionResult(success=True, status=target)
        # Read after the refused update, only to explain it
        current = await self._bounded("get", self._gateway.get(application_id, include_deleted=True))
        status = current.status if current else None
        reason = rejection_reason(application_id, status, target)
        logger.info("Application %s not moved to %s: %s", application_id, target.value, reason)
        return TransitionResult(success=False, status=status, reason=reason)
