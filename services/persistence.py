"""
Transactional storage for loan applications and their applicants.

create_draft writes both rows in one transaction. submit and cancel are single conditional
UPDATEs whose affected-row count decides the outcome, so racing callers on the same id get
first-writer-wins without process-local locks. "Nothing matched" is reported as False/None;
driver errors are translated into ConflictError or StorageFault here and nowhere else.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import contains_eager

from models import Customer, LoanApplication
from schemas.application import (
    AddressData,
    CollateralData,
    CustomerData,
    CustomerView,
    LoanApplicationView,
    ProposedLoanData,
)
from services.errors import ConflictError, StorageFault
from services.lifecycle import INITIAL_STATUS, ApplicationStatus, is_idempotent_repeat, source_states

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_ID_NUMBER_MARKERS = ("uq_customers_id_number_active", "customers.id_number")


def _conflict_message(exc: IntegrityError) -> str:
    detail = str(exc.orig)
    if any(marker in detail for marker in _ID_NUMBER_MARKERS):
        return "A customer with this id_number already exists"
    return "The write conflicts with an existing record"


@asynccontextmanager
async def _translate_errors(operation: str, application_id: Optional[str] = None) -> AsyncIterator[None]:
    try:
        yield
    except IntegrityError as exc:
        logger.warning("%s rejected by constraint (application=%s): %s", operation, application_id, exc.orig)
        raise ConflictError(_conflict_message(exc)) from exc
    except SQLAlchemyError as exc:
        logger.error("%s failed (application=%s)", operation, application_id, exc_info=True)
        raise StorageFault(f"{operation} failed") from exc


def _to_view(app: LoanApplication, customer: Customer) -> LoanApplicationView:
    return LoanApplicationView(
        id=app.id,
        status=ApplicationStatus(app.loan_status),
        customer=CustomerView(
            id=customer.id,
            full_name=customer.full_name,
            date_of_birth=customer.date_of_birth,
            id_number=customer.id_number,
            email=customer.email,
            phone=customer.phone,
            address=AddressData(
                street=customer.address_street,
                city=customer.address_city,
                zipcode=customer.address_zipcode,
            ),
            created_at=customer.created_at,
            updated_at=customer.updated_at,
            created_by=customer.created_by,
            updated_by=customer.updated_by,
        ),
        proposed_loan=ProposedLoanData(tenure=app.tenure, amount=app.amount),
        collateral=CollateralData(
            category=app.collateral_category,
            brand=app.collateral_brand,
            variant=app.collateral_variant,
            manufacturing_year=app.collateral_manufacturing_year,
            is_document_complete=app.collateral_is_document_complete,
        ),
        created_at=app.created_at,
        updated_at=app.updated_at,
        created_by=app.created_by,
        updated_by=app.updated_by,
        deleted=app.deleted,
        deleted_at=app.deleted_at,
    )


class LoanApplicationGateway:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create_draft(
        self,
        customer: CustomerData,
        loan: ProposedLoanData,
        collateral: CollateralData,
        actor: str,
    ) -> LoanApplicationView:
        """Insert applicant and DRAFT application atomically; either both rows exist or neither."""
        now = _utcnow()
        customer_row = Customer(
            id=_new_id(),
            full_name=customer.full_name,
            date_of_birth=customer.date_of_birth,
            id_number=customer.id_number,
            email=customer.email,
            phone=customer.phone,
            address_street=customer.address.street,
            address_city=customer.address.city,
            address_zipcode=customer.address.zipcode,
            created_at=now,
            updated_at=now,
            created_by=actor,
            updated_by=actor,
            deleted=False,
        )
        app_row = LoanApplication(
            id=_new_id(),
            customer_id=customer_row.id,
            loan_status=INITIAL_STATUS.value,
            tenure=loan.tenure,
            amount=loan.amount,
            collateral_category=collateral.category.value,
            collateral_brand=collateral.brand,
            collateral_variant=collateral.variant,
            collateral_manufacturing_year=collateral.manufacturing_year,
            collateral_is_document_complete=collateral.is_document_complete,
            created_at=now,
            updated_at=now,
            created_by=actor,
            updated_by=actor,
            deleted=False,
        )
        async with _translate_errors("create_draft", app_row.id):
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(customer_row)
                    # applicant row must exist before the loan references it
                    await session.flush()
                    session.add(app_row)
                    await session.flush()
                    # the view reflects what storage holds, not the in-memory input
                    await session.refresh(customer_row)
                    await session.refresh(app_row)
        return _to_view(app_row, customer_row)

    async def get(self, application_id: str, include_deleted: bool = False) -> Optional[LoanApplicationView]:
        """Composed read of application + applicant; None when nothing matches."""
        stmt = (
            select(LoanApplication)
            .join(LoanApplication.customer)
            .options(contains_eager(LoanApplication.customer))
            .where(LoanApplication.id == application_id, Customer.deleted.is_(False))
        )
        if not include_deleted:
            stmt = stmt.where(LoanApplication.deleted.is_(False))
        async with _translate_errors("get", application_id):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                app = result.scalar_one_or_none()
                if app is None:
                    return None
                return _to_view(app, app.customer)

    async def submit(self, application_id: str, actor: str) -> bool:
        target = ApplicationStatus.SUBMITTED
        stmt = (
            update(LoanApplication)
            .where(
                LoanApplication.id == application_id,
                LoanApplication.loan_status.in_([s.value for s in source_states(target)]),
                LoanApplication.deleted.is_(False),
            )
            .values(loan_status=target.value, updated_at=_utcnow(), updated_by=actor)
            .execution_options(synchronize_session=False)
        )
        async with _translate_errors("submit", application_id):
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return result.rowcount == 1

    async def cancel(self, application_id: str, actor: str) -> bool:
        """Cancel and soft-delete. A repeat cancel reports True without touching the row."""
        target = ApplicationStatus.CANCELLED
        now = _utcnow()
        stmt = (
            update(LoanApplication)
            .where(
                LoanApplication.id == application_id,
                LoanApplication.loan_status.in_([s.value for s in source_states(target)]),
                LoanApplication.deleted.is_(False),
            )
            .values(
                loan_status=target.value,
                deleted=True,
                deleted_at=now,
                updated_at=now,
                updated_by=actor,
            )
            .execution_options(synchronize_session=False)
        )
        async with _translate_errors("cancel", application_id):
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    if result.rowcount == 1:
                        return True
                    current = await session.scalar(
                        select(LoanApplication.loan_status).where(LoanApplication.id == application_id)
                    )
                    return current is not None and is_idempotent_repeat(current, target)
