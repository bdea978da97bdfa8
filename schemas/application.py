from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictBool, field_serializer, field_validator

from services.lifecycle import ApplicationStatus

MIN_MANUFACTURING_YEAR = 2020

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def current_year() -> int:
    return date.today().year


class CollateralCategory(str, Enum):
    CAR = "CAR"
    MOTORCYCLE = "MOTORCYCLE"


class AddressData(BaseModel):
    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    zipcode: str = Field(..., min_length=3, max_length=10)


class CustomerData(BaseModel):
    """Applicant details as accepted at draft creation."""

    full_name: str = Field(..., pattern=r"^[a-zA-Z ]{3,100}$")
    date_of_birth: date
    id_number: str = Field(..., min_length=1, max_length=25)
    email: Optional[str] = None
    phone: str = Field(..., pattern=r"^[0-9]{6,30}$")
    address: AddressData

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def _date_of_birth_format(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        if not isinstance(value, str) or not _DATE_RE.match(value):
            raise ValueError("date_of_birth must be in YYYY-MM-DD format")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def _email_shape(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if not isinstance(value, str) or not _EMAIL_RE.match(value):
            raise ValueError("email is not valid")
        return value


class CollateralData(BaseModel):
    category: CollateralCategory
    brand: str = Field(..., min_length=1)
    variant: str = Field(..., min_length=1)
    manufacturing_year: int = Field(..., strict=True, ge=MIN_MANUFACTURING_YEAR)
    is_document_complete: StrictBool

    @field_validator("manufacturing_year")
    @classmethod
    def _not_in_future(cls, value: int) -> int:
        year = current_year()
        if value > year:
            raise ValueError(f"manufacturing_year must be between {MIN_MANUFACTURING_YEAR} and {year}")
        return value


class ProposedLoanData(BaseModel):
    tenure: int = Field(..., strict=True, ge=3, le=60, multiple_of=3, description="Months")
    amount: Decimal = Field(..., ge=100, le=50000)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_is_numeric(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ValueError("amount must be a number")
        return value

    @field_serializer("amount", when_used="json")
    def _amount_as_number(self, value: Decimal) -> float:
        return float(value)


class CustomerView(CustomerData):
    id: str
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str


class LoanApplicationView(BaseModel):
    """Composed read: the loan record joined with its applicant."""

    id: str
    status: ApplicationStatus
    customer: CustomerView
    proposed_loan: ProposedLoanData
    collateral: CollateralData
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str
    deleted: bool = False
    deleted_at: Optional[datetime] = None


class ApplicationDraftRequest(BaseModel):
    """Raw draft payload; field rules are enforced by services.validation, not here."""

    customer: Any = None
    collateral: Any = None
    proposed_loan: Any = Field(None, alias="proposedLoan")

    model_config = {"populate_by_name": True}


class TransitionResponse(BaseModel):
    id: str
    success: bool
    status: Optional[ApplicationStatus] = None
    reason: Optional[str] = None
