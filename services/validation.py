"""
Field-level validation of raw draft input.
Each section (customer, collateral, proposed_loan) arrives as an untyped map and leaves
as a typed record; nothing downstream inspects the raw maps again.
Accepts snake_case or camelCase keys. No I/O.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from schemas.application import CollateralData, CustomerData, ProposedLoanData
from services.errors import ValidationError
from utils.case import dict_keys_to_snake

SECTION_CUSTOMER = "customer"
SECTION_COLLATERAL = "collateral"
SECTION_PROPOSED_LOAN = "proposed_loan"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ValidatedDraft:
    customer: CustomerData
    collateral: CollateralData
    proposed_loan: ProposedLoanData


def _format_issue(error: dict[str, Any]) -> str:
    field = ".".join(str(part) for part in error["loc"])
    message = error["msg"]
    # pydantic prefixes messages raised from our validators
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{field}: {message}" if field else message


def _validate_section(section: str, raw: Any, model: type[_ModelT]) -> _ModelT:
    if raw is None:
        raise ValidationError(section, f"{section} is required")
    if not isinstance(raw, Mapping):
        raise ValidationError(section, f"{section} must be an object")
    try:
        return model.model_validate(dict_keys_to_snake(dict(raw)))
    except PydanticValidationError as exc:
        issues = [{"section": section, "message": _format_issue(e)} for e in exc.errors()]
        raise ValidationError(section, issues[0]["message"], issues) from exc


def validate_customer(raw: Any) -> CustomerData:
    return _validate_section(SECTION_CUSTOMER, raw, CustomerData)


def validate_collateral(raw: Any) -> CollateralData:
    return _validate_section(SECTION_COLLATERAL, raw, CollateralData)


def validate_proposed_loan(raw: Any) -> ProposedLoanData:
    return _validate_section(SECTION_PROPOSED_LOAN, raw, ProposedLoanData)


def validate_draft(customer: Any, collateral: Any, proposed_loan: Any) -> ValidatedDraft:
    """
    Validate all three sections before returning anything.
    Raises ValidationError tagged with the first failing section (customer, collateral,
    proposed_loan order); `issues` lists every violation found across sections.
    """
    results: dict[str, BaseModel] = {}
    failures: list[ValidationError] = []
    for section, raw, validate in (
        (SECTION_CUSTOMER, customer, validate_customer),
        (SECTION_COLLATERAL, collateral, validate_collateral),
        (SECTION_PROPOSED_LOAN, proposed_loan, validate_proposed_loan),
    ):
        try:
            results[section] = validate(raw)
        except ValidationError as exc:
            failures.append(exc)

    if failures:
        first = failures[0]
        issues = [issue for failure in failures for issue in failure.issues]
        raise ValidationError(first.section, first.reason, issues)

    return ValidatedDraft(
        customer=results[SECTION_CUSTOMER],
        collateral=results[SECTION_COLLATERAL],
        proposed_loan=results[SECTION_PROPOSED_LOAN],
    )
