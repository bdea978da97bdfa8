from schemas.application import (
    AddressData,
    ApplicationDraftRequest,
    CollateralCategory,
    CollateralData,
    CustomerData,
    CustomerView,
    LoanApplicationView,
    ProposedLoanData,
    TransitionResponse,
)

__all__ = [
    "AddressData",
    "ApplicationDraftRequest",
    "CollateralCategory",
    "CollateralData",
    "CustomerData",
    "CustomerView",
    "LoanApplicationView",
    "ProposedLoanData",
    "TransitionResponse",
]
