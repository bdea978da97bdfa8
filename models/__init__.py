from models.application import LoanApplication
from models.customer import Customer

__all__ = [
    "Customer",
    "LoanApplication",
]
