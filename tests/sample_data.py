"""Shared raw inputs and a throwaway SQLite store for the test modules."""
import copy
import os
import tempfile

from sqlalchemy.pool import NullPool

from database import build_engine, build_session_factory, init_db
from services.persistence import LoanApplicationGateway

_CUSTOMER = {
    "full_name": "John Doe",
    "date_of_birth": "1990-04-12",
    "id_number": "3174000000000001",
    "email": "john.doe@example.com",
    "phone": "1234567890",
    "address": {"street": "12 Main Street", "city": "Jakarta", "zipcode": "10110"},
}

_COLLATERAL = {
    "category": "CAR",
    "brand": "Toyota",
    "variant": "Avanza 1.5 G",
    "manufacturing_year": 2021,
    "is_document_complete": True,
}

_PROPOSED_LOAN = {"tenure": 12, "amount": 5000.00}


def customer(**overrides):
    data = copy.deepcopy(_CUSTOMER)
    data.update(overrides)
    return data


def collateral(**overrides):
    data = copy.deepcopy(_COLLATERAL)
    data.update(overrides)
    return data


def proposed_loan(**overrides):
    data = copy.deepcopy(_PROPOSED_LOAN)
    data.update(overrides)
    return data


class TemporaryStore:
    """File-backed SQLite database so concurrent sessions get separate connections."""

    def __init__(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.url = f"sqlite+aiosqlite:///{os.path.join(self._tmp.name, 'loans.db')}"
        self.engine = build_engine(self.url, poolclass=NullPool)
        self.session_factory = build_session_factory(self.engine)
        self.gateway = LoanApplicationGateway(self.session_factory)

    async def open(self):
        await init_db(self.engine)
        return self

    async def close(self):
        await self.engine.dispose()
        self._tmp.cleanup()
