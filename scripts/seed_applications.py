"""
Seed sample draft loan applications through the application service.
Run: python -m scripts.seed_applications (from the project root).
Applicants whose id_number already exists are skipped.
"""
import asyncio
import os
import sys

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import AsyncSessionLocal, init_db
from services.applications import LoanApplicationService
from services.errors import ConflictError
from services.persistence import LoanApplicationGateway


APPLICATIONS_DATA = [
    {
        "customer": {
            "full_name": "John Doe",
            "date_of_birth": "1990-04-12",
            "id_number": "3174000000000001",
            "email": "john.doe@example.com",
            "phone": "1234567890",
            "address": {"street": "12 Main Street", "city": "Jakarta", "zipcode": "10110"},
        },
        "collateral": {
            "category": "CAR",
            "brand": "Toyota",
            "variant": "Avanza 1.5 G",
            "manufacturing_year": 2021,
            "is_document_complete": True,
        },
        "proposed_loan": {"tenure": 12, "amount": 5000.00},
    },
    {
        "customer": {
            "full_name": "Siti Rahma",
            "date_of_birth": "1995-09-30",
            "id_number": "3273000000000002",
            "phone": "081234567",
            "address": {"street": "7 Jalan Merdeka", "city": "Bandung", "zipcode": "40111"},
        },
        "collateral": {
            "category": "MOTORCYCLE",
            "brand": "Honda",
            "variant": "Vario 160",
            "manufacturing_year": 2023,
            "is_document_complete": False,
        },
        "proposed_loan": {"tenure": 24, "amount": 1500},
    },
]


async def seed():
    await init_db()
    service = LoanApplicationService(LoanApplicationGateway(AsyncSessionLocal), default_actor="seed_script")
    for data in APPLICATIONS_DATA:
        try:
            view = await service.create_draft(data["customer"], data["collateral"], data["proposed_loan"])
        except ConflictError:
            print(f"Applicant {data['customer']['id_number']} already exists, skipping")
            continue
        print(f"Seeded draft {view.id} for {view.customer.full_name}")
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
