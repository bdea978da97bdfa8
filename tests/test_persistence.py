"""
Persistence gateway against a temporary SQLite database: atomic create, composed reads,
conditional status updates and error translation.
Run from the project root: python -m pytest tests/test_persistence.py -v
"""
import asyncio
import unittest
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import NullPool

from database import build_engine, build_session_factory, is_sqlite_url
from models import Customer, LoanApplication
from services.errors import ConflictError, StorageFault
from services.lifecycle import ApplicationStatus
from services.persistence import LoanApplicationGateway, _conflict_message
from services.validation import validate_draft
from sample_data import TemporaryStore, collateral, customer, proposed_loan


def _draft(**customer_overrides):
    return validate_draft(customer(**customer_overrides), collateral(), proposed_loan())


class GatewayTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = await TemporaryStore().open()
        self.gateway = self.store.gateway

    async def asyncTearDown(self):
        await self.store.close()

    async def _create(self, **customer_overrides):
        draft = _draft(**customer_overrides)
        return await self.gateway.create_draft(draft.customer, draft.proposed_loan, draft.collateral, "tester")

    async def _count(self, model):
        async with self.store.session_factory() as session:
            return await session.scalar(select(func.count()).select_from(model))


class TestCreateAndGet(GatewayTestCase):
    async def test_create_returns_composed_draft(self):
        view = await self._create()
        self.assertEqual(view.status, ApplicationStatus.DRAFT)
        self.assertEqual(view.customer.full_name, "John Doe")
        self.assertEqual(view.created_by, "tester")
        self.assertEqual(view.customer.updated_by, "tester")
        self.assertFalse(view.deleted)
        self.assertNotEqual(view.id, view.customer.id)

    async def test_round_trip(self):
        draft = _draft()
        created = await self.gateway.create_draft(draft.customer, draft.proposed_loan, draft.collateral, "tester")
        fetched = await self.gateway.get(created.id)
        self.assertIsNotNone(fetched)
        self.assertEqual(fetched.id, created.id)
        self.assertEqual(fetched.status, ApplicationStatus.DRAFT)
        self.assertEqual(
            fetched.customer.model_dump(include=set(type(draft.customer).model_fields)),
            draft.customer.model_dump(),
        )
        self.assertEqual(fetched.collateral, draft.collateral)
        self.assertEqual(fetched.proposed_loan.tenure, 12)
        self.assertEqual(fetched.proposed_loan.amount, Decimal("5000.00"))

    async def test_amount_kept_beyond_two_decimals(self):
        for raw_amount, expected in ((1234.567, Decimal("1234.567")), (49999.999, Decimal("49999.999"))):
            with self.subTest(amount=raw_amount):
                draft = validate_draft(
                    customer(id_number=f"AMT-{raw_amount}"), collateral(), proposed_loan(amount=raw_amount)
                )
                created = await self.gateway.create_draft(
                    draft.customer, draft.proposed_loan, draft.collateral, "tester"
                )
                fetched = await self.gateway.get(created.id)
                self.assertEqual(created.proposed_loan.amount, expected)
                self.assertEqual(fetched.proposed_loan, created.proposed_loan)
                self.assertEqual(fetched.proposed_loan, draft.proposed_loan)

    async def test_get_unknown_returns_none(self):
        self.assertIsNone(await self.gateway.get("does-not-exist"))

    async def test_duplicate_id_number_is_conflict_and_rolls_back(self):
        await self._create()
        with self.assertRaises(ConflictError):
            await self._create(full_name="Someone Else")
        self.assertEqual(await self._count(Customer), 1)
        self.assertEqual(await self._count(LoanApplication), 1)

    async def test_distinct_applicants_coexist(self):
        await self._create()
        await self._create(id_number="3174000000000002")
        self.assertEqual(await self._count(Customer), 2)
        self.assertEqual(await self._count(LoanApplication), 2)


class TestTransitions(GatewayTestCase):
    async def test_submit_draft(self):
        view = await self._create()
        self.assertTrue(await self.gateway.submit(view.id, "reviewer"))
        fetched = await self.gateway.get(view.id)
        self.assertEqual(fetched.status, ApplicationStatus.SUBMITTED)
        self.assertEqual(fetched.updated_by, "reviewer")
        self.assertEqual(fetched.created_by, "tester")

    async def test_submit_twice_second_is_false(self):
        view = await self._create()
        self.assertTrue(await self.gateway.submit(view.id, "a"))
        self.assertFalse(await self.gateway.submit(view.id, "a"))

    async def test_submit_unknown_is_false(self):
        self.assertFalse(await self.gateway.submit("does-not-exist", "a"))

    async def test_submit_cancelled_is_false(self):
        view = await self._create()
        self.assertTrue(await self.gateway.cancel(view.id, "a"))
        self.assertFalse(await self.gateway.submit(view.id, "a"))

    async def test_cancel_soft_deletes_loan_only(self):
        view = await self._create()
        self.assertTrue(await self.gateway.cancel(view.id, "canceller"))
        self.assertIsNone(await self.gateway.get(view.id))
        stored = await self.gateway.get(view.id, include_deleted=True)
        self.assertEqual(stored.status, ApplicationStatus.CANCELLED)
        self.assertTrue(stored.deleted)
        self.assertIsNotNone(stored.deleted_at)
        self.assertEqual(stored.updated_by, "canceller")
        async with self.store.session_factory() as session:
            applicant = await session.get(Customer, view.customer.id)
        self.assertFalse(applicant.deleted)

    async def test_cancel_is_idempotent(self):
        view = await self._create()
        self.assertTrue(await self.gateway.cancel(view.id, "a"))
        first = await self.gateway.get(view.id, include_deleted=True)
        self.assertTrue(await self.gateway.cancel(view.id, "b"))
        second = await self.gateway.get(view.id, include_deleted=True)
        self.assertEqual(second.status, ApplicationStatus.CANCELLED)
        self.assertEqual(second.updated_by, first.updated_by)

    async def test_cancel_submitted(self):
        view = await self._create()
        await self.gateway.submit(view.id, "a")
        self.assertTrue(await self.gateway.cancel(view.id, "a"))

    async def test_cancel_unknown_is_false(self):
        self.assertFalse(await self.gateway.cancel("does-not-exist", "a"))

    async def test_concurrent_submits_single_winner(self):
        view = await self._create()
        results = await asyncio.gather(
            self.gateway.submit(view.id, "first"),
            self.gateway.submit(view.id, "second"),
        )
        self.assertEqual(sorted(results), [False, True])
        fetched = await self.gateway.get(view.id)
        self.assertEqual(fetched.status, ApplicationStatus.SUBMITTED)


class TestConflictMessages(unittest.TestCase):
    def test_duplicate_id_number_named(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: customers.id_number"))
        self.assertIn("id_number", _conflict_message(exc))

    def test_other_constraints_get_general_message(self):
        exc = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        message = _conflict_message(exc)
        self.assertNotIn("id_number", message)
        self.assertIn("conflicts", message)


class TestEngineOptions(unittest.TestCase):
    def test_dialect_detection(self):
        self.assertTrue(is_sqlite_url("sqlite+aiosqlite:///./loans.db"))
        self.assertFalse(is_sqlite_url("postgresql+asyncpg://u:p@localhost/loans"))


class TestStorageFaults(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = build_engine(
            "sqlite+aiosqlite:////nonexistent-directory/loans.db", poolclass=NullPool
        )
        self.gateway = LoanApplicationGateway(build_session_factory(self.engine))

    async def asyncTearDown(self):
        await self.engine.dispose()

    async def test_unreachable_database_raises_storage_fault(self):
        with self.assertRaises(StorageFault) as ctx:
            await self.gateway.get("any")
        self.assertNotIn("nonexistent", ctx.exception.to_response()["error"]["message"])

    async def test_transition_failure_is_not_a_boolean(self):
        with self.assertRaises(StorageFault):
            await self.gateway.submit("any", "a")


if __name__ == "__main__":
    unittest.main()
