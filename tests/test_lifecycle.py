"""
Lifecycle rules: legal transitions, terminal states, rejection messages.
Run from the project root: python -m pytest tests/test_lifecycle.py -v
"""
import unittest

from services.lifecycle import (
    INITIAL_STATUS,
    ApplicationStatus,
    is_idempotent_repeat,
    rejection_reason,
    source_states,
)

DRAFT = ApplicationStatus.DRAFT
SUBMITTED = ApplicationStatus.SUBMITTED
CANCELLED = ApplicationStatus.CANCELLED


class TestLifecycle(unittest.TestCase):
    def test_initial_status_is_draft(self):
        self.assertEqual(INITIAL_STATUS, DRAFT)
        self.assertEqual(DRAFT.value, "DRAFT")

    def test_submit_only_from_draft(self):
        self.assertEqual(source_states(SUBMITTED), frozenset({DRAFT}))

    def test_cancel_from_draft_or_submitted(self):
        self.assertEqual(source_states(CANCELLED), frozenset({DRAFT, SUBMITTED}))

    def test_no_path_back_to_draft(self):
        self.assertEqual(source_states(DRAFT), frozenset())

    def test_cancelled_is_terminal(self):
        for target in ApplicationStatus:
            self.assertNotIn(CANCELLED, source_states(target))

    def test_repeat_cancel_is_idempotent(self):
        self.assertTrue(is_idempotent_repeat(CANCELLED, CANCELLED))
        self.assertFalse(is_idempotent_repeat(SUBMITTED, SUBMITTED))
        self.assertFalse(is_idempotent_repeat(DRAFT, CANCELLED))

    def test_accepts_raw_status_strings(self):
        self.assertEqual(source_states("SUBMITTED"), frozenset({DRAFT}))
        self.assertTrue(is_idempotent_repeat("CANCELLED", "CANCELLED"))

    def test_rejection_reason(self):
        self.assertIn("not found", rejection_reason("abc", None, SUBMITTED))
        reason = rejection_reason("abc", CANCELLED, SUBMITTED)
        self.assertIn("CANCELLED", reason)
        self.assertIn("DRAFT", reason)


if __name__ == "__main__":
    unittest.main()
