from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase

from activities.services import review
from activities.services.submissions import SubmissionError
from activities.tests.utils import make_event, make_school, make_submission, make_user


class ReviewWorkflowTests(TestCase):
    def setUp(self):
        self.reviewer = make_user("reviewer", "evaluator")
        school = make_school("AHM-001", "St. Xavier's High School")
        self.submission = make_submission(make_event(), school)

    def test_approve_sets_score_comments_and_stamps(self):
        result = review.approve(self.submission, 92, "Excellent documentation", self.reviewer)
        self.submission.refresh_from_db()
        self.assertEqual(result.status, "approved")
        self.assertEqual(self.submission.status, "approved")
        self.assertEqual(self.submission.score, 92)
        self.assertEqual(self.submission.admin_comments, "Excellent documentation")
        self.assertEqual(self.submission.reviewed_by, self.reviewer)
        self.assertIsNotNone(self.submission.reviewed_at)

    def test_approve_rejects_out_of_range_or_non_integer_scores(self):
        for score in (0, 101, None, "85", 85.5, True):
            with self.subTest(score=score):
                with self.assertRaises(review.ReviewError):
                    review.approve(self.submission, score, "Fine", self.reviewer)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "pending")
        self.assertIsNone(self.submission.reviewed_at)

    def test_approve_boundaries(self):
        review.approve(self.submission, 100, "Perfect", self.reviewer)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.score, 100)

    def test_approve_requires_comments(self):
        with self.assertRaises(review.ReviewError):
            review.approve(self.submission, 80, "   ", self.reviewer)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "pending")

    def test_request_revision_keeps_score(self):
        review.request_revision(self.submission, "Add more photos", self.reviewer)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "revision_requested")
        self.assertIsNone(self.submission.score)
        self.assertEqual(self.submission.admin_comments, "Add more photos")

    def test_reject_needs_confirmation(self):
        with self.assertRaises(review.ReviewError):
            review.reject(self.submission, "Missing documentation", self.reviewer)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "pending")

        review.reject(self.submission, "Missing documentation", self.reviewer, confirmed=True)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "rejected")
        self.assertIsNone(self.submission.score)

    def test_reviewed_submission_cannot_be_reviewed_again(self):
        review.approve(self.submission, 75, "Good", self.reviewer)
        with self.assertRaises(review.InvalidTransition):
            review.reject(self.submission, "Changed my mind", self.reviewer, confirmed=True)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "approved")
        self.assertEqual(self.submission.score, 75)

    def test_resubmit_moves_revision_back_to_pending(self):
        review.request_revision(self.submission, "Add photos", self.reviewer)
        review.resubmit(self.submission, description="  Now with photos ", document_url="https://files.example/report.pdf")
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "pending")
        self.assertEqual(self.submission.short_description, "Now with photos")
        self.assertEqual(self.submission.document_url, "https://files.example/report.pdf")

    def test_resubmit_rejects_overlong_description(self):
        review.request_revision(self.submission, "Add photos", self.reviewer)
        with self.assertRaises(SubmissionError):
            review.resubmit(self.submission, description="word " * 300)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "revision_requested")
        self.assertEqual(self.submission.short_description, "We planted trees.")

    def test_resubmit_short_description_needs_document(self):
        review.request_revision(self.submission, "Add photos", self.reviewer)
        with self.assertRaises(SubmissionError):
            review.resubmit(self.submission, description="Just a few words")
        with self.assertRaises(SubmissionError):
            review.resubmit(self.submission)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, "revision_requested")

    def test_resubmit_only_from_revision_requested(self):
        with self.assertRaises(review.InvalidTransition):
            review.resubmit(self.submission)

    def test_persistence_error_propagates(self):
        with patch("activities.models.EventSubmission.save", side_effect=DatabaseError("connection lost")):
            with self.assertRaises(DatabaseError):
                review.approve(self.submission, 90, "Great", self.reviewer)
