from datetime import datetime, timedelta, timezone

from django.test import SimpleTestCase

from activities.services.rankings import (
    LeaderboardFilters,
    RankingFilters,
    SubmissionRecord,
    aggregate_leaderboard,
    average_score,
    leaderboard_summary,
    rank_submissions,
    round_half_up,
    sort_submissions,
    status_counts,
    window_start,
)

NOW = datetime(2024, 3, 31, 15, 0, tzinfo=timezone.utc)


def rec(id, school_id, score, status="approved", school_name=None, chapter="Pune Karuna Kendra", days_ago=1,
        event="Tree Plantation", kc_no=None, submitted=True):
    ts = NOW - timedelta(days=days_ago)
    return SubmissionRecord(
        id=id,
        school_id=school_id,
        school_name=school_name or f"School {school_id}",
        kc_no=kc_no or f"KC-{school_id}",
        chapter_name=chapter,
        event_title=event,
        status=status,
        score=score,
        submitted_at=ts if submitted else None,
        created_at=ts,
    )


class WindowStartTests(SimpleTestCase):
    def test_all_has_no_lower_bound(self):
        self.assertIsNone(window_start("all", NOW))

    def test_today_starts_at_midnight(self):
        self.assertEqual(window_start("today", NOW), datetime(2024, 3, 31, tzinfo=timezone.utc))

    def test_week_is_seven_days(self):
        self.assertEqual(window_start("week", NOW), NOW - timedelta(days=7))

    def test_month_clamps_day_to_target_month(self):
        # 31 March minus one month lands on 29 February in a leap year
        self.assertEqual(window_start("month", NOW), datetime(2024, 2, 29, 15, 0, tzinfo=timezone.utc))

    def test_quarter_and_year(self):
        self.assertEqual(window_start("quarter", NOW), datetime(2023, 12, 31, 15, 0, tzinfo=timezone.utc))
        self.assertEqual(window_start("year", NOW), datetime(2023, 3, 31, 15, 0, tzinfo=timezone.utc))

    def test_unknown_window_raises(self):
        with self.assertRaises(ValueError):
            window_start("decade", NOW)


class LeaderboardAggregationTests(SimpleTestCase):
    def test_groups_by_school_and_rounds_half_up(self):
        entries = aggregate_leaderboard([rec(1, 1, 90), rec(2, 1, 85), rec(3, 2, 88)])
        self.assertEqual(len(entries), 2)
        school_1 = next(e for e in entries if e.school_id == 1)
        self.assertEqual(school_1.total_score, 175)
        self.assertEqual(school_1.submissions_count, 2)
        self.assertEqual(school_1.approved_submissions, 2)
        # 87.5 rounds up to 88
        self.assertEqual(school_1.average_score, 88)

    def test_ties_on_average_break_on_total_then_name_then_id(self):
        entries = aggregate_leaderboard(
            [
                rec(1, 10, 88, school_name="Zeta School"),
                rec(2, 20, 88, school_name="alpha school"),
                rec(3, 30, 88, school_name="Beta School"),
                rec(4, 30, 88, school_name="Beta School"),
                rec(5, 40, 88, school_name="Alpha School"),
            ]
        )
        self.assertEqual([e.school_id for e in entries], [30, 20, 40, 10])
        self.assertEqual([e.rank for e in entries], [1, 2, 3, 4])

    def test_only_approved_scored_submissions_count(self):
        entries = aggregate_leaderboard(
            [
                rec(1, 1, 95, status="pending"),
                rec(2, 1, None),
                rec(3, 1, 70, status="rejected"),
                rec(4, 2, 60),
            ]
        )
        self.assertEqual([e.school_id for e in entries], [2])

    def test_chapter_filter_is_case_insensitive_exact(self):
        records = [rec(1, 1, 90, chapter="Pune Karuna Kendra"), rec(2, 2, 80, chapter="Pune Karuna Kendra East")]
        entries = aggregate_leaderboard(records, LeaderboardFilters(chapter="pune karuna kendra"))
        self.assertEqual([e.school_id for e in entries], [1])

    def test_window_uses_submitted_at_then_created_at(self):
        records = [
            rec(1, 1, 90, days_ago=2),
            rec(2, 2, 80, days_ago=10),
            rec(3, 3, 70, days_ago=3, submitted=False),
        ]
        entries = aggregate_leaderboard(records, LeaderboardFilters(window="week", now=NOW))
        self.assertEqual([e.school_id for e in entries], [1, 3])

    def test_three_scores_average_to_nearest_integer(self):
        entries = aggregate_leaderboard([rec(1, 7, 92), rec(2, 7, 88), rec(3, 7, 95)])
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].total_score, 275)
        # 91.67 rounds to 92
        self.assertEqual(entries[0].average_score, 92)

    def test_aggregation_is_repeatable(self):
        records = [
            rec(1, 1, 90, school_name="Campion School"),
            rec(2, 2, 90, school_name="Bishop Cotton"),
            rec(3, 1, 70, school_name="Campion School"),
            rec(4, 3, 80, school_name="Anand Vidyalaya"),
            rec(5, 2, 70, school_name="Bishop Cotton"),
        ]

        def snapshot(entries):
            return [(e.school_id, e.total_score, e.average_score, e.rank) for e in entries]

        first = snapshot(aggregate_leaderboard(records))
        self.assertEqual(first, snapshot(aggregate_leaderboard(records)))
        self.assertEqual(first, snapshot(aggregate_leaderboard(list(reversed(records)))))
        # all average 80: higher total first, then name
        self.assertEqual([row[0] for row in first], [2, 1, 3])

    def test_empty_input_gives_empty_leaderboard(self):
        self.assertEqual(aggregate_leaderboard([]), [])

    def test_summary_counts_schools_and_submissions(self):
        entries = aggregate_leaderboard([rec(1, 1, 90), rec(2, 1, 85), rec(3, 2, 88), rec(4, 3, 71)])
        # averages 88, 88 and 71 give 82.33
        self.assertEqual(
            leaderboard_summary(entries), {"total_schools": 3, "total_submissions": 4, "avg_score": 82}
        )
        self.assertEqual(leaderboard_summary([]), {"total_schools": 0, "total_submissions": 0, "avg_score": 0})


class RankingsReportTests(SimpleTestCase):
    def test_score_desc_nulls_as_zero_then_earlier_first(self):
        records = [
            rec(1, 1, None, status="pending", days_ago=5),
            rec(2, 2, 80, days_ago=1),
            rec(3, 3, 80, days_ago=4),
            rec(4, 4, 95, days_ago=2),
        ]
        ranked = rank_submissions(records)
        self.assertEqual([r.record.id for r in ranked], [4, 3, 2, 1])
        self.assertEqual([r.rank for r in ranked], [1, 2, 3, 4])

    def test_nulls_sort_last_and_equal_scores_keep_submission_order(self):
        records = [rec(i, i, score, days_ago=1) for i, score in enumerate([None, 40, 95, 95, 70], start=1)]
        ranked = rank_submissions(records)
        self.assertEqual([r.record.score for r in ranked], [95, 95, 70, 40, None])
        # same timestamp, so the lower id wins the tie
        self.assertEqual([r.record.id for r in ranked], [3, 4, 5, 2, 1])
        self.assertEqual([r.rank for r in ranked], [1, 2, 3, 4, 5])

    def test_equal_scores_rank_earlier_submission_first(self):
        records = [rec(1, 1, 95, days_ago=1), rec(2, 2, 95, days_ago=3)]
        self.assertEqual([r.record.id for r in rank_submissions(records)], [2, 1])

    def test_filters_are_conjunctive(self):
        records = [
            rec(1, 1, 90, school_name="Campion School", chapter="Mumbai Karuna Kendra"),
            rec(2, 2, 80, school_name="Campion Annex", chapter="Pune Karuna Kendra"),
            rec(3, 3, 70, school_name="Campion School", chapter="Mumbai Karuna Kendra", status="pending"),
        ]
        ranked = rank_submissions(
            records, RankingFilters(search="campion", status="approved", chapter="Mumbai Karuna Kendra")
        )
        self.assertEqual([r.record.id for r in ranked], [1])

    def test_search_matches_kc_number_and_event_title(self):
        records = [rec(1, 1, 90, kc_no="MUM-003"), rec(2, 2, 80, event="Essay Competition")]
        self.assertEqual([r.record.id for r in rank_submissions(records, RankingFilters(search="mum-"))], [1])
        self.assertEqual([r.record.id for r in rank_submissions(records, RankingFilters(search="ESSAY"))], [2])


class SubmissionListHelpersTests(SimpleTestCase):
    def test_rank_sort_groups_by_status_then_score(self):
        records = [
            rec(1, 1, None, status="rejected"),
            rec(2, 2, None, status="pending"),
            rec(3, 3, 70),
            rec(4, 4, 90),
            rec(5, 5, None, status="revision_requested"),
        ]
        self.assertEqual([r.id for r in sort_submissions(records, "rank")], [4, 3, 2, 5, 1])

    def test_score_and_date_sort_respect_order(self):
        records = [rec(1, 1, 50, days_ago=1), rec(2, 2, 90, days_ago=3), rec(3, 3, 70, days_ago=2)]
        self.assertEqual([r.id for r in sort_submissions(records, "score", "desc")], [2, 3, 1])
        self.assertEqual([r.id for r in sort_submissions(records, "date", "asc")], [2, 3, 1])

    def test_status_counts_and_average(self):
        records = [rec(1, 1, 91), rec(2, 2, 80), rec(3, 3, None, status="pending"), rec(4, 4, None, status="rejected")]
        counts = status_counts(records)
        self.assertEqual(counts["total"], 4)
        self.assertEqual(counts["approved"], 2)
        self.assertEqual(counts["pending"], 1)
        self.assertEqual(counts["rejected"], 1)
        self.assertEqual(counts["revision_requested"], 0)
        self.assertEqual(average_score(records), 86)
        self.assertIsNone(average_score([]))

    def test_round_half_up(self):
        self.assertEqual(round_half_up(84.5), 85)
        self.assertEqual(round_half_up(84.49), 84)
