import calendar
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from typing import Dict, Iterable, List, Optional

from django.utils import timezone


WINDOWS = ("all", "today", "week", "month", "quarter", "year")

STATUS_ORDER = {"approved": 0, "pending": 1, "revision_requested": 2, "rejected": 3}


@dataclass(frozen=True)
class SubmissionRecord:
    id: object
    school_id: object
    school_name: str
    kc_no: str
    chapter_name: str
    event_title: str
    status: str
    score: Optional[int]
    submitted_at: Optional[datetime]
    created_at: Optional[datetime]

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.submitted_at or self.created_at


@dataclass
class RankedEntry:
    school_id: object
    school_name: str
    kc_no: str
    chapter_name: str
    total_score: int
    submissions_count: int
    approved_submissions: int
    average_score: int
    rank: int = 0

    def as_dict(self) -> dict:
        return {
            "rank": self.rank,
            "school_id": self.school_id,
            "school_name": self.school_name,
            "kc_no": self.kc_no,
            "chapter_name": self.chapter_name,
            "total_score": self.total_score,
            "submissions_count": self.submissions_count,
            "approved_submissions": self.approved_submissions,
            "average_score": self.average_score,
        }


@dataclass
class RankedSubmission:
    record: SubmissionRecord
    rank: int

    def as_dict(self) -> dict:
        r = self.record
        return {
            "rank": self.rank,
            "id": r.id,
            "school_id": r.school_id,
            "school_name": r.school_name,
            "kc_no": r.kc_no,
            "chapter_name": r.chapter_name,
            "event_title": r.event_title,
            "status": r.status,
            "score": r.score,
            "submitted_at": r.submitted_at.isoformat() if r.submitted_at else None,
        }


@dataclass
class LeaderboardFilters:
    window: str = "all"
    chapter: Optional[str] = None
    now: Optional[datetime] = None


@dataclass
class RankingFilters:
    search: str = ""
    status: Optional[str] = None
    chapter: Optional[str] = None
    window: str = "all"
    now: Optional[datetime] = None


def _months_back(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_start(window: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Lower bound of a time window, or None for "all".

    Month based windows step back whole calendar months and clamp the day
    to the length of the target month (31 March minus one month is 28/29 Feb).
    """
    if window not in WINDOWS:
        raise ValueError(f"Unknown time window: {window}")
    if window == "all":
        return None
    now = now or timezone.localtime()
    if window == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window == "week":
        return now - timedelta(days=7)
    if window == "month":
        return _months_back(now, 1)
    if window == "quarter":
        return _months_back(now, 3)
    return _months_back(now, 12)


def _chapter_matches(record: SubmissionRecord, chapter: Optional[str]) -> bool:
    if not chapter:
        return True
    return (record.chapter_name or "").casefold() == chapter.strip().casefold()


def _in_window(record: SubmissionRecord, start: Optional[datetime]) -> bool:
    if start is None:
        return True
    ts = record.timestamp
    return ts is not None and ts >= start


def _id_key(value):
    # numeric ids compare numerically, fixture ids such as "demo-school-3" as text
    if isinstance(value, int):
        return (0, value, "")
    return (1, 0, str(value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rank_entries(entries: List[RankedEntry]) -> List[RankedEntry]:
    """Sort leaderboard rows and assign 1-based ranks in place."""
    entries.sort(
        key=lambda e: (-e.average_score, -e.total_score, (e.school_name or "").casefold(), _id_key(e.school_id))
    )
    for position, entry in enumerate(entries, start=1):
        entry.rank = position
    return entries


def aggregate_leaderboard(
    submissions: Iterable[SubmissionRecord], filters: Optional[LeaderboardFilters] = None
) -> List[RankedEntry]:
    filters = filters or LeaderboardFilters()
    start = window_start(filters.window, filters.now)

    groups: Dict[object, RankedEntry] = {}
    for record in submissions:
        if record.status != "approved" or record.score is None:
            continue
        if not _in_window(record, start) or not _chapter_matches(record, filters.chapter):
            continue
        entry = groups.get(record.school_id)
        if entry is None:
            entry = RankedEntry(
                school_id=record.school_id,
                school_name=record.school_name,
                kc_no=record.kc_no,
                chapter_name=record.chapter_name,
                total_score=0,
                submissions_count=0,
                approved_submissions=0,
                average_score=0,
            )
            groups[record.school_id] = entry
        entry.total_score += record.score
        entry.submissions_count += 1
        entry.approved_submissions += 1

    for entry in groups.values():
        entry.average_score = round_half_up(entry.total_score / entry.submissions_count)
    return rank_entries(list(groups.values()))


def leaderboard_summary(entries: List[RankedEntry]) -> Dict[str, int]:
    """Headline figures shown above the leaderboard; zeros when it is empty."""
    if not entries:
        return {"total_schools": 0, "total_submissions": 0, "avg_score": 0}
    return {
        "total_schools": len(entries),
        "total_submissions": sum(e.submissions_count for e in entries),
        "avg_score": round_half_up(sum(e.average_score for e in entries) / len(entries)),
    }


def _matches_search(record: SubmissionRecord, search: str) -> bool:
    needle = search.strip().casefold()
    if not needle:
        return True
    haystacks = (record.school_name, record.kc_no, record.event_title)
    return any(needle in (h or "").casefold() for h in haystacks)


def rank_submissions(
    submissions: Iterable[SubmissionRecord], filters: Optional[RankingFilters] = None
) -> List[RankedSubmission]:
    filters = filters or RankingFilters()
    start = window_start(filters.window, filters.now)
    status = filters.status if filters.status and filters.status != "all" else None

    kept = [
        r
        for r in submissions
        if _matches_search(r, filters.search or "")
        and (status is None or r.status == status)
        and _chapter_matches(r, filters.chapter)
        and _in_window(r, start)
    ]
    far_future = datetime.max.replace(tzinfo=dt_timezone.utc)
    kept.sort(key=lambda r: (-(r.score or 0), r.timestamp or far_future, _id_key(r.id)))
    return [RankedSubmission(record=r, rank=i) for i, r in enumerate(kept, start=1)]


def sort_submissions(records: Iterable[SubmissionRecord], sort_by: str = "rank", order: str = "desc") -> List[SubmissionRecord]:
    """
    Ordering for the admin submissions list.

    ``rank`` groups by review status (approved first) and then puts the best
    scores on top; ``order`` only applies to the ``date`` and ``score`` keys.
    """
    records = list(records)
    if sort_by == "rank":
        return sorted(records, key=lambda r: (STATUS_ORDER.get(r.status, len(STATUS_ORDER)), -(r.score or 0)))
    reverse = order != "asc"
    if sort_by == "score":
        return sorted(records, key=lambda r: r.score or 0, reverse=reverse)
    if sort_by == "date":
        epoch = datetime.min.replace(tzinfo=dt_timezone.utc)
        return sorted(records, key=lambda r: r.timestamp or epoch, reverse=reverse)
    raise ValueError(f"Unknown sort key: {sort_by}")


def status_counts(records: Iterable[SubmissionRecord]) -> Dict[str, int]:
    counts = {"total": 0, "pending": 0, "approved": 0, "rejected": 0, "revision_requested": 0}
    for record in records:
        counts["total"] += 1
        if record.status in counts:
            counts[record.status] += 1
    return counts


def average_score(records: Iterable[SubmissionRecord]) -> Optional[int]:
    scores = [r.score for r in records if r.score is not None]
    if not scores:
        return None
    return round_half_up(sum(scores) / len(scores))


def record_from_submission(submission) -> SubmissionRecord:
    school = submission.school
    return SubmissionRecord(
        id=submission.id,
        school_id=school.id,
        school_name=school.school_name,
        kc_no=school.kc_no,
        chapter_name=school.chapter_name,
        event_title=submission.event.title,
        status=submission.status,
        score=submission.score,
        submitted_at=submission.submitted_at,
        created_at=submission.created_at,
    )


def records_from_queryset(queryset) -> List[SubmissionRecord]:
    queryset = queryset.select_related("school__chapter", "event")
    return [record_from_submission(s) for s in queryset]


def record_from_fixture(row: dict) -> SubmissionRecord:
    return SubmissionRecord(
        id=row["id"],
        school_id=row["school_id"],
        school_name=row["school_name"],
        kc_no=row.get("kc_no", ""),
        chapter_name=row.get("chapter_name", ""),
        event_title=row.get("event_title", ""),
        status=row["status"],
        score=row.get("score"),
        submitted_at=row.get("submitted_at"),
        created_at=row.get("created_at"),
    )
