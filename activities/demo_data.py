"""
Static demo rows served when ``DEMO_FIXTURES_ENABLED`` is on and a list
query fails or returns nothing. Ids are strings so they never collide with
database primary keys.
"""
from datetime import datetime, timezone

DEMO_CHAPTERS = [
    "Ahmedabad Karuna Kendra",
    "Pune Karuna Kendra",
    "Mumbai Karuna Kendra",
    "Bangalore Karuna Kendra",
    "Chennai Karuna Kendra",
    "Hyderabad Karuna Kendra",
    "Delhi Karuna Kendra",
    "Kolkata Karuna Kendra",
]

DEMO_SCHOOLS = [
    {"id": "demo-school-1", "kc_no": "AHM-001", "school_name": "St. Xavier's High School",
     "principal_name": "Dr. Ramesh Kumar", "contact_number": "9876543210", "email": "xavier@school.edu",
     "kendra_name": "Ahmedabad Karuna Kendra", "status": "approved"},
    {"id": "demo-school-2", "kc_no": "PUN-002", "school_name": "Delhi Public School",
     "principal_name": "Mrs. Sunita Sharma", "contact_number": "9876543211", "email": "dps@school.edu",
     "kendra_name": "Pune Karuna Kendra", "status": "approved"},
    {"id": "demo-school-3", "kc_no": "MUM-003", "school_name": "Campion School",
     "principal_name": "Fr. Thomas D'Souza", "contact_number": "9876543212", "email": "campion@school.edu",
     "kendra_name": "Mumbai Karuna Kendra", "status": "approved"},
    {"id": "demo-school-4", "kc_no": "BLR-004", "school_name": "Bishop Cotton Boys School",
     "principal_name": "Mr. John Abraham", "contact_number": "9876543213", "email": "bishopscotton@school.edu",
     "kendra_name": "Bangalore Karuna Kendra", "status": "approved"},
    {"id": "demo-school-5", "kc_no": "CHN-005", "school_name": "Kendriya Vidyalaya",
     "principal_name": "Mrs. Lakshmi Narayanan", "contact_number": "9876543214", "email": "kv@school.edu",
     "kendra_name": "Chennai Karuna Kendra", "status": "approved"},
    {"id": "demo-school-6", "kc_no": "HYD-006", "school_name": "GITAM Public School",
     "principal_name": "Dr. Venkat Reddy", "contact_number": "9876543215", "email": "gitam@school.edu",
     "kendra_name": "Hyderabad Karuna Kendra", "status": "approved"},
]


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


DEMO_SUBMISSIONS = [
    {"id": "sub-1", "school_id": "demo-school-1", "school_name": "St. Xavier's High School", "kc_no": "AHM-001",
     "chapter_name": "Ahmedabad Karuna Kendra", "event_title": "Annual Tree Plantation Drive 2024",
     "teacher_name": "Mrs. Priya Sharma", "status": "approved", "score": 92,
     "admin_comments": "Excellent submission with great documentation", "submitted_at": _ts("2024-12-05T10:30:00")},
    {"id": "sub-2", "school_id": "demo-school-2", "school_name": "Delhi Public School", "kc_no": "PUN-002",
     "chapter_name": "Pune Karuna Kendra", "event_title": "Inter-School Essay Competition",
     "teacher_name": "Mr. Rajesh Kumar", "status": "pending", "score": None,
     "admin_comments": "", "submitted_at": _ts("2024-12-06T14:15:00")},
    {"id": "sub-3", "school_id": "demo-school-3", "school_name": "Campion School", "kc_no": "MUM-003",
     "chapter_name": "Mumbai Karuna Kendra", "event_title": "Karuna Week Celebration",
     "teacher_name": "Ms. Anjali Verma", "status": "approved", "score": 88,
     "admin_comments": "Good effort, well organized event", "submitted_at": _ts("2024-12-04T09:00:00")},
    {"id": "sub-4", "school_id": "demo-school-4", "school_name": "Bishop Cotton Boys School", "kc_no": "BLR-004",
     "chapter_name": "Bangalore Karuna Kendra", "event_title": "Annual Tree Plantation Drive 2024",
     "teacher_name": "Dr. Suresh Menon", "status": "rejected", "score": None,
     "admin_comments": "Please resubmit with proper documentation and photos", "submitted_at": _ts("2024-12-03T16:45:00")},
    {"id": "sub-5", "school_id": "demo-school-5", "school_name": "Kendriya Vidyalaya", "kc_no": "CHN-005",
     "chapter_name": "Chennai Karuna Kendra", "event_title": "Animal Welfare Awareness Program",
     "teacher_name": "Mrs. Padma Lakshmi", "status": "pending", "score": None,
     "admin_comments": "", "submitted_at": _ts("2024-12-07T11:20:00")},
    {"id": "sub-6", "school_id": "demo-school-6", "school_name": "GITAM Public School", "kc_no": "HYD-006",
     "chapter_name": "Hyderabad Karuna Kendra", "event_title": "Inter-School Essay Competition",
     "teacher_name": "Mr. Venkata Rao", "status": "approved", "score": 95,
     "admin_comments": "Outstanding work! Featured in newsletter", "submitted_at": _ts("2024-12-02T08:30:00")},
]
for _row in DEMO_SUBMISSIONS:
    _row["created_at"] = _row["submitted_at"]

DEMO_LEADERBOARD = [
    {"school_id": "demo-school-5", "school_name": "Campion School", "kc_no": "MUM-003",
     "chapter_name": "Mumbai Karuna Kendra", "total_score": 475, "submissions_count": 5, "average_score": 95},
    {"school_id": "demo-school-1", "school_name": "St. Xavier's High School", "kc_no": "AHM-001",
     "chapter_name": "Ahmedabad Karuna Kendra", "total_score": 368, "submissions_count": 4, "average_score": 92},
    {"school_id": "demo-school-6", "school_name": "GITAM Public School", "kc_no": "HYD-006",
     "chapter_name": "Hyderabad Karuna Kendra", "total_score": 270, "submissions_count": 3, "average_score": 90},
    {"school_id": "demo-school-2", "school_name": "Delhi Public School", "kc_no": "PUN-002",
     "chapter_name": "Pune Karuna Kendra", "total_score": 352, "submissions_count": 4, "average_score": 88},
    {"school_id": "demo-school-3", "school_name": "Bishop Cotton Boys School", "kc_no": "BLR-004",
     "chapter_name": "Bangalore Karuna Kendra", "total_score": 255, "submissions_count": 3, "average_score": 85},
    {"school_id": "demo-school-4", "school_name": "Kendriya Vidyalaya", "kc_no": "CHN-005",
     "chapter_name": "Chennai Karuna Kendra", "total_score": 162, "submissions_count": 2, "average_score": 81},
]

DEMO_DONATIONS = [
    {"id": "don-1", "donor_name": "Rajesh Gupta", "donor_email": "rajesh.gupta@email.com", "amount": "50000.00",
     "donation_type": "online", "payment_method": "upi", "status": "completed", "is_recurring": False,
     "receipt_sent": True, "donation_date": _ts("2024-12-01T10:00:00")},
    {"id": "don-2", "donor_name": "Sunita Mehta", "donor_email": "sunita.mehta@email.com", "amount": "25000.00",
     "donation_type": "online", "payment_method": "card", "status": "completed", "is_recurring": True,
     "receipt_sent": True, "donation_date": _ts("2024-11-28T14:30:00")},
    {"id": "don-3", "donor_name": "ABC Corporation", "donor_email": "csr@abccorp.com", "amount": "100000.00",
     "donation_type": "offline", "payment_method": "bank_transfer", "status": "completed", "is_recurring": False,
     "receipt_sent": False, "donation_date": _ts("2024-11-25T09:15:00")},
    {"id": "don-4", "donor_name": "Dr. Anil Sharma", "donor_email": "dr.anil@hospital.com", "amount": "15000.00",
     "donation_type": "offline", "payment_method": "cash", "status": "completed", "is_recurring": False,
     "receipt_sent": True, "donation_date": _ts("2024-11-20T16:00:00")},
    {"id": "don-5", "donor_name": "Priya Foundation", "donor_email": "donate@priyafoundation.org", "amount": "75000.00",
     "donation_type": "online", "payment_method": "upi", "status": "completed", "is_recurring": True,
     "receipt_sent": True, "donation_date": _ts("2024-11-15T11:45:00")},
    {"id": "don-6", "donor_name": "Anonymous Donor", "donor_email": "anonymous@email.com", "amount": "10000.00",
     "donation_type": "offline", "payment_method": "cash", "status": "completed", "is_recurring": False,
     "receipt_sent": False, "donation_date": _ts("2024-11-10T13:20:00")},
]


def demo_chapters():
    return [{"id": None, "name": name} for name in DEMO_CHAPTERS]


def demo_submissions():
    return [dict(row) for row in DEMO_SUBMISSIONS]


def demo_leaderboard():
    return [dict(row) for row in DEMO_LEADERBOARD]


def demo_donations():
    return [dict(row) for row in DEMO_DONATIONS]
