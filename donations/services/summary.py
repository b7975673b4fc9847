import logging
from decimal import Decimal
from typing import Iterable

from django.db import transaction
from django.db.models import Q

from donations.models import Donation, Donor

logger = logging.getLogger(__name__)

TABS = ("all", "online", "offline", "recurring")


def filter_donations(queryset, tab: str = "all", search: str = ""):
    if tab == "online":
        queryset = queryset.filter(donation_type="online")
    elif tab == "offline":
        queryset = queryset.filter(donation_type="offline")
    elif tab == "recurring":
        queryset = queryset.filter(is_recurring=True)
    if search:
        queryset = queryset.filter(Q(donor__name__icontains=search) | Q(donor__email__icontains=search))
    return queryset


def _value(donation, name):
    if isinstance(donation, dict):
        return donation[name]
    return getattr(donation, name)


def donation_summary(donations: Iterable) -> dict:
    """
    Totals only count completed donations; the recurring count covers
    every donation flagged recurring whatever its status.

    Accepts model instances or plain dicts (demo rows).
    """
    total = online = offline = Decimal("0")
    recurring = 0
    for d in donations:
        amount = Decimal(str(_value(d, "amount")))
        if _value(d, "status") == "completed":
            total += amount
            if _value(d, "donation_type") == "online":
                online += amount
            elif _value(d, "donation_type") == "offline":
                offline += amount
        if _value(d, "is_recurring"):
            recurring += 1
    return {
        "total_amount": total,
        "online_amount": online,
        "offline_amount": offline,
        "recurring_count": recurring,
    }


def record_donation(donor_data: dict, **fields) -> Donation:
    """Manual entry from the admin screen. The donor is matched by email."""
    with transaction.atomic():
        donor, created = Donor.objects.get_or_create(
            email=donor_data["email"].strip().lower(),
            defaults={
                "name": donor_data["name"].strip(),
                "phone": donor_data.get("phone", ""),
                "address": donor_data.get("address", ""),
            },
        )
        donation = Donation.objects.create(donor=donor, **fields)
    logger.info(
        "Donation recorded",
        extra={"donation_id": donation.id, "donor_id": donor.id, "new_donor": created, "amount": str(donation.amount)},
    )
    return donation
