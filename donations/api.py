from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import ADMIN, HasRole
from activities import demo_data
from activities.datasource import DataSource
from donations.models import Donation
from donations.services.summary import TABS, donation_summary, filter_donations, record_donation

IsAdmin = HasRole(ADMIN)


def donation_payload(donation) -> dict:
    if isinstance(donation, dict):
        return {**donation, "donation_date": donation["donation_date"].isoformat()}
    return {
        "id": donation.id,
        "donor_name": donation.donor.name,
        "donor_email": donation.donor.email,
        "amount": str(donation.amount),
        "donation_type": donation.donation_type,
        "payment_method": donation.payment_method,
        "status": donation.status,
        "is_recurring": donation.is_recurring,
        "receipt_sent": donation.receipt_sent,
        "donation_date": donation.donation_date.isoformat(),
    }


def _fixture_rows(tab, search):
    rows = demo_data.demo_donations()
    if tab == "online":
        rows = [r for r in rows if r["donation_type"] == "online"]
    elif tab == "offline":
        rows = [r for r in rows if r["donation_type"] == "offline"]
    elif tab == "recurring":
        rows = [r for r in rows if r["is_recurring"]]
    needle = search.casefold()
    if needle:
        rows = [r for r in rows if needle in r["donor_name"].casefold() or needle in r["donor_email"].casefold()]
    return rows


class DonationQuerySerializer(serializers.Serializer):
    tab = serializers.ChoiceField(choices=TABS, required=False, default="all")
    search = serializers.CharField(required=False, allow_blank=True, default="")


class DonorSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    address = serializers.CharField(required=False, allow_blank=True, default="")


class DonationCreateSerializer(serializers.Serializer):
    donor = DonorSerializer()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=1)
    donation_type = serializers.ChoiceField(choices=[c[0] for c in Donation.TYPE_CHOICES])
    payment_method = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(choices=[c[0] for c in Donation.STATUS_CHOICES], required=False, default="completed")
    is_recurring = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    donation_date = serializers.DateTimeField()


class DonationListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        params = DonationQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        tab = params.validated_data["tab"]
        search = params.validated_data["search"].strip()

        def query():
            qs = Donation.objects.select_related("donor").order_by("-donation_date")
            return list(filter_donations(qs, tab, search))

        result = DataSource("donations", query, lambda: _fixture_rows(tab, search)).fetch()
        if result.error and not result.is_fixture:
            return Response({"detail": "Data is temporarily unavailable. Please try again."}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({"source": result.source, "results": [donation_payload(d) for d in result.rows]})

    def post(self, request):
        serializer = DonationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        donor = data.pop("donor")
        donation = record_donation(donor, **data)
        return Response(donation_payload(donation), status=status.HTTP_201_CREATED)


class DonationSummaryView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        result = DataSource("donation-summary", lambda: list(Donation.objects.all()), demo_data.demo_donations).fetch()
        if result.error and not result.is_fixture:
            return Response({"detail": "Data is temporarily unavailable. Please try again."}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        summary = donation_summary(result.rows)
        return Response(
            {
                "source": result.source,
                "total_amount": f"{summary['total_amount']:.2f}",
                "online_amount": f"{summary['online_amount']:.2f}",
                "offline_amount": f"{summary['offline_amount']:.2f}",
                "recurring_count": summary["recurring_count"],
            }
        )
