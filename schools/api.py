from django.shortcuts import get_object_or_404
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import ADMIN, HasRole
from activities import demo_data
from activities.datasource import DataSource
from schools.models import Chapter, School
from schools.services.onboarding import (
    OnboardingError,
    StatusTransitionError,
    approve_school,
    filter_schools,
    register_school,
    reject_school,
)

IsAdmin = HasRole(ADMIN)


def school_payload(school: School) -> dict:
    return {
        "id": school.id,
        "kc_no": school.kc_no,
        "school_name": school.school_name,
        "principal_name": school.principal_name,
        "contact_number": school.contact_number,
        "email": school.email,
        "chapter_name": school.chapter_name,
        "status": school.status,
        "rejection_reason": school.rejection_reason,
        "approved_at": school.approved_at.isoformat() if school.approved_at else None,
        "created_at": school.created_at.isoformat(),
    }


class ChapterListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        def query():
            return [{"id": c.id, "name": c.name} for c in Chapter.objects.order_by("name")]

        result = DataSource("chapters", query, demo_data.demo_chapters).fetch()
        if result.error and not result.is_fixture:
            return Response({"detail": "Data is temporarily unavailable. Please try again."}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({"source": result.source, "results": result.rows})


class SchoolListView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        schools = filter_schools(
            School.objects.select_related("chapter").order_by("-created_at"),
            status=request.query_params.get("status"),
            search=request.query_params.get("search"),
        )
        return Response({"results": [school_payload(s) for s in schools]})


class SchoolDataSerializer(serializers.Serializer):
    kc_no = serializers.CharField(max_length=50)
    school_name = serializers.CharField(max_length=200)
    principal_name = serializers.CharField(max_length=100)
    contact_number = serializers.CharField(max_length=20)
    email = serializers.EmailField()
    kendra_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")


class TeacherDataSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    mobile = serializers.CharField(max_length=20)


class RegistrationSerializer(serializers.Serializer):
    school = SchoolDataSerializer()
    teacher = TeacherDataSerializer()


class SchoolRegisterView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            school = register_school(
                request.user, serializer.validated_data["school"], serializer.validated_data["teacher"]
            )
        except OnboardingError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(school_payload(school), status=status.HTTP_201_CREATED)


class SchoolApproveView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, pk):
        school = get_object_or_404(School, pk=pk)
        try:
            school = approve_school(school, request.user)
        except StatusTransitionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(school_payload(school))


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True)


class SchoolRejectView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, pk):
        school = get_object_or_404(School, pk=pk)
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            school = reject_school(school, serializer.validated_data["reason"])
        except StatusTransitionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except OnboardingError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(school_payload(school))
