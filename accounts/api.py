from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import roles_for
from schools.models import School


class SessionView(APIView):
    """Current user, roles and linked school in one payload."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        school = School.objects.select_related("chapter").filter(user=user).first()
        return Response(
            {
                "user": {"id": user.id, "username": user.get_username(), "email": user.email},
                "roles": sorted(roles_for(user)),
                "school": (
                    {
                        "id": school.id,
                        "school_name": school.school_name,
                        "kc_no": school.kc_no,
                        "status": school.status,
                        "chapter_name": school.chapter_name,
                        "onboarding_completed": school.onboarding_completed,
                    }
                    if school
                    else None
                ),
            }
        )
