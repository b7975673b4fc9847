from django.conf import settings
from django.db import models


class UserRole(models.Model):
    ROLE_CHOICES = [
        ("admin", "Admin"),
        ("school_admin", "School admin"),
        ("student", "Student"),
        ("evaluator", "Evaluator"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="roles")
    role = models.CharField(max_length=16, choices=ROLE_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user} - {self.role}"

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "role"], name="userrole_user_role_uniq"),
        ]
