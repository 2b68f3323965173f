"""
Account-side data for MakeMyFuture.

Credentials live on Django's auth user (PBKDF2 hashes via set_password);
this module only adds the public profile that `/fetch-user-profile` and
`/update-account` work with.
"""

from django.conf import settings
from django.db import models


class Profile(models.Model):
    """Public profile attached one-to-one to an account."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    display_name = models.CharField(max_length=80, blank=True)
    bio = models.TextField(max_length=1000, blank=True)
    college = models.CharField(
        max_length=120, blank=True,
        help_text="College the student plans to transfer to.",
    )
    major = models.CharField(max_length=120, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user__username"]

    def __str__(self) -> str:
        return f"Profile<{self.user}>"

    @property
    def name(self) -> str:
        return self.display_name or self.user.get_username()
