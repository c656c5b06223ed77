from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)
from django.db import models

from accounts.abstracts import (
    UniversalIdModel,
    MemberNumberModel,
    TimeStampedModel,
    ReferenceModel,
)


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, password, **extra_fields):
        user = self.model(**extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, password=None, **extra_fields):
        extra_fields.setdefault("is_member", True)
        extra_fields.setdefault("is_system_admin", False)
        return self._create_user(password, **extra_fields)

    def create_superuser(self, password, **extra_fields):
        """Superusers run the association; they hold no membership of their own."""
        extra_fields.update(
            is_staff=True,
            is_superuser=True,
            is_approved=True,
            is_system_admin=True,
        )
        extra_fields.setdefault("is_member", False)
        return self._create_user(password, **extra_fields)


class User(
    AbstractBaseUser,
    PermissionsMixin,
    UniversalIdModel,
    MemberNumberModel,
    TimeStampedModel,
    ReferenceModel,
):
    """
    A member of the association.
    - Members own obligations, credits and payments.
    - System admins record and edit payments on behalf of members.
    """

    # Personal Details
    first_name = models.CharField(max_length=255)
    last_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=25, blank=True, null=True)

    # Account status
    is_approved = models.BooleanField(default=False)

    # Permissions
    is_staff = models.BooleanField(default=False)
    is_member = models.BooleanField(default=True)
    is_system_admin = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    USERNAME_FIELD = "member_no"
    REQUIRED_FIELDS = [
        "first_name",
        "last_name",
    ]

    objects = UserManager()

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.member_no} - {self.first_name} {self.last_name}"
