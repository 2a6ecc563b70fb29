from __future__ import annotations

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone

from .choices import Department


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, nickname: str, password: str | None, **extra_fields):
        if not nickname:
            raise ValueError("nickname is required")
        user = self.model(nickname=nickname, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, nickname: str, password: str | None = None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(nickname, password, **extra_fields)

    def create_superuser(self, nickname: str, password: str | None = None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("department", Department.SOMANG)
        if not extra_fields["is_staff"] or not extra_fields["is_superuser"]:
            raise ValueError("Superuser must have is_staff=True and is_superuser=True.")
        return self._create_user(nickname, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    A youth group member.

    total_points is a denormalized running total of the points of every
    MissionLog the user owns. Only the mission toggle mutates it, always in
    the same transaction as the log insert/delete.
    """

    nickname = models.CharField(max_length=50, unique=True)
    department = models.CharField(max_length=16, choices=Department.choices)
    total_points = models.IntegerField(default=0)
    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = "nickname"
    REQUIRED_FIELDS = ["department"]

    class Meta:
        indexes = [
            models.Index(fields=["-total_points"], name="core_user_total_p_5c1e2a_idx"),
            models.Index(fields=["department"], name="core_user_departm_8b7d41_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.nickname} ({self.department})"
