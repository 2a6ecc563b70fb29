from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Optional, Tuple

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.choices import MissionCategory


def utc_day(moment: datetime) -> date:
    return moment.astimezone(dt_timezone.utc).date()


def utc_day_bounds(moment: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return [start, end) of the UTC calendar day containing ``moment``."""
    day = utc_day(moment or timezone.now())
    start = datetime.combine(day, time.min, tzinfo=dt_timezone.utc)
    return start, start + timedelta(days=1)


class Mission(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    points = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    category = models.CharField(max_length=16, choices=MissionCategory.choices)
    icon = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [models.Index(fields=["category"], name="missions_mi_categor_3e9a0c_idx")]

    def __str__(self) -> str:
        return f"[{self.category}] {self.title} ({self.points})"


class MissionLog(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="mission_logs")
    mission = models.ForeignKey(Mission, on_delete=models.CASCADE, related_name="logs")
    completed_at = models.DateTimeField(default=timezone.now, db_index=True)
    # UTC date of completed_at; backs the one-log-per-day constraint
    completed_on = models.DateField()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "mission", "completed_on"],
                name="uniq_mission_log_per_user_day",
            )
        ]
        indexes = [models.Index(fields=["user", "-completed_at"], name="missions_mi_user_id_7f2b1d_idx")]

    def __str__(self) -> str:
        return f"Log#{self.id} user={self.user_id} mission={self.mission_id} at={self.completed_at}"

    def save(self, *args, **kwargs):
        if self.completed_on is None:
            self.completed_on = utc_day(self.completed_at)
        super().save(*args, **kwargs)
