from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Set

from django.contrib.auth import get_user_model
from django.db import IntegrityError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from apps.core.metrics import mission_toggles_total
from .models import Mission, MissionLog, utc_day, utc_day_bounds

logger = logging.getLogger(__name__)
User = get_user_model()

TOGGLE_ATTEMPTS = 3
TOGGLE_RETRY_DELAY = 0.05  # seconds, multiplied by the attempt number


@dataclass(frozen=True)
class ToggleResult:
    points: int  # signed delta applied to total_points
    completed: bool
    user: User


def completed_mission_ids_today(user_id: int, now: Optional[datetime] = None) -> Set[int]:
    start, end = utc_day_bounds(now)
    return set(
        MissionLog.objects.filter(user_id=user_id, completed_at__gte=start, completed_at__lt=end).values_list(
            "mission_id", flat=True
        )
    )


def _apply_toggle(user_id: int, mission: Mission, now: datetime) -> ToggleResult:
    start, end = utc_day_bounds(now)

    with transaction.atomic():
        user = User.objects.select_for_update().get(id=user_id)

        existing = (
            MissionLog.objects.filter(user=user, mission=mission, completed_at__gte=start, completed_at__lt=end)
            .order_by("id")
            .first()
        )
        if existing:
            existing.delete()
            delta = -mission.points
            completed = False
        else:
            MissionLog.objects.create(user=user, mission=mission, completed_at=now, completed_on=utc_day(now))
            delta = mission.points
            completed = True

        User.objects.filter(id=user.id).update(total_points=F("total_points") + delta)
        user.refresh_from_db(fields=["total_points"])

    return ToggleResult(points=delta, completed=completed, user=user)


def toggle_mission(user_id: int, mission: Mission, now: Optional[datetime] = None) -> ToggleResult:
    """
    Mark ``mission`` complete for today (UTC) or, if it already is, undo it.

    The user row is locked for the whole read-check-write sequence so two
    concurrent toggles by the same user are serialized; the unique constraint
    on (user, mission, completed_on) backs this at the database level.
    Backends without row locks (SQLite) report a lost race as IntegrityError
    or a "database is locked" OperationalError instead; the transaction has
    rolled back by then, so the toggle is re-read and retried against the
    winner's state, up to TOGGLE_ATTEMPTS times.
    Raises User.DoesNotExist before any mutation when the user is gone.
    """
    now = now or timezone.now()

    for attempt in range(1, TOGGLE_ATTEMPTS + 1):
        try:
            result = _apply_toggle(user_id, mission, now)
            break
        except (IntegrityError, OperationalError) as exc:
            if attempt == TOGGLE_ATTEMPTS:
                raise
            logger.warning(
                "mission toggle conflict user=%s mission=%s attempt=%s: %s", user_id, mission.id, attempt, exc
            )
            time.sleep(TOGGLE_RETRY_DELAY * attempt)

    mission_toggles_total.labels(completed=str(result.completed).lower()).inc()
    logger.info(
        "mission toggle user=%s mission=%s delta=%s completed=%s", user_id, mission.id, result.points, result.completed
    )
    return result
