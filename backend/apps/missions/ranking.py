"""
Leaderboard aggregation.

Total and department rankings read the denormalized ``User.total_points``.
Category rankings never do: they are recomputed from the MissionLog table on
every call, so they cannot drift from the logs.

Every ranking is a list of plain dicts ordered by ``points`` descending with
ties kept in natural key order, each carrying its 1-based ordinal ``rank``.
"""
from __future__ import annotations

from collections import OrderedDict, defaultdict
from typing import Dict, Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.db.models import Count, Sum

from apps.core.choices import Department, MissionCategory
from .models import MissionLog, utc_day

User = get_user_model()


def _ranked(rows: List[dict]) -> List[dict]:
    # sorted() is stable, so ties keep their incoming order
    rows = sorted(rows, key=lambda r: -r["points"])
    for position, row in enumerate(rows, start=1):
        row["rank"] = position
    return rows


def _users():
    return list(User.objects.order_by("id").values("id", "nickname", "department", "total_points"))


def total_ranking(users: Optional[List[dict]] = None) -> List[dict]:
    users = _users() if users is None else users
    return _ranked(
        [
            {"id": u["id"], "nickname": u["nickname"], "department": u["department"], "points": u["total_points"]}
            for u in users
        ]
    )


def department_ranking() -> List[dict]:
    totals = {
        row["department"]: row
        for row in User.objects.values("department").annotate(points=Sum("total_points"), userCount=Count("id"))
    }
    rows = []
    for department in Department.values:
        row = totals.get(department) or {}
        rows.append(
            {"department": department, "points": row.get("points") or 0, "userCount": row.get("userCount") or 0}
        )
    return _ranked(rows)


def category_points() -> Dict[str, Dict[int, int]]:
    """Lifetime points per category per user, summed over every MissionLog."""
    result: Dict[str, Dict[int, int]] = defaultdict(dict)
    qs = MissionLog.objects.values("user_id", "mission__category").annotate(points=Sum("mission__points"))
    for row in qs:
        result[row["mission__category"]][row["user_id"]] = row["points"] or 0
    return result


def category_ranking(
    category: str,
    users: Optional[List[dict]] = None,
    points_by_category: Optional[Dict[str, Dict[int, int]]] = None,
) -> List[dict]:
    if category not in MissionCategory.values:
        raise ValueError(f"unknown category {category!r}")
    users = _users() if users is None else users
    points_by_category = category_points() if points_by_category is None else points_by_category
    points = points_by_category.get(category, {})
    return _ranked(
        [
            {"id": u["id"], "nickname": u["nickname"], "department": u["department"], "points": points.get(u["id"], 0)}
            for u in users
        ]
    )


def category_rankings(users: Optional[List[dict]] = None) -> Dict[str, List[dict]]:
    users = _users() if users is None else users
    points_by_category = category_points()
    return {
        category: category_ranking(category, users=users, points_by_category=points_by_category)
        for category in MissionCategory.values
    }


def all_rankings() -> dict:
    users = _users()
    return {
        "total": total_ranking(users),
        "department": department_ranking(),
        "categories": category_rankings(users),
    }


def rank_of(rows: Iterable[dict], user_id: int) -> int:
    """
    Ordinal position of ``user_id`` in ``rows``.

    A user missing from the ranking is placed right after the last row
    (len(rows) + 1) instead of being reported as unranked.
    """
    rows = list(rows)
    for position, row in enumerate(rows, start=1):
        if row["id"] == user_id:
            return position
    return len(rows) + 1


def user_ranks(user_id: int) -> Dict[str, int]:
    users = _users()
    ranks = {"total": rank_of(total_ranking(users), user_id)}
    for category, rows in category_rankings(users).items():
        ranks[category] = rank_of(rows, user_id)
    return ranks


def group_logs_by_day(logs: Iterable[MissionLog]) -> "OrderedDict[str, List[MissionLog]]":
    """Group logs by UTC day: days newest first, logs newest first within a day."""
    groups: Dict[str, List[MissionLog]] = defaultdict(list)
    for log in logs:
        groups[utc_day(log.completed_at).isoformat()].append(log)
    ordered = OrderedDict()
    for day in sorted(groups, reverse=True):
        ordered[day] = sorted(groups[day], key=lambda log: log.completed_at, reverse=True)
    return ordered
