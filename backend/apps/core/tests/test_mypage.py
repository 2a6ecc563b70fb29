from __future__ import annotations

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from apps.core.choices import Department, MissionCategory
from apps.core.views import issue_token
from apps.missions.models import Mission, utc_day
from apps.missions.services import toggle_mission

User = get_user_model()


class MyPageTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.a = User.objects.create_user(nickname="A", password="pass1234", department=Department.SOMANG)
        self.b = User.objects.create_user(nickname="B", password="pass1234", department=Department.SARANG)
        self.c = User.objects.create_user(nickname="C", password="pass1234", department=Department.MIDEUM)
        self.gift = Mission.objects.create(title="Gift", points=3, category=MissionCategory.OUTREACH)
        self.meal = Mission.objects.create(title="Meal", points=5, category=MissionCategory.OUTREACH)
        self.read = Mission.objects.create(title="Read", points=1, category=MissionCategory.SCRIPTURE)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(self.a)}")

    def test_requires_authentication(self):
        r = APIClient().get("/api/users/mypage")
        self.assertEqual(r.status_code, 401)

    def test_same_day_logs_form_one_group(self):
        toggle_mission(self.a.id, self.gift)
        toggle_mission(self.a.id, self.meal)
        toggle_mission(self.b.id, self.gift)

        r = self.client.get("/api/users/mypage")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["user"]["totalPoints"], 8)
        self.assertEqual(r.data["totalCount"], 2)
        self.assertEqual(len(r.data["missionLogs"]), 1)
        group = r.data["missionLogs"][0]
        self.assertEqual(group["date"], utc_day(timezone.now()).isoformat())
        self.assertEqual({log["mission"]["title"] for log in group["logs"]}, {"Gift", "Meal"})

        ranks = r.data["ranks"]
        self.assertEqual(ranks["total"], 1)
        self.assertEqual(ranks["전도"], 1)
        self.assertEqual(set(ranks.keys()), {"total", "말씀", "기도", "교제", "전도"})

    def test_groups_are_newest_day_first(self):
        now = timezone.now()
        toggle_mission(self.a.id, self.read, now=now - timedelta(days=2))
        toggle_mission(self.a.id, self.read, now=now - timedelta(days=1))
        toggle_mission(self.a.id, self.gift, now=now - timedelta(days=1, minutes=5))
        toggle_mission(self.a.id, self.read, now=now)

        r = self.client.get("/api/users/mypage")
        days = [group["date"] for group in r.data["missionLogs"]]
        self.assertEqual(days, sorted(days, reverse=True))
        self.assertEqual(len(days), 3)
        self.assertEqual(r.data["totalCount"], 4)
        middle = r.data["missionLogs"][1]["logs"]
        stamps = [log["completedAt"] for log in middle]
        self.assertEqual(stamps, sorted(stamps, reverse=True))

    def test_category_rank_reflects_category_sum_only(self):
        # B leads overall on scripture points, A leads outreach
        for days_ago in range(4):
            toggle_mission(self.b.id, self.read, now=timezone.now() - timedelta(days=days_ago))
        toggle_mission(self.a.id, self.gift)

        r = self.client.get("/api/users/mypage")
        ranks = r.data["ranks"]
        self.assertEqual(ranks["total"], 2)
        self.assertEqual(ranks["전도"], 1)
        self.assertEqual(ranks["말씀"], 2)

    def test_user_without_activity(self):
        r = self.client.get("/api/users/mypage")
        self.assertEqual(r.data["missionLogs"], [])
        self.assertEqual(r.data["totalCount"], 0)
        # Zero-point users keep their natural order among ties
        self.assertEqual(r.data["ranks"]["total"], 1)

    def test_deleted_user_is_404(self):
        token = issue_token(self.c)
        self.c.delete()
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        r = client.get("/api/users/mypage")
        self.assertEqual(r.status_code, 404)
