from __future__ import annotations

import threading
from datetime import timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import IntegrityError, OperationalError, connection, transaction
from django.test import TestCase, TransactionTestCase, skipUnlessDBFeature
from django.utils import timezone
from rest_framework.test import APIClient

from apps.core.choices import Department, MissionCategory
from apps.core.views import issue_token
from apps.missions import services
from apps.missions.models import Mission, MissionLog, utc_day_bounds
from apps.missions.services import toggle_mission

User = get_user_model()


class ToggleServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(nickname="alice", password="pass1234", department=Department.SOMANG)
        self.mission = Mission.objects.create(title="Pray", points=3, category=MissionCategory.PRAYER)

    def test_toggle_on_credits_points(self):
        result = toggle_mission(self.user.id, self.mission)
        self.assertEqual(result.points, 3)
        self.assertTrue(result.completed)
        self.assertEqual(result.user.total_points, 3)
        self.user.refresh_from_db()
        self.assertEqual(self.user.total_points, 3)
        self.assertEqual(MissionLog.objects.filter(user=self.user, mission=self.mission).count(), 1)

    def test_double_toggle_round_trip(self):
        toggle_mission(self.user.id, self.mission)
        result = toggle_mission(self.user.id, self.mission)
        self.assertEqual(result.points, -3)
        self.assertFalse(result.completed)
        self.assertEqual(result.user.total_points, 0)
        self.assertFalse(MissionLog.objects.exists())

    def test_repeated_toggles_alternate(self):
        flags = [toggle_mission(self.user.id, self.mission).completed for _ in range(4)]
        self.assertEqual(flags, [True, False, True, False])
        self.user.refresh_from_db()
        self.assertEqual(self.user.total_points, 0)

    def test_previous_day_log_is_left_alone(self):
        yesterday = timezone.now() - timedelta(days=1)
        toggle_mission(self.user.id, self.mission, now=yesterday)

        on = toggle_mission(self.user.id, self.mission)
        self.assertTrue(on.completed)
        self.assertEqual(on.user.total_points, 6)
        self.assertEqual(MissionLog.objects.filter(user=self.user).count(), 2)

        off = toggle_mission(self.user.id, self.mission)
        self.assertFalse(off.completed)
        self.assertEqual(off.user.total_points, 3)
        remaining = MissionLog.objects.get(user=self.user)
        start, _ = utc_day_bounds()
        self.assertLess(remaining.completed_at, start)

    def test_missing_user_raises_before_mutation(self):
        with self.assertRaises(User.DoesNotExist):
            toggle_mission(999999, self.mission)
        self.assertFalse(MissionLog.objects.exists())

    def test_one_log_per_user_mission_day(self):
        now = timezone.now()
        MissionLog.objects.create(user=self.user, mission=self.mission, completed_at=now)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                MissionLog.objects.create(user=self.user, mission=self.mission, completed_at=now)
        # A different day is fine
        MissionLog.objects.create(user=self.user, mission=self.mission, completed_at=now - timedelta(days=1))
        self.assertEqual(MissionLog.objects.count(), 2)


class ToggleApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(nickname="bob", password="pass1234", department=Department.SARANG)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(self.user)}")
        self.mission = Mission.objects.create(title="Read", points=5, category=MissionCategory.SCRIPTURE)

    def test_toggle_response_shape(self):
        r = self.client.post(f"/api/missions/{self.mission.id}/toggle")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["success"], True)
        self.assertEqual(r.data["points"], 5)
        self.assertEqual(r.data["completed"], True)
        self.assertEqual(r.data["user"]["totalPoints"], 5)

        r = self.client.post(f"/api/missions/{self.mission.id}/toggle")
        self.assertEqual(r.data["points"], -5)
        self.assertEqual(r.data["completed"], False)
        self.assertEqual(r.data["user"]["totalPoints"], 0)

    def test_unknown_mission_is_404_and_points_unchanged(self):
        toggle_mission(self.user.id, self.mission)
        r = self.client.post("/api/missions/999999/toggle")
        self.assertEqual(r.status_code, 404)
        self.assertIn("detail", r.data)
        self.user.refresh_from_db()
        self.assertEqual(self.user.total_points, 5)

    def test_non_integer_id_is_400(self):
        r = self.client.post("/api/missions/abc/toggle")
        self.assertEqual(r.status_code, 400)

    def test_requires_authentication(self):
        anon = APIClient()
        r = anon.post(f"/api/missions/{self.mission.id}/toggle")
        self.assertEqual(r.status_code, 401)
        self.assertFalse(MissionLog.objects.exists())

    def test_deleted_user_token_is_404(self):
        ghost = User.objects.create_user(nickname="ghost", password="pass1234", department=Department.MIDEUM)
        token = issue_token(ghost)
        ghost.delete()
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        r = client.post(f"/api/missions/{self.mission.id}/toggle")
        self.assertEqual(r.status_code, 404)
        self.assertFalse(MissionLog.objects.exists())


@mock.patch.object(services, "TOGGLE_RETRY_DELAY", 0)
class ToggleConflictTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(nickname="carol", password="pass1234", department=Department.SOMANG)
        self.mission = Mission.objects.create(title="Pray", points=3, category=MissionCategory.PRAYER)
        self.real_apply = services._apply_toggle

    def test_locked_database_is_retried(self):
        calls = []

        def flaky(*args):
            calls.append(args)
            if len(calls) == 1:
                raise OperationalError("database table is locked")
            return self.real_apply(*args)

        with mock.patch.object(services, "_apply_toggle", side_effect=flaky):
            result = toggle_mission(self.user.id, self.mission)

        self.assertEqual(len(calls), 2)
        self.assertTrue(result.completed)
        self.assertEqual(result.user.total_points, 3)
        self.assertEqual(MissionLog.objects.filter(user=self.user).count(), 1)

    def test_lost_insert_race_settles_on_winner_state(self):
        calls = []

        def beaten(*args):
            calls.append(args)
            if len(calls) == 1:
                # another request completes the mission first
                self.real_apply(*args)
                raise IntegrityError("uniq_mission_log_per_user_day")
            return self.real_apply(*args)

        with mock.patch.object(services, "_apply_toggle", side_effect=beaten):
            result = toggle_mission(self.user.id, self.mission)

        # two toggles of the same mission on one day cancel out
        self.assertFalse(result.completed)
        self.assertEqual(result.user.total_points, 0)
        self.assertFalse(MissionLog.objects.exists())

    def test_gives_up_after_last_attempt(self):
        failing = mock.Mock(side_effect=OperationalError("database table is locked"))
        with mock.patch.object(services, "_apply_toggle", failing):
            with self.assertRaises(OperationalError):
                toggle_mission(self.user.id, self.mission)
        self.assertEqual(failing.call_count, services.TOGGLE_ATTEMPTS)
        self.user.refresh_from_db()
        self.assertEqual(self.user.total_points, 0)


@skipUnlessDBFeature("has_select_for_update")
class ConcurrentToggleTests(TransactionTestCase):
    def setUp(self):
        self.user = User.objects.create_user(nickname="dave", password="pass1234", department=Department.SARANG)
        self.mission = Mission.objects.create(title="Pray", points=3, category=MissionCategory.PRAYER)

    def test_parallel_toggles_are_serialized(self):
        workers = 3
        barrier = threading.Barrier(workers)
        results, errors = [], []

        def run():
            try:
                barrier.wait()
                results.append(toggle_mission(self.user.id, self.mission).completed)
            except Exception as exc:  # surfaced through the errors assertion below
                errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=run) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        self.assertEqual(sorted(results), [False, True, True])
        self.user.refresh_from_db()
        self.assertEqual(self.user.total_points, 3)
        self.assertEqual(MissionLog.objects.filter(user=self.user, mission=self.mission).count(), 1)
