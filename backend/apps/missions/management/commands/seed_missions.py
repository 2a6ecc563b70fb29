from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.choices import MissionCategory
from apps.missions.models import Mission

logger = logging.getLogger(__name__)
User = get_user_model()

# (title, description, points, icon)
CATALOG = {
    MissionCategory.SCRIPTURE: [
        ("매일 말씀 읽기", "매일 말씀을 읽어보세요", 1, "BookOpen"),
        ("매일 아침 부서방에 말씀 업로드", "매일 아침 부서방에 말씀을 업로드하세요", 1, "Upload"),
        ("전도 관련 말씀 듣기", "전도 관련 말씀(조각말씀 포함)을 들어보세요", 1, "Headphones"),
        ("교회 설교시간에 노트필기하기", "설교시간에 노트를 필기하세요", 1, "PenTool"),
        ("특별집회 참석", "특별집회에 참석하세요 (총 3일차 각 1점)", 1, "Calendar"),
        ("주 1회 성구암송 외우기", "주 1회 성구암송을 외워보세요", 1, "BookMarked"),
        ("수요말씀 참석하기", "수요말씀에 참석하세요", 1, "Church"),
    ],
    MissionCategory.PRAYER: [
        ("수양회 관련 기도부탁 올리기", "수양회 관련 기도부탁을 올려주세요", 1, "HeartHandshake"),
        ("기상 후, 취침 전 기도", "기상 후, 취침 전에 기도하세요", 1, "Sunrise"),
        (
            "각종 중보기도 및 전도 기도",
            "기도부탁 명단, 전도하시는 형제/자매님, 교제에서 멀어진 형제/자매님, 전도인, "
            "자신의 입술과 전도의 문이 열리길 기도 (통합)",
            2,
            "Heart",
        ),
    ],
    MissionCategory.FELLOWSHIP: [
        ("토요교제 참석하기", "토요교제에 참석하세요", 1, "Users"),
        ("교제 전 형제, 자매와 만나서 함께 교제 참석하기", "교제 전에 형제, 자매와 만나서 함께 교제에 참석하세요", 1, "Handshake"),
        ("안나오는 형제, 자매에게 연락하기", "안나오는 형제, 자매에게 연락하세요", 1, "Phone"),
        ("형제, 자매에게 선물주기", "형제, 자매에게 선물을 주세요", 2, "Gift"),
        ("형제, 자매와 교제하기", "형제, 자매와 교제하세요", 2, "MessageCircle"),
        ("교제 소식 밴드에 올리기", "교제 소식을 밴드에 올려주세요", 1, "MessageSquare"),
        ("부서 활동 및 식당 봉사에 참여하기", "부서 활동 및 식당 봉사에 참여하세요", 2, "UtensilsCrossed"),
    ],
    MissionCategory.OUTREACH: [
        ("전도대상자에게 선물주기", "전도대상자에게 선물을 주세요", 3, "Gift"),
        ("전도대상자에게 바이블래터 전해주기", "전도대상자에게 바이블래터를 전해주세요", 2, "Book"),
        ("전도대상자에게 안부 묻기", "전도대상자에게 안부를 물어보세요", 2, "Phone"),
        ("전도대상자와 만남 약속 잡기", "전도대상자와 만남 약속을 잡으세요", 3, "Calendar"),
        ("전도대상자와 함께 식사하기", "전도대상자와 함께 식사하세요", 5, "Utensils"),
        ("수양회 참석 권유하기", "전도대상자에게 수양회 참석을 권유하세요", 10, "UserPlus"),
        ("수양회 참석 확답받기", "전도대상자로부터 수양회 참석 확답을 받으세요", 50, "CheckCircle2"),
    ],
}


class Command(BaseCommand):
    help = "Seed the mission catalog. Existing missions are matched by (title, category) and updated."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete every mission (and with it every mission log and user point) before seeding",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options["reset"]:
            deleted, _ = Mission.objects.all().delete()
            # every log went with the catalog, so no user has points left
            reset_users = User.objects.exclude(total_points=0).update(total_points=0)
            logger.info("mission catalog reset deleted=%s users_zeroed=%s", deleted, reset_users)
            self.stdout.write(self.style.WARNING(f"Deleted {deleted} existing rows"))

        created_count = 0
        for category, missions in CATALOG.items():
            for title, description, points, icon in missions:
                _, created = Mission.objects.update_or_create(
                    title=title,
                    category=category,
                    defaults={"description": description, "points": points, "icon": icon},
                )
                created_count += int(created)

        total = sum(len(missions) for missions in CATALOG.values())
        logger.info("mission catalog seeded created=%s total=%s", created_count, total)
        self.stdout.write(self.style.SUCCESS(f"Seed complete: {created_count} created, {total - created_count} updated."))
