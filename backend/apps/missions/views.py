from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import permissions, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.choices import MissionCategory
from apps.core.serializers import UserPublicSerializer
from . import ranking
from .models import Mission, MissionLog
from .serializers import MissionLogSerializer, MissionStatusSerializer
from .services import completed_mission_ids_today, toggle_mission

User = get_user_model()

MISSION_NOT_FOUND = "미션을 찾을 수 없습니다."
USER_NOT_FOUND = "사용자를 찾을 수 없습니다."


class MissionListView(APIView):
    def get(self, request):
        missions = Mission.objects.all().order_by("id")
        completed_ids = completed_mission_ids_today(request.user.id)
        data = MissionStatusSerializer(missions, many=True, context={"completed_ids": completed_ids}).data
        return Response({"missions": data})


class MissionToggleView(APIView):
    def post(self, request, mission_id: str):
        try:
            mission_pk = int(mission_id)
        except ValueError:
            return Response({"detail": "유효하지 않은 미션 ID입니다."}, status=status.HTTP_400_BAD_REQUEST)

        try:
            mission = Mission.objects.get(id=mission_pk)
        except Mission.DoesNotExist:
            raise NotFound(MISSION_NOT_FOUND)

        try:
            result = toggle_mission(request.user.id, mission)
        except User.DoesNotExist:
            raise NotFound(USER_NOT_FOUND)

        return Response(
            {
                "success": True,
                "points": result.points,
                "completed": result.completed,
                "user": UserPublicSerializer(result.user).data,
            }
        )


class CompletedMissionsView(APIView):
    def get(self, request):
        logs = (
            MissionLog.objects.filter(user_id=request.user.id)
            .select_related("mission")
            .order_by("-completed_at", "-id")
        )
        return Response({"completedMissions": MissionLogSerializer(logs, many=True).data})


# --- Rankings ---

class RankingAllView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response(ranking.all_rankings())


class TotalRankingView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        # these boards carry the user shape, so points go out as totalPoints
        rows = [
            {"id": row["id"], "nickname": row["nickname"], "department": row["department"],
             "totalPoints": row["points"], "rank": row["rank"]}
            for row in ranking.total_ranking()
        ]
        return Response({"ranking": rows})


class DepartmentRankingView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"ranking": ranking.department_ranking()})


class CategoryRankingView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, category: str):
        if category not in MissionCategory.values:
            return Response({"detail": "유효하지 않은 카테고리입니다."}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"ranking": ranking.category_ranking(category), "category": category})
