from __future__ import annotations

import logging

from django.contrib.auth import authenticate, get_user_model
from django.http import HttpResponse
from rest_framework import permissions, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import AccessToken

from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from apps.missions.models import MissionLog
from apps.missions.ranking import group_logs_by_day, user_ranks
from apps.missions.serializers import MissionLogSerializer
from .choices import Department, MissionCategory
from .metrics import login_failures_total, registrations_total
from .serializers import LoginSerializer, RegisterSerializer, UserPublicSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


def issue_token(user) -> str:
    return str(AccessToken.for_user(user))


def get_current_user(request):
    """Resolve the bearer token's user id to a stored User or answer 404."""
    try:
        return User.objects.get(id=request.user.id)
    except User.DoesNotExist:
        raise NotFound("사용자를 찾을 수 없습니다.")


class RegisterView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        registrations_total.inc()
        logger.info("registered user id=%s department=%s", user.id, user.department)
        return Response(
            {"user": UserPublicSerializer(user).data, "token": issue_token(user)},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"detail": "닉네임과 비밀번호를 입력해주세요."}, status=status.HTTP_400_BAD_REQUEST)
        nickname = serializer.validated_data["nickname"]
        user = authenticate(request, nickname=nickname, password=serializer.validated_data["password"])
        if not user:
            login_failures_total.inc()
            logger.warning("login rejected for nickname=%s", nickname)
            return Response(
                {"detail": "닉네임 또는 비밀번호가 올바르지 않습니다."}, status=status.HTTP_401_UNAUTHORIZED
            )
        return Response({"user": UserPublicSerializer(user).data, "token": issue_token(user)})


class MeView(APIView):
    def get(self, request):
        return Response({"user": UserPublicSerializer(get_current_user(request)).data})


class MyPageView(APIView):
    """
    Personal dashboard: profile, full history grouped by UTC day, and the
    user's position in the total and per-category rankings.
    """

    def get(self, request):
        user = get_current_user(request)
        logs = list(
            MissionLog.objects.filter(user=user).select_related("mission").order_by("-completed_at", "-id")
        )
        grouped = [
            {"date": day, "logs": MissionLogSerializer(day_logs, many=True).data}
            for day, day_logs in group_logs_by_day(logs).items()
        ]
        return Response(
            {
                "user": UserPublicSerializer(user).data,
                "missionLogs": grouped,
                "totalCount": len(logs),
                "ranks": user_ranks(user.id),
            }
        )


class MetaView(APIView):
    """Closed enumerations shared with the client."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"departments": list(Department.values), "categories": list(MissionCategory.values)})


# Observability endpoints

class HealthView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"status": "ok"})


class MetricsView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        data = generate_latest()
        return HttpResponse(data, content_type=CONTENT_TYPE_LATEST)
