from __future__ import annotations

from rest_framework import serializers

from .models import Mission, MissionLog


class MissionSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Mission
        fields = ["id", "title", "description", "points", "category", "icon", "createdAt"]


class MissionStatusSerializer(MissionSerializer):
    """Catalog entry plus whether the requesting user completed it today."""

    completed = serializers.SerializerMethodField()

    class Meta(MissionSerializer.Meta):
        fields = MissionSerializer.Meta.fields + ["completed"]

    def get_completed(self, obj):
        return obj.id in self.context.get("completed_ids", set())


class MissionLogSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source="user_id", read_only=True)
    missionId = serializers.IntegerField(source="mission_id", read_only=True)
    completedAt = serializers.DateTimeField(source="completed_at", read_only=True)
    mission = MissionSerializer(read_only=True)

    class Meta:
        model = MissionLog
        fields = ["id", "userId", "missionId", "completedAt", "mission"]
