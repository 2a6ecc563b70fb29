from __future__ import annotations

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework import serializers

from .choices import Department

User = get_user_model()

NICKNAME_TAKEN = "이미 사용 중인 닉네임입니다."


class UserPublicSerializer(serializers.ModelSerializer):
    totalPoints = serializers.IntegerField(source="total_points", read_only=True)

    class Meta:
        model = User
        fields = ["id", "nickname", "department", "totalPoints"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    nickname = serializers.CharField(max_length=50)
    password = serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        min_length=settings.PASSWORD_MIN_LENGTH,
        error_messages={"min_length": f"비밀번호는 {settings.PASSWORD_MIN_LENGTH}자 이상이어야 합니다."},
    )
    department = serializers.ChoiceField(
        choices=Department.choices,
        error_messages={"invalid_choice": "유효한 부서를 선택해주세요."},
    )

    def validate_nickname(self, value):
        if User.objects.filter(nickname=value).exists():
            raise serializers.ValidationError(NICKNAME_TAKEN)
        return value

    def create(self, validated_data):
        user = User(nickname=validated_data["nickname"], department=validated_data["department"])
        user.set_password(validated_data["password"])
        try:
            with transaction.atomic():
                user.save()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same nickname
            raise serializers.ValidationError({"nickname": [NICKNAME_TAKEN]})
        return user


class LoginSerializer(serializers.Serializer):
    nickname = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)
