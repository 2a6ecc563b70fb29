from __future__ import annotations

from django.db import models


class Department(models.TextChoices):
    SOMANG = "소망부", "소망부"
    SARANG = "사랑부", "사랑부"
    MIDEUM = "믿음부", "믿음부"


class MissionCategory(models.TextChoices):
    SCRIPTURE = "말씀", "말씀"
    PRAYER = "기도", "기도"
    FELLOWSHIP = "교제", "교제"
    OUTREACH = "전도", "전도"
