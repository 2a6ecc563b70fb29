from django.contrib import admin
from .models import Mission, MissionLog


@admin.register(Mission)
class MissionAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "points", "icon", "created_at")
    list_filter = ("category",)
    search_fields = ("title", "description")


@admin.register(MissionLog)
class MissionLogAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "mission", "completed_at", "completed_on")
    list_filter = ("mission__category", "completed_on")
    search_fields = ("user__nickname", "mission__title")
