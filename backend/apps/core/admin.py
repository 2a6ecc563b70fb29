from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "nickname", "department", "total_points", "is_staff", "date_joined")
    list_filter = ("department", "is_staff")
    search_fields = ("nickname",)
    readonly_fields = ("password", "total_points", "last_login", "date_joined")
    exclude = ("groups", "user_permissions")
