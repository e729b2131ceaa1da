from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("id", "email", "username", "phone", "is_admin", "is_active", "date_joined")
    list_filter = ("is_admin", "is_active", "is_superuser")
    search_fields = ("email", "username", "phone")
    ordering = ("-date_joined",)
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Marketplace", {"fields": ("phone", "is_admin")}),
    )
