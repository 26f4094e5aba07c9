from django.contrib import admin

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("username", "display_name", "external_id", "is_admin", "is_active", "created_at")
    list_filter = ("is_admin", "is_active", "is_staff")
    search_fields = ("username", "display_name", "external_id")
    exclude = ("password", "_email_encrypted")
    filter_horizontal = ("groups", "user_permissions")
