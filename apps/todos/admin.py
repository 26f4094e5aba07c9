from django.contrib import admin

from .models import Todo


@admin.register(Todo)
class TodoAdmin(admin.ModelAdmin):
    list_display = ("text", "client", "case_manager", "completed", "due_date", "created_at")
    list_filter = ("completed",)
    raw_id_fields = ("client", "case_manager")
