"""Django admin registration for Note and StickyNote."""
from django.contrib import admin

from .models import Note, StickyNote


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = ("pk", "client", "case_manager", "created_at")
    raw_id_fields = ("client", "case_manager")
    # Note text is encrypted; it is not searchable or editable here.
    readonly_fields = ("get_text",)
    fields = ("client", "case_manager", "get_text")

    def get_text(self, obj):
        return obj.text
    get_text.short_description = "Text"


@admin.register(StickyNote)
class StickyNoteAdmin(admin.ModelAdmin):
    list_display = ("pk", "case_manager", "colour", "created_at", "updated_at")
    raw_id_fields = ("case_manager",)
