"""Django admin registration for Client and CaseManagerAssignment."""
from django.contrib import admin

from .models import CaseManagerAssignment, Client


class CaseManagerAssignmentInline(admin.TabularInline):
    model = CaseManagerAssignment
    extra = 0
    raw_id_fields = ("case_manager",)
    fields = ("case_manager", "archived", "assigned_at")
    readonly_fields = ("assigned_at",)


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("pk", "get_name", "client_id", "next_annual_assessment", "last_contact_date", "updated_at")
    list_filter = ("first_contact_completed", "second_contact_completed")
    search_fields = ("client_id",)
    inlines = [CaseManagerAssignmentInline]
    fieldsets = (
        (None, {
            "fields": ("client_id",),
        }),
        ("Monthly contacts", {
            "fields": ("first_contact_completed", "second_contact_completed",
                        "last_contact_date", "last_face_to_face_date"),
        }),
        ("Annual cycle", {
            "fields": ("next_annual_assessment", "next_quarterly_review",
                        "last_qr_completed", "last_annual_completed"),
        }),
        ("Quarterly reviews", {
            "classes": ("collapse",),
            "description": "Blank dates fall back to the dates calculated from the annual assessment.",
            "fields": ("qr1_completed", "qr1_date", "qr2_completed", "qr2_date",
                        "qr3_completed", "qr3_date", "qr4_completed", "qr4_date"),
        }),
    )

    def get_name(self, obj):
        return obj.name
    get_name.short_description = "Name"


@admin.register(CaseManagerAssignment)
class CaseManagerAssignmentAdmin(admin.ModelAdmin):
    list_display = ("pk", "case_manager", "client", "archived", "assigned_at")
    list_filter = ("archived",)
    raw_id_fields = ("case_manager", "client")
