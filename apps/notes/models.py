"""Case notes and sticky notes."""
from django.conf import settings
from django.db import models

from caseload.encryption import encrypted_property

DEFAULT_STICKY_COLOUR = "#fef3c7"


class Note(models.Model):
    """A dated case note about one client. Text is encrypted at rest."""

    client = models.ForeignKey("clients.Client", on_delete=models.CASCADE, related_name="notes")
    case_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notes",
    )
    _text_encrypted = models.BinaryField(default=b"")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "notes"
        db_table = "notes"
        ordering = ["-created_at", "-pk"]

    text = encrypted_property("_text_encrypted")

    def __str__(self):
        return f"Note #{self.pk} for client #{self.client_id}"


class StickyNote(models.Model):
    """A free-floating reminder on a case manager's own board."""

    case_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="sticky_notes",
    )
    text = models.TextField(blank=True, default="")
    colour = models.CharField(max_length=20, default=DEFAULT_STICKY_COLOUR)
    position_x = models.FloatField(default=0)
    position_y = models.FloatField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "notes"
        db_table = "sticky_notes"
        ordering = ["-created_at", "-pk"]

    def __str__(self):
        return self.text[:40] or f"Sticky note #{self.pk}"
