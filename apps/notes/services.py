"""Case note and sticky note mutations.

Case notes are shared by every case manager assigned to the client, but
only the author can edit or delete one. Sticky notes are private to the
case manager who made them.
"""
import logging

from apps.clients.access import require_client_access, require_owner

from .models import DEFAULT_STICKY_COLOUR, Note, StickyNote

logger = logging.getLogger(__name__)


# ── Case notes ───────────────────────────────────────────────────────

def list_notes(user, client):
    """Notes on ``client``, newest first."""
    require_client_access(user, client.pk)
    return Note.objects.filter(client=client).select_related("case_manager")


def create_note(user, client, text):
    require_client_access(user, client.pk)
    note = Note(client=client, case_manager=user)
    note.text = text
    note.save()
    logger.info("User %s added note %s to client %s", user.pk, note.pk, client.pk)
    return note


def update_note(user, note, text):
    require_owner(user, note, label="note")
    note.text = text
    note.save(update_fields=["_text_encrypted"])
    return note


def delete_note(user, note):
    require_owner(user, note, label="note")
    note_pk = note.pk
    note.delete()
    logger.info("User %s deleted note %s", user.pk, note_pk)


# ── Sticky notes ─────────────────────────────────────────────────────

def list_sticky_notes(user):
    return StickyNote.objects.filter(case_manager=user)


def create_sticky_note(user, text, position=(0, 0), colour=None):
    x, y = position
    return StickyNote.objects.create(
        case_manager=user,
        text=text,
        colour=colour or DEFAULT_STICKY_COLOUR,
        position_x=x,
        position_y=y,
    )


def update_sticky_note(user, sticky, text=None, colour=None, position=None):
    """Partial update: arguments left as None are not changed."""
    require_owner(user, sticky, label="sticky note")
    update_fields = ["updated_at"]
    if text is not None:
        sticky.text = text
        update_fields.append("text")
    if colour is not None:
        sticky.colour = colour
        update_fields.append("colour")
    if position is not None:
        sticky.position_x, sticky.position_y = position
        update_fields += ["position_x", "position_y"]
    sticky.save(update_fields=update_fields)
    return sticky


def delete_sticky_note(user, sticky):
    require_owner(user, sticky, label="sticky note")
    sticky.delete()
