"""ORM-backed dispatchers for flushing a pending-change ledger."""
import logging

from apps.clients.access import arequire_client_access, require_owner
from apps.clients.models import Client
from apps.clients.services import UPDATABLE_FIELDS, apply_field, validate_field_value
from apps.todos.models import Todo

logger = logging.getLogger(__name__)

__all__ = ["OrmDispatchers", "UPDATABLE_FIELDS"]


class OrmDispatchers:
    """Writes pending changes to the database on behalf of ``user``.

    Each call checks access itself, so a ledger flushed after the user lost
    their assignment fails instead of writing.
    """

    def __init__(self, user):
        self.user = user

    async def update_field(self, client_id, field, value):
        validate_field_value(field, value)
        await arequire_client_access(self.user, client_id)
        client = await Client.objects.aget(pk=client_id)
        update_fields = apply_field(client, field, value)
        await client.asave(update_fields=update_fields)
        logger.debug("Set client %s %s", client_id, field)

    async def set_todo_completed(self, todo_id, completed):
        todo = await Todo.objects.aget(pk=todo_id)
        require_owner(self.user, todo, label="todo")
        await Todo.objects.filter(pk=todo_id).aupdate(completed=completed)
        logger.debug("Set todo %s completed=%s", todo_id, completed)
