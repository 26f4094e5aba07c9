"""Todo mutations. Completion changes go through the pending-change ledger."""
import logging

from apps.clients.access import require_client_access, require_owner

from .models import Todo

logger = logging.getLogger(__name__)


def list_todos(user, client):
    """All todos on ``client``, oldest first, whoever wrote them."""
    require_client_access(user, client.pk)
    return Todo.objects.filter(client=client).select_related("case_manager")


def create_todo(user, client, text, due_date=None):
    require_client_access(user, client.pk)
    todo = Todo.objects.create(client=client, case_manager=user, text=text, due_date=due_date)
    logger.info("User %s added todo %s to client %s", user.pk, todo.pk, client.pk)
    return todo


def delete_todo(user, todo):
    """Delete ``todo``. Only its author may."""
    require_owner(user, todo, label="todo")
    todo_pk = todo.pk
    todo.delete()
    logger.info("User %s deleted todo %s", user.pk, todo_pk)
