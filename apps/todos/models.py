"""Per-client todo items."""
from django.conf import settings
from django.db import models


class Todo(models.Model):
    """A todo a case manager keeps against one client.

    Only the case manager who created a todo may complete or delete it.
    """

    client = models.ForeignKey("clients.Client", on_delete=models.CASCADE, related_name="todos")
    case_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="todos",
    )
    text = models.TextField()
    completed = models.BooleanField(default=False)
    due_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "todos"
        db_table = "todos"
        ordering = ["created_at", "pk"]

    def __str__(self):
        mark = "x" if self.completed else " "
        return f"[{mark}] {self.text}"
