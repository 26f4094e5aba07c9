"""Identity helpers: who is calling, and which User row they map to."""
import logging

from django.db import transaction

from .models import User

logger = logging.getLogger(__name__)


def current_user_id(request):
    """Return the authenticated caller's user id, or None."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return user.pk


def _find_by_email(email):
    """Return the user with this email (case-insensitive), or None.

    Email is encrypted at rest, so it cannot be filtered in SQL: this
    decrypts every user's email, O(n) in the user count. It runs
    only on a subject's first sign-in; later logins match on external_id.
    """
    wanted = email.strip().lower()
    for user in User.objects.order_by("pk").iterator():
        if user.email and user.email.strip().lower() == wanted:
            return user
    return None


@transaction.atomic
def get_or_create_user_for_identity(subject, email="", name=""):
    """Map an identity-provider login onto a User.

    Looks up by provider subject first. Accounts created before SSO was
    switched on are matched by email and adopt the subject the first time
    they sign in; an account already bound to another subject is returned
    unchanged. Otherwise a new user is created.
    """
    if not subject:
        raise ValueError("Identity subject is required.")

    user = User.objects.filter(external_id=subject).first()
    if user is not None:
        return user

    if email:
        user = _find_by_email(email)
        if user is not None:
            if not user.external_id:
                user.external_id = subject
                if name:
                    user.display_name = name
                user.save(update_fields=["external_id", "display_name", "updated_at"])
                logger.info("Linked existing user %s to identity provider subject", user.pk)
            return user

    username = email or subject
    if User.objects.filter(username=username).exists():
        username = subject
    user = User.objects.create_user(
        username=username,
        external_id=subject,
        display_name=name,
        email=email,
    )
    logger.info("Created user %s for new identity provider subject", user.pk)
    return user
