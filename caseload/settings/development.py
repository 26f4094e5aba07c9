"""Development settings for local use only."""
import os

from django.core.exceptions import ImproperlyConfigured
from dotenv import load_dotenv

# Load .env first; python-dotenv never overwrites variables already set in
# the shell, so the defaults below only fill gaps.
load_dotenv()

os.environ.setdefault("SECRET_KEY", "insecure-dev-key-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.abspath('caseload-dev.sqlite3')}")

# No hardcoded fallback: client names and phone numbers are encrypted with
# this key, and a committed key would make that meaningless.
if not os.environ.get("FIELD_ENCRYPTION_KEY"):
    raise ImproperlyConfigured(
        "FIELD_ENCRYPTION_KEY is not set. Add it to your .env file.\n"
        "Generate one with: python -c \"from cryptography.fernet import Fernet; "
        "print(Fernet.generate_key().decode())\""
    )

from .base import *  # noqa: F401, F403

DEBUG = True
ALLOWED_HOSTS = ["*"]

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False
SECURE_SSL_REDIRECT = False
