"""
Field-level PII encryption using Fernet (AES-128-CBC + HMAC-SHA256).

Client names, phone numbers, insurance/authorization ids, note text and user
emails are stored as ciphertext in BinaryFields. FIELD_ENCRYPTION_KEY may hold
a comma-separated list of keys for rotation: the first key encrypts, every
key can decrypt.

Models declare encrypted attributes with ``encrypted_property``:

    class Client(models.Model):
        _name_encrypted = models.BinaryField(default=b"")
        name = encrypted_property("_name_encrypted")
"""
import logging

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from django.conf import settings
from django.core.checks import Error, register

logger = logging.getLogger(__name__)

DECRYPTION_ERROR_PLACEHOLDER = "[DECRYPTION ERROR]"

_fernet = None


class DecryptionError(Exception):
    """Raised when a stored value cannot be decrypted.

    Usually the key was rotated without re-encrypting, or the ciphertext is
    corrupted. Callers must handle this explicitly.
    """


def _get_fernet():
    """Build (once) the cipher for the configured key or keys."""
    global _fernet
    if _fernet is None:
        key_string = settings.FIELD_ENCRYPTION_KEY
        if not key_string:
            raise ValueError(
                "FIELD_ENCRYPTION_KEY is not set. "
                "Generate one with: python -c \"from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())\""
            )
        ciphers = [Fernet(k.strip().encode()) for k in key_string.split(",") if k.strip()]
        _fernet = ciphers[0] if len(ciphers) == 1 else MultiFernet(ciphers)
    return _fernet


def reset_cipher():
    """Forget the cached cipher so the next call re-reads the settings."""
    global _fernet
    _fernet = None


def encrypt_field(plaintext):
    """Encrypt a string value. Returns bytes for storage in a BinaryField."""
    if plaintext is None or plaintext == "":
        return b""
    return _get_fernet().encrypt(str(plaintext).encode("utf-8"))


def decrypt_field(ciphertext):
    """Decrypt a BinaryField value back to a string."""
    if not ciphertext:
        return ""
    if isinstance(ciphertext, memoryview):
        ciphertext = bytes(ciphertext)
    try:
        return _get_fernet().decrypt(ciphertext).decode("utf-8")
    except InvalidToken:
        logger.error("Decryption failed: possible key mismatch or data corruption")
        raise DecryptionError("Decryption failed: possible key mismatch or data corruption")


def encrypted_property(attr_name):
    """Return a property that transparently encrypts into ``attr_name``.

    Reads that fail to decrypt return a visible placeholder instead of
    raising, so one corrupted record cannot take down a whole caseload list.
    """

    def getter(instance):
        try:
            return decrypt_field(getattr(instance, attr_name))
        except DecryptionError:
            return DECRYPTION_ERROR_PLACEHOLDER

    def setter(instance, value):
        setattr(instance, attr_name, encrypt_field(value))

    return property(getter, setter)


def generate_key():
    """Generate a new Fernet key for initial setup."""
    return Fernet.generate_key().decode()


@register()
def check_encryption_key(app_configs, **kwargs):
    """System check: the configured key must round-trip a sample value."""
    errors = []
    reset_cipher()
    try:
        sample = "caseload-encryption-selftest"
        if decrypt_field(encrypt_field(sample)) != sample:
            errors.append(
                Error(
                    "FIELD_ENCRYPTION_KEY round-trip check failed.",
                    hint="Check that FIELD_ENCRYPTION_KEY is a valid Fernet key.",
                    id="caseload.E001",
                )
            )
    except Exception as exc:
        errors.append(
            Error(
                f"FIELD_ENCRYPTION_KEY is invalid or missing: {exc}",
                hint=(
                    "Generate a key with: "
                    "python -c \"from cryptography.fernet import Fernet; "
                    "print(Fernet.generate_key().decode())\""
                ),
                id="caseload.E001",
            )
        )
    finally:
        reset_cipher()
    return errors
