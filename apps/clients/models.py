"""Client records and case manager assignments."""
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from caseload.encryption import encrypted_property


class ClientQuerySet(models.QuerySet):
    """Custom queryset for Client with assignment filtering."""

    def for_case_manager(self, user):
        """Clients actively assigned to ``user`` (archived assignments excluded)."""
        return self.filter(
            assignments__case_manager=user,
            assignments__archived=False,
        )


class Client(models.Model):
    """A consumer on one or more case managers' caseloads.

    Quarterly-review dates (``qr1_date``..``qr4_date``) are overrides: when
    null, the date calculated from ``next_annual_assessment`` applies.
    """

    # Encrypted PII
    _name_encrypted = models.BinaryField(default=b"")
    _phone_number_encrypted = models.BinaryField(default=b"", blank=True)
    _insurance_encrypted = models.BinaryField(default=b"", blank=True)

    # Record number from the agency's system (the CSV "Client/Record ID").
    client_id = models.CharField(max_length=100, null=True, blank=True, unique=True)

    # Monthly contact checklist (cleared on the 1st of each month)
    first_contact_completed = models.BooleanField(default=False)
    second_contact_completed = models.BooleanField(default=False)

    last_contact_date = models.DateField(null=True, blank=True)
    last_face_to_face_date = models.DateField(null=True, blank=True)

    # Annual cycle. The annual assessment is always the 1st of its month.
    next_quarterly_review = models.DateField(null=True, blank=True)
    next_annual_assessment = models.DateField()
    last_qr_completed = models.DateField(null=True, blank=True)
    last_annual_completed = models.DateField(null=True, blank=True)

    qr1_completed = models.BooleanField(default=False)
    qr2_completed = models.BooleanField(default=False)
    qr3_completed = models.BooleanField(default=False)
    qr4_completed = models.BooleanField(default=False)

    qr1_date = models.DateField(null=True, blank=True)
    qr2_date = models.DateField(null=True, blank=True)
    qr3_date = models.DateField(null=True, blank=True)
    qr4_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ClientQuerySet.as_manager()

    class Meta:
        app_label = "clients"
        db_table = "clients"
        ordering = ["-updated_at"]

    name = encrypted_property("_name_encrypted")
    phone_number = encrypted_property("_phone_number_encrypted")
    insurance = encrypted_property("_insurance_encrypted")

    def __str__(self):
        return self.name or f"Client #{self.pk}"

    @property
    def first_name(self):
        parts = self.name.split()
        return parts[0] if parts else ""

    @property
    def last_name(self):
        parts = self.name.split()
        return parts[-1] if parts else ""


class CaseManagerAssignment(models.Model):
    """Links a case manager to a client.

    Archiving is per case manager: it hides the client from this caseload
    without touching other case managers' assignments.
    """

    case_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="client_assignments",
    )
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name="assignments")
    archived = models.BooleanField(default=False)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "clients"
        db_table = "case_manager_assignments"
        constraints = [
            models.UniqueConstraint(
                fields=["case_manager", "client"],
                name="unique_case_manager_client",
            ),
        ]
        verbose_name = _("case manager assignment")

    def __str__(self):
        state = " (archived)" if self.archived else ""
        return f"{self.case_manager} → {self.client}{state}"
