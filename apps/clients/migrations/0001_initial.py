"""Create Client and CaseManagerAssignment."""
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("_name_encrypted", models.BinaryField(default=b"")),
                ("_phone_number_encrypted", models.BinaryField(blank=True, default=b"")),
                ("_insurance_encrypted", models.BinaryField(blank=True, default=b"")),
                ("client_id", models.CharField(blank=True, max_length=100, null=True, unique=True)),
                ("first_contact_completed", models.BooleanField(default=False)),
                ("second_contact_completed", models.BooleanField(default=False)),
                ("last_contact_date", models.DateField(blank=True, null=True)),
                ("last_face_to_face_date", models.DateField(blank=True, null=True)),
                ("next_quarterly_review", models.DateField(blank=True, null=True)),
                ("next_annual_assessment", models.DateField()),
                ("last_qr_completed", models.DateField(blank=True, null=True)),
                ("last_annual_completed", models.DateField(blank=True, null=True)),
                ("qr1_completed", models.BooleanField(default=False)),
                ("qr2_completed", models.BooleanField(default=False)),
                ("qr3_completed", models.BooleanField(default=False)),
                ("qr4_completed", models.BooleanField(default=False)),
                ("qr1_date", models.DateField(blank=True, null=True)),
                ("qr2_date", models.DateField(blank=True, null=True)),
                ("qr3_date", models.DateField(blank=True, null=True)),
                ("qr4_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "clients",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="CaseManagerAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("archived", models.BooleanField(default=False)),
                ("assigned_at", models.DateTimeField(auto_now_add=True)),
                ("case_manager", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="client_assignments", to=settings.AUTH_USER_MODEL)),
                ("client", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to="clients.client")),
            ],
            options={
                "db_table": "case_manager_assignments",
                "verbose_name": "case manager assignment",
            },
        ),
        migrations.AddConstraint(
            model_name="casemanagerassignment",
            constraint=models.UniqueConstraint(fields=("case_manager", "client"), name="unique_case_manager_client"),
        ),
    ]
