import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("patients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PatientAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "role_slot",
                    models.CharField(
                        choices=[
                            ("ADMIN", "Administrator"),
                            ("ORTHODONTIST", "Orthodontist"),
                            ("DENTAL_SURGEON", "Dental surgeon"),
                            ("NURSE", "Nurse"),
                            ("RECEPTION", "Reception"),
                            ("STUDENT", "Student"),
                        ],
                        max_length=32,
                    ),
                ),
                ("active", models.BooleanField(db_index=True, default=True)),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="patients.patient",
                    ),
                ),
                (
                    "principal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="patient_assignments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "assigned_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assignments_made",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "assignments_patient_assignment",
                "indexes": [
                    models.Index(fields=["patient", "role_slot", "active"], name="assignment_slot_active_idx"),
                    models.Index(fields=["principal", "active"], name="assignment_principal_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("active", True)),
                        fields=("patient", "role_slot"),
                        name="uq_assignment_active_slot",
                    ),
                ],
            },
        ),
    ]
