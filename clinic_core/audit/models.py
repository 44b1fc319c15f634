# clinic_core/audit/models.py
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditEntryImmutable(RuntimeError):
    pass


class AuditEntryQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise AuditEntryImmutable("Audit entries are write-once.")

    def delete(self):
        raise AuditEntryImmutable("Audit entries cannot be deleted.")


class AuditEntry(models.Model):
    """
    Immutable audit record.
    Written after the change it describes; never updated or deleted.

    The actor reference is nulled (not cascaded) when a principal is purged,
    so the trail outlives the people in it.
    """
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="audit_entries",
        null=True,
        blank=True,
    )
    action = models.CharField(max_length=128, db_index=True)  # e.g. "assignment.set"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Patient"
    entity_id = models.CharField(max_length=64, null=True, blank=True)

    before = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    after = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditEntryQuerySet.as_manager()

    class Meta:
        db_table = "audit_audit_entry"
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["actor", "occurred_at"], name="audit_actor_occurred_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditEntryImmutable("Audit entries are write-once.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditEntryImmutable("Audit entries cannot be deleted.")

    def __str__(self) -> str:
        return f"{self.action} {self.entity_type}:{self.entity_id}"
