# clinic_core/audit/api/serializers.py
from rest_framework import serializers

from clinic_core.audit.models import AuditEntry


class AuditEntrySerializer(serializers.ModelSerializer):
    # keep API field name "timestamp", mapped to occurred_at
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)

    actor_id = serializers.IntegerField(read_only=True, allow_null=True)
    actor_name = serializers.SerializerMethodField()

    class Meta:
        model = AuditEntry
        fields = [
            "id",
            "action",
            "entity_type",
            "entity_id",
            "actor_id",
            "actor_name",
            "timestamp",
            "before",
            "after",
        ]
        read_only_fields = fields

    def get_actor_name(self, obj) -> str | None:
        return str(obj.actor) if obj.actor_id else None
