# clinic_core/audit/filters.py
import django_filters

from clinic_core.audit.models import AuditEntry


class AuditEntryFilter(django_filters.FilterSet):
    actor = django_filters.NumberFilter(field_name="actor_id")
    entity_type = django_filters.CharFilter(field_name="entity_type")
    entity_id = django_filters.CharFilter(field_name="entity_id")
    action = django_filters.CharFilter(field_name="action")
    occurred_after = django_filters.IsoDateTimeFilter(field_name="occurred_at", lookup_expr="gte")
    occurred_before = django_filters.IsoDateTimeFilter(field_name="occurred_at", lookup_expr="lte")

    class Meta:
        model = AuditEntry
        fields = ["actor", "entity_type", "entity_id", "action", "occurred_after", "occurred_before"]
