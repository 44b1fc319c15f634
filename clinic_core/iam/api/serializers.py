# clinic_core/iam/api/serializers.py
from rest_framework import serializers

from clinic_core.iam.models import Principal


class PrincipalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Principal
        fields = ["id", "username", "display_name", "role", "is_active"]
        read_only_fields = fields


class ReassignedReferenceSerializer(serializers.Serializer):
    table = serializers.CharField()
    column = serializers.CharField()
    rows = serializers.IntegerField()


class ReassignmentPlanSerializer(serializers.Serializer):
    target_id = serializers.IntegerField()
    reassigned_to = serializers.IntegerField()
    references = ReassignedReferenceSerializer(many=True)
    tables = serializers.SerializerMethodField()
    total_rows = serializers.IntegerField()

    def get_tables(self, obj) -> dict:
        return obj.by_table()


class MyPermissionsSerializer(serializers.Serializer):
    role = serializers.CharField()
    permissions = serializers.DictField(child=serializers.ListField(child=serializers.CharField()))
    assignment_scoped = serializers.ListField(child=serializers.CharField())
