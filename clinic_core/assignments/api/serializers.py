# clinic_core/assignments/api/serializers.py
from rest_framework import serializers

from clinic_core.assignments.models import PatientAssignment
from clinic_core.iam.constants import Role


class PatientAssignmentSerializer(serializers.ModelSerializer):
    patient_id = serializers.IntegerField(read_only=True)
    principal_id = serializers.IntegerField(read_only=True)
    principal_name = serializers.SerializerMethodField()
    assigned_by_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = PatientAssignment
        fields = [
            "id",
            "patient_id",
            "role_slot",
            "principal_id",
            "principal_name",
            "active",
            "assigned_by_id",
            "created_at",
        ]
        read_only_fields = fields

    def get_principal_name(self, obj) -> str:
        return str(obj.principal)


class AssignmentSetSerializer(serializers.Serializer):
    role_slot = serializers.ChoiceField(choices=Role.choices)
    principal_id = serializers.IntegerField(min_value=1)
