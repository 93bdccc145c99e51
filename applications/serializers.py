from rest_framework import serializers

from core.sanitizers import (
    sanitize_description,
    sanitize_text,
    validate_budget,
    ValidationError as SanitizationError,
)
from projects.serializers import ProjectSummarySerializer
from users.serializers import ResearcherSummarySerializer
from .models import Application


class ApplicationSerializer(serializers.ModelSerializer):
    """
    Read shape: application plus joined project (with company) and
    researcher summaries. Write shape: project_id on create, and the
    researcher-editable fields.
    """
    project = ProjectSummarySerializer(read_only=True)
    researcher = ResearcherSummarySerializer(read_only=True)
    project_id = serializers.IntegerField(required=True)
    proposed_budget = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )

    class Meta:
        model = Application
        fields = [
            'id',
            'project_id',
            'project',
            'researcher_id',
            'researcher',
            'cover_letter',
            'proposed_timeline',
            'proposed_budget',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'researcher_id', 'status', 'created_at', 'updated_at']

    def validate_cover_letter(self, value):
        cover_letter = sanitize_description(value)
        if not cover_letter:
            raise serializers.ValidationError("Cover letter is required")
        return cover_letter

    def validate_proposed_timeline(self, value):
        return sanitize_text(value, max_length=255)

    def validate_proposed_budget(self, value):
        try:
            return validate_budget(value)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))


class ApplicationUpdateSerializer(serializers.Serializer):
    """
    Validates a PUT/PATCH body. Which of these fields a caller may
    actually change is decided by the view.
    """
    EDITABLE_FIELDS = ('cover_letter', 'proposed_timeline', 'proposed_budget')

    status = serializers.ChoiceField(choices=Application.STATUS_CHOICES, required=False)
    cover_letter = serializers.CharField(required=False, allow_blank=False)
    proposed_timeline = serializers.CharField(required=False, allow_blank=True)
    proposed_budget = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )

    def validate_cover_letter(self, value):
        cover_letter = sanitize_description(value)
        if not cover_letter:
            raise serializers.ValidationError("Cover letter is required")
        return cover_letter

    def validate_proposed_timeline(self, value):
        return sanitize_text(value, max_length=255)

    def validate_proposed_budget(self, value):
        try:
            return validate_budget(value)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))

    def field_changes(self) -> dict:
        return {
            key: value
            for key, value in self.validated_data.items()
            if key in self.EDITABLE_FIELDS
        }
