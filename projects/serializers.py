from rest_framework import serializers

from core.sanitizers import (
    sanitize_title,
    sanitize_description,
    sanitize_string_list,
    validate_budget,
    validate_budget_range,
    ValidationError as SanitizationError,
)
from users.serializers import CompanySummarySerializer
from .models import Project


class ProjectSerializer(serializers.ModelSerializer):
    company = CompanySummarySerializer(read_only=True)
    budget_min = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    budget_max = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )

    class Meta:
        model = Project
        fields = [
            'id',
            'company_id',
            'company',
            'title',
            'description',
            'requirements',
            'skills_required',
            'budget_min',
            'budget_max',
            'deadline',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'company_id', 'company', 'created_at', 'updated_at']

    def validate_title(self, value):
        """Sanitize project title."""
        title = sanitize_title(value)
        if not title:
            raise serializers.ValidationError("Title is required")
        return title

    def validate_description(self, value):
        """Sanitize project description (allows limited HTML)."""
        return sanitize_description(value)

    def validate_requirements(self, value):
        return sanitize_description(value)

    def validate_skills_required(self, value):
        try:
            return sanitize_string_list(value)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))

    def validate_budget_min(self, value):
        try:
            return validate_budget(value)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))

    def validate_budget_max(self, value):
        try:
            return validate_budget(value)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))

    def validate(self, attrs):
        """
        Cross-field validation:
        - budget_min must not exceed budget_max, checked against the
          stored values when only one bound is patched
        """
        instance = self.instance
        budget_min = attrs.get('budget_min', instance.budget_min if instance else None)
        budget_max = attrs.get('budget_max', instance.budget_max if instance else None)

        try:
            validate_budget_range(budget_min, budget_max)
        except SanitizationError as e:
            raise serializers.ValidationError({"budget_min": str(e)})

        return attrs


class ProjectSummarySerializer(serializers.ModelSerializer):
    """Project fields embedded in applications and reviews."""
    company = CompanySummarySerializer(read_only=True)

    class Meta:
        model = Project
        fields = [
            'id',
            'company_id',
            'company',
            'title',
            'description',
            'budget_min',
            'budget_max',
            'deadline',
            'status',
        ]
        read_only_fields = fields
