from rest_framework import serializers

from core.sanitizers import sanitize_description, validate_rating, ValidationError as SanitizationError
from users.serializers import participant_display
from .models import Review


class RatingField(serializers.Field):
    """Integer 1..5; bools and fractional numbers are rejected."""

    def to_internal_value(self, data):
        try:
            return validate_rating(data)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))

    def to_representation(self, value):
        return int(value)


class ReviewSerializer(serializers.ModelSerializer):
    reviewer = serializers.SerializerMethodField()
    reviewee = serializers.SerializerMethodField()
    project = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            'id',
            'application_id',
            'project',
            'reviewer_id',
            'reviewer',
            'reviewee_id',
            'reviewee',
            'rating',
            'comment',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_reviewer(self, obj):
        return participant_display(obj.reviewer)

    def get_reviewee(self, obj):
        return participant_display(obj.reviewee)

    def get_project(self, obj):
        project = obj.application.project
        return {"id": project.id, "title": project.title}


class ReviewCreateSerializer(serializers.Serializer):
    application_id = serializers.IntegerField()
    reviewee_id = serializers.IntegerField()
    rating = RatingField()
    comment = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_comment(self, value):
        return sanitize_description(value)


class ReviewUpdateSerializer(serializers.Serializer):
    rating = RatingField(required=False)
    comment = serializers.CharField(required=False, allow_blank=True)

    def validate_comment(self, value):
        return sanitize_description(value)
