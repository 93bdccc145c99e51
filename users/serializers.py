from rest_framework import serializers

from core.sanitizers import (
    sanitize_title,
    sanitize_description,
    sanitize_string_list,
    ValidationError as SanitizationError,
)
from .models import User, CompanyProfile, ResearcherProfile


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'role',
            'date_joined',
        ]


class CreateProfileSerializer(serializers.Serializer):
    role = serializers.ChoiceField(
        choices=User.ROLE_CHOICES,
        error_messages={
            "required": "Invalid role",
            "invalid_choice": "Invalid role",
            "null": "Invalid role",
        },
    )


class CompanyProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = CompanyProfile
        fields = [
            'id',
            'user_id',
            'company_name',
            'description',
            'website',
            'industry',
            'company_size',
            'location',
            'logo_url',
            'verified',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'user_id', 'verified', 'created_at', 'updated_at']

    def validate_company_name(self, value):
        return sanitize_title(value)

    def validate_description(self, value):
        return sanitize_description(value)


class ResearcherProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = ResearcherProfile
        fields = [
            'id',
            'user_id',
            'first_name',
            'last_name',
            'bio',
            'specialization',
            'education',
            'experience_years',
            'location',
            'avatar_url',
            'portfolio_url',
            'verified',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'user_id', 'verified', 'created_at', 'updated_at']

    def validate_first_name(self, value):
        return sanitize_title(value)

    def validate_last_name(self, value):
        return sanitize_title(value)

    def validate_bio(self, value):
        return sanitize_description(value)

    def validate_specialization(self, value):
        try:
            return sanitize_string_list(value)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))


# -----------------------------------------
# Display summaries embedded by other apps
# -----------------------------------------
class CompanySummarySerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='company_name', read_only=True)

    class Meta:
        model = CompanyProfile
        fields = ['id', 'user_id', 'name', 'logo_url', 'industry']


class ResearcherSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = ResearcherProfile
        fields = [
            'id',
            'user_id',
            'first_name',
            'last_name',
            'avatar_url',
            'specialization',
        ]


def participant_display(user) -> dict:
    """
    Public display of a user as a tagged variant:
    {"kind": "company", ...} or {"kind": "researcher", ...}.

    Users without a role profile render as {"kind": None, "user_id": ...}.
    """
    if user.role == User.ROLE_COMPANY:
        profile = CompanyProfile.objects.filter(user=user).first()
        if profile is not None:
            return {"kind": User.ROLE_COMPANY, **CompanySummarySerializer(profile).data}

    if user.role == User.ROLE_RESEARCHER:
        profile = ResearcherProfile.objects.filter(user=user).first()
        if profile is not None:
            return {"kind": User.ROLE_RESEARCHER, **ResearcherSummarySerializer(profile).data}

    return {"kind": None, "user_id": user.pk}
