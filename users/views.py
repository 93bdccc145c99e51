# users/views.py - profile creation and management

import logging

from django.db import transaction
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import Conflict
from core.generics import get_or_404, strip_fields
from .models import User, CompanyProfile, ResearcherProfile
from .resolver import resolve_caller
from .serializers import (
    UserSerializer,
    CreateProfileSerializer,
    CompanyProfileSerializer,
    ResearcherProfileSerializer,
)

logger = logging.getLogger("sciencehub.users")

PROFILE_MODELS = {
    User.ROLE_COMPANY: (CompanyProfile, CompanyProfileSerializer),
    User.ROLE_RESEARCHER: (ResearcherProfile, ResearcherProfileSerializer),
}

PROFILE_READ_ONLY_FIELDS = ("id", "user", "user_id", "verified", "created_at", "updated_at")


class CreateProfileView(APIView):
    """
    POST /api/create-profile/
    Body: {"role": "company" | "researcher"}

    Sets the caller's role and creates the matching empty profile.
    Repeating the call with the same role returns the existing profile.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CreateProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = serializer.validated_data["role"]

        profile_model, profile_serializer = PROFILE_MODELS[role]

        with transaction.atomic():
            user = User.objects.select_for_update().get(pk=request.user.pk)

            if user.role and user.role != role:
                raise Conflict(f"Profile already created with role '{user.role}'")

            if user.role != role:
                user.role = role
                user.save(update_fields=["role"])

            profile, created = profile_model.objects.get_or_create(user=user)

        if created:
            logger.info("Created %s profile for user %s", role, user.id)

        return Response(
            {
                "success": True,
                "message": "Profile created successfully" if created else "Profile already exists",
                "role": role,
                "profile": profile_serializer(profile).data,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class MeView(APIView):
    """
    GET /api/me/
    Current user plus the resolved role and profile ids.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        caller = resolve_caller(request.user)
        return Response({
            "user": UserSerializer(request.user).data,
            "role": caller.role,
            "company_id": caller.company_id,
            "researcher_id": caller.researcher_id,
        })


class MyProfileView(APIView):
    """
    GET /api/me/profile/
    PATCH /api/me/profile/
    """
    permission_classes = [IsAuthenticated]

    def _get_profile(self, request):
        caller = resolve_caller(request.user)
        if caller.role not in PROFILE_MODELS:
            raise NotFound("Profile not found")

        profile_model, profile_serializer = PROFILE_MODELS[caller.role]
        profile = profile_model.objects.filter(user=request.user).first()
        if profile is None:
            raise NotFound("Profile not found")
        return caller, profile, profile_serializer

    def get(self, request):
        caller, profile, profile_serializer = self._get_profile(request)
        return Response({
            "role": caller.role,
            "profile": profile_serializer(profile).data,
        })

    def patch(self, request):
        caller, profile, profile_serializer = self._get_profile(request)

        data = strip_fields(request.data, PROFILE_READ_ONLY_FIELDS)
        serializer = profile_serializer(profile, data=data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response({
            "role": caller.role,
            "profile": serializer.data,
        })

    put = patch


class CompanyProfileDetailView(APIView):
    """
    GET /api/companies/<pk>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        profile = get_or_404(CompanyProfile.objects.all(), pk, "Company")
        return Response({"company": CompanyProfileSerializer(profile).data})


class ResearcherProfileDetailView(APIView):
    """
    GET /api/researchers/<pk>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        profile = get_or_404(ResearcherProfile.objects.all(), pk, "Researcher")
        return Response({"researcher": ResearcherProfileSerializer(profile).data})
