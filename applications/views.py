import logging

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core import analytics
from core.exceptions import Conflict, Forbidden, InvalidState
from core.generics import get_or_404, strip_fields
from projects.models import Project
from users.resolver import resolve_caller
from . import state_machine
from .models import Application
from .policies import (
    visible_applications_for,
    is_owning_researcher,
    ensure_can_access,
    ensure_can_apply,
    ensure_can_delete,
)
from .serializers import ApplicationSerializer, ApplicationUpdateSerializer

logger = logging.getLogger("sciencehub.applications")

IMMUTABLE_FIELDS = (
    "id",
    "project",
    "project_id",
    "researcher",
    "researcher_id",
    "created_at",
    "updated_at",
)


def _load(application_id):
    return get_or_404(
        Application.objects.select_related("project", "project__company", "researcher"),
        application_id,
        "Application",
    )


class ApplicationListCreateView(APIView):
    """
    GET /api/applications/?status=&project_id=
    POST /api/applications/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        caller = resolve_caller(request.user)
        qs = visible_applications_for(caller)

        status_param = request.query_params.get("status")
        if status_param and status_param != "all":
            qs = qs.filter(status=status_param)

        project_id = request.query_params.get("project_id")
        if project_id:
            if not project_id.isdigit():
                return Response({"applications": []})
            qs = qs.filter(project_id=int(project_id))

        qs = qs.order_by("-created_at", "-id")
        return Response({"applications": ApplicationSerializer(qs, many=True).data})

    def post(self, request):
        caller = resolve_caller(request.user)
        ensure_can_apply(caller)

        data = strip_fields(request.data, ("id", "researcher", "researcher_id", "status", "created_at"))
        serializer = ApplicationSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        project_id = serializer.validated_data["project_id"]

        is_open = Project.objects.filter(
            pk=project_id, status=Project.STATUS_PUBLISHED
        ).exists()
        if not is_open:
            raise InvalidState("Project not found or not published")

        already_applied = Application.objects.filter(
            project_id=project_id, researcher_id=caller.researcher_id
        ).exists()
        if already_applied:
            raise Conflict("You have already applied to this project")

        try:
            with transaction.atomic():
                application = serializer.save(
                    researcher_id=caller.researcher_id,
                    status=Application.STATUS_PENDING,
                )
        except IntegrityError:
            # concurrent duplicate slipped past the pre-check
            raise Conflict("You have already applied to this project")

        logger.info(
            "Application submitted: application=%s, project=%s, researcher=%s",
            application.id, project_id, caller.researcher_id,
        )
        analytics.track_event(
            analytics.APPLICATION_SUBMITTED,
            user_id=caller.user_id,
            metadata={"application_id": application.id, "project_id": project_id},
        )

        application = _load(application.id)
        return Response(
            {"application": ApplicationSerializer(application).data},
            status=status.HTTP_201_CREATED,
        )


class ApplicationDetailView(APIView):
    """
    GET /api/applications/<application_id>/
    PUT|PATCH /api/applications/<application_id>/
    DELETE /api/applications/<application_id>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, application_id):
        caller = resolve_caller(request.user)
        application = _load(application_id)
        ensure_can_access(caller, application)
        return Response({"application": ApplicationSerializer(application).data})

    def put(self, request, application_id):
        caller = resolve_caller(request.user)
        application = _load(application_id)
        ensure_can_access(caller, application)

        data = strip_fields(request.data, IMMUTABLE_FIELDS)
        serializer = ApplicationUpdateSerializer(data=data)
        serializer.is_valid(raise_exception=True)

        new_status = serializer.validated_data.get("status")
        if new_status == application.status:
            new_status = None
        changes = serializer.field_changes()

        if is_owning_researcher(caller, application):
            if changes and application.status != Application.STATUS_PENDING:
                raise InvalidState("Cannot modify application after it has been reviewed")
        elif changes:
            raise Forbidden("Companies can only accept or reject applications")

        if new_status:
            application = state_machine.transition(application, new_status, caller, fields=changes)
            analytics.track_event(
                analytics.application_status_action(new_status),
                user_id=caller.user_id,
                metadata={"application_id": application.id, "project_id": application.project_id},
            )
        elif changes:
            changes["updated_at"] = timezone.now()
            updated = (
                Application.objects
                .filter(pk=application.pk, status=Application.STATUS_PENDING)
                .update(**changes)
            )
            if updated == 0:
                raise Conflict("Application status was changed by another request")
            logger.info(
                "Application edited: application=%s, fields=%s, actor=%s",
                application.id, sorted(changes), caller.user_id,
            )

        application = _load(application.id)
        return Response({"application": ApplicationSerializer(application).data})

    patch = put

    def delete(self, request, application_id):
        caller = resolve_caller(request.user)
        application = _load(application_id)
        ensure_can_delete(caller, application)

        if application.status == Application.STATUS_ACCEPTED:
            raise InvalidState("Cannot delete accepted applications")

        application.delete()
        logger.info("Application deleted: application=%s, actor=%s", application_id, caller.user_id)

        return Response({"message": "Application deleted successfully"})
