import logging

from django.db.models import Q
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core import analytics
from core.generics import get_or_404, strip_fields
from users.resolver import resolve_caller
from .models import Project
from .policies import visible_projects_for, ensure_can_create_project, ensure_project_owner
from .serializers import ProjectSerializer

logger = logging.getLogger("sciencehub.projects")

IMMUTABLE_FIELDS = ("id", "company", "company_id", "created_at", "updated_at")


class ProjectListCreateView(APIView):
    """
    GET /api/projects/?search=&status=
    POST /api/projects/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        caller = resolve_caller(request.user)
        qs = visible_projects_for(caller)

        search = request.query_params.get("search")
        if search:
            qs = qs.filter(
                Q(title__icontains=search) |
                Q(description__icontains=search)
            )

        status_param = request.query_params.get("status")
        if status_param and status_param != "all":
            qs = qs.filter(status=status_param)

        qs = qs.order_by("-created_at", "-id")
        return Response({"projects": ProjectSerializer(qs, many=True).data})

    def post(self, request):
        caller = resolve_caller(request.user)
        ensure_can_create_project(caller)

        data = strip_fields(request.data, IMMUTABLE_FIELDS)
        serializer = ProjectSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        project = serializer.save(company_id=caller.company_id)

        logger.info(
            "Project created: project=%s, company=%s, status=%s",
            project.id, caller.company_id, project.status,
        )
        analytics.track_event(
            analytics.PROJECT_CREATED,
            user_id=caller.user_id,
            metadata={"project_id": project.id, "status": project.status},
        )

        return Response({"project": ProjectSerializer(project).data}, status=status.HTTP_201_CREATED)


class ProjectDetailView(APIView):
    """
    GET /api/projects/<project_id>/
    PUT|PATCH /api/projects/<project_id>/
    DELETE /api/projects/<project_id>/

    Reading by id has no visibility filter: anyone authenticated who knows
    the id can fetch the project, drafts included.
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, project_id):
        return get_or_404(Project.objects.select_related("company"), project_id, "Project")

    def get(self, request, project_id):
        resolve_caller(request.user)
        project = self.get_object(project_id)
        return Response({"project": ProjectSerializer(project).data})

    def put(self, request, project_id):
        caller = resolve_caller(request.user)
        project = self.get_object(project_id)
        ensure_project_owner(caller, project, action="update")

        data = strip_fields(request.data, IMMUTABLE_FIELDS)
        serializer = ProjectSerializer(project, data=data, partial=True)
        serializer.is_valid(raise_exception=True)
        old_status = project.status
        project = serializer.save()

        if old_status != project.status:
            logger.info(
                "Project status change: project=%s, from=%s, to=%s, actor=%s",
                project.id, old_status, project.status, caller.user_id,
            )

        return Response({"project": ProjectSerializer(project).data})

    patch = put

    def delete(self, request, project_id):
        caller = resolve_caller(request.user)
        project = self.get_object(project_id)
        ensure_project_owner(caller, project, action="delete")

        project.delete()
        logger.info("Project deleted: project=%s, actor=%s", project_id, caller.user_id)

        return Response({"message": "Project deleted successfully"})
