from core.exceptions import Forbidden
from users.models import User
from .models import Project


def visible_projects_for(caller):
    """
    Projects the caller may list.

    - company: its own projects, any status
    - researcher: published projects only
    - no role / no profile yet: nothing
    """
    qs = Project.objects.select_related("company")

    if caller.is_company:
        return qs.filter(company_id=caller.company_id)

    if caller.role == User.ROLE_RESEARCHER:
        return qs.filter(status=Project.STATUS_PUBLISHED)

    return qs.none()


def ensure_can_create_project(caller):
    if not caller.is_company:
        raise Forbidden("Only companies can create projects")


def ensure_project_owner(caller, project: Project, action: str = "modify"):
    """
    Only the owning company may update or delete a project.
    """
    if not caller.is_company or project.company_id != caller.company_id:
        raise Forbidden(f"You can only {action} your own projects")
