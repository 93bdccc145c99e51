from core.exceptions import Forbidden
from .models import Application


def visible_applications_for(caller):
    """
    Applications the caller may list.

    - company: applications to its projects
    - researcher: its own applications
    - anyone else: nothing
    """
    qs = Application.objects.select_related(
        "project",
        "project__company",
        "researcher",
    )

    if caller.is_company:
        return qs.filter(project__company_id=caller.company_id)

    if caller.is_researcher:
        return qs.filter(researcher_id=caller.researcher_id)

    return qs.none()


def is_owning_researcher(caller, application: Application) -> bool:
    return caller.is_researcher and application.researcher_id == caller.researcher_id


def is_owning_company(caller, application: Application) -> bool:
    return caller.is_company and application.project.company_id == caller.company_id


def ensure_can_access(caller, application: Application):
    if not (is_owning_researcher(caller, application) or is_owning_company(caller, application)):
        raise Forbidden("Access denied")


def ensure_can_apply(caller):
    if not caller.is_researcher:
        raise Forbidden("Only researchers can create applications")


def ensure_can_delete(caller, application: Application):
    if not is_owning_researcher(caller, application):
        raise Forbidden("You can only delete your own applications")
