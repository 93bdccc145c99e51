# applications/state_machine.py
"""
Application State Machine.

pending → accepted   (company)
pending → rejected   (company)
pending → withdrawn  (researcher)

accepted, rejected and withdrawn are terminal. Any transition not in
VALID_TRANSITIONS is rejected.
"""
import logging

from django.utils import timezone

from core.exceptions import Conflict, Forbidden, InvalidTransition
from users.models import User
from .models import Application
from .signals import application_status_changed

logger = logging.getLogger("sciencehub.applications")


# (from_status, to_status) -> role allowed to make the move
VALID_TRANSITIONS = {
    (Application.STATUS_PENDING, Application.STATUS_ACCEPTED): User.ROLE_COMPANY,
    (Application.STATUS_PENDING, Application.STATUS_REJECTED): User.ROLE_COMPANY,
    (Application.STATUS_PENDING, Application.STATUS_WITHDRAWN): User.ROLE_RESEARCHER,
}


def get_allowed_transitions(status: str, role: str = None) -> list:
    return [
        to_status
        for (from_status, to_status), allowed_role in VALID_TRANSITIONS.items()
        if from_status == status and (role is None or role == allowed_role)
    ]


def is_terminal_status(status: str) -> bool:
    return not get_allowed_transitions(status)


def check_transition(application: Application, new_status: str, caller) -> None:
    """
    Raise unless `caller` may move `application` to `new_status`.

    InvalidTransition for an edge that does not exist, Forbidden for an
    edge that belongs to the other role.
    """
    edge = (application.status, new_status)
    allowed_role = VALID_TRANSITIONS.get(edge)

    if allowed_role is None:
        logger.warning(
            "Invalid application transition attempted: application=%s, from=%s, to=%s, actor=%s",
            application.id, application.status, new_status, caller.user_id,
        )
        raise InvalidTransition(
            f"Cannot transition from '{application.status}' to '{new_status}'"
        )

    if caller.role != allowed_role:
        raise Forbidden(f"Only the {allowed_role} can set status '{new_status}'")


def transition(application: Application, new_status: str, caller, fields: dict = None) -> Application:
    """
    Move an application to `new_status` with one conditional UPDATE.

    The row is only written while its status is still the one we read;
    zero affected rows means another request changed it first.
    """
    check_transition(application, new_status, caller)

    old_status = application.status
    values = dict(fields or {})
    values["status"] = new_status
    values["updated_at"] = timezone.now()

    updated = (
        Application.objects
        .filter(pk=application.pk, status=old_status)
        .update(**values)
    )
    if updated == 0:
        logger.warning(
            "Lost application transition race: application=%s, expected=%s, to=%s, actor=%s",
            application.id, old_status, new_status, caller.user_id,
        )
        raise Conflict("Application status was changed by another request")

    application.refresh_from_db()

    logger.info(
        "Application state transition: application=%s, from=%s, to=%s, actor=%s",
        application.id, old_status, new_status, caller.user_id,
    )

    application_status_changed.send(
        sender=Application,
        application=application,
        old_status=old_status,
        new_status=new_status,
        caller=caller,
    )
    return application
