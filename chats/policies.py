from core.exceptions import Forbidden
from .models import Chat


def visible_chats_for(caller):
    """
    - company: chats with its company id
    - researcher: chats with its researcher id
    - anyone else: nothing
    """
    qs = Chat.objects.select_related(
        "application",
        "application__project",
        "application__project__company",
        "application__researcher",
    )

    if caller.is_company:
        return qs.filter(company_id=caller.company_id)

    if caller.is_researcher:
        return qs.filter(researcher_id=caller.researcher_id)

    return qs.none()


def is_participant(caller, chat: Chat) -> bool:
    return (
        (caller.is_company and chat.company_id == caller.company_id) or
        (caller.is_researcher and chat.researcher_id == caller.researcher_id)
    )


def ensure_participant(caller, chat: Chat):
    if not is_participant(caller, chat):
        raise Forbidden("Access denied")
