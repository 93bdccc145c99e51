# users/resolver.py
"""
Profile Resolver.

Turns the authenticated Django user into a request-scoped Caller:
role plus the id of the caller's role profile. Every handler resolves the
caller once and hands it to policy/service functions; nothing is cached
between requests.
"""
from dataclasses import dataclass
from typing import Optional

from rest_framework.exceptions import NotAuthenticated

from .models import User, CompanyProfile, ResearcherProfile


@dataclass(frozen=True)
class Caller:
    user: User
    role: Optional[str] = None
    company_id: Optional[int] = None
    researcher_id: Optional[int] = None

    @property
    def user_id(self) -> int:
        return self.user.pk

    @property
    def is_company(self) -> bool:
        """Company role AND an existing company profile."""
        return self.role == User.ROLE_COMPANY and self.company_id is not None

    @property
    def is_researcher(self) -> bool:
        """Researcher role AND an existing researcher profile."""
        return self.role == User.ROLE_RESEARCHER and self.researcher_id is not None


def resolve_caller(user) -> Caller:
    """
    Resolve role and role-specific entity id for a user.

    Raises NotAuthenticated for anonymous users. A user without a role or
    without a profile row resolves to a Caller with no entity ids; callers
    treat that as "nothing to show" / "not allowed", never as an error.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        raise NotAuthenticated("Unauthorized")

    if user.role == User.ROLE_COMPANY:
        company_id = (
            CompanyProfile.objects.filter(user=user).values_list("id", flat=True).first()
        )
        return Caller(user=user, role=user.role, company_id=company_id)

    if user.role == User.ROLE_RESEARCHER:
        researcher_id = (
            ResearcherProfile.objects.filter(user=user).values_list("id", flat=True).first()
        )
        return Caller(user=user, role=user.role, researcher_id=researcher_id)

    return Caller(user=user)
