from rest_framework.exceptions import ValidationError

from core.exceptions import Forbidden


def participant_user_ids(application):
    """
    (company-side user id, researcher-side user id) of an application.
    """
    return (
        application.project.company.user_id,
        application.researcher.user_id,
    )


def expected_reviewee_id(application, reviewer_id):
    """
    The other participant relative to `reviewer_id`.

    Forbidden when the reviewer is not a participant at all.
    """
    company_user_id, researcher_user_id = participant_user_ids(application)

    if reviewer_id == company_user_id:
        return researcher_user_id
    if reviewer_id == researcher_user_id:
        return company_user_id

    raise Forbidden("Access denied. Only application participants can create reviews")


def ensure_reviewee(application, reviewer_id, reviewee_id):
    company_user_id, _ = participant_user_ids(application)
    if reviewee_id != expected_reviewee_id(application, reviewer_id):
        if reviewer_id == company_user_id:
            raise ValidationError({"reviewee_id": "Company can only review the researcher from this application"})
        raise ValidationError({"reviewee_id": "Researcher can only review the company from this application"})


def ensure_reviewer(caller, review):
    if review.reviewer_id != caller.user_id:
        raise Forbidden("You can only modify your own reviews")
