import logging

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from applications.models import Application
from core import analytics
from core.exceptions import Conflict, InvalidState
from core.generics import get_or_404
from users.resolver import resolve_caller
from .models import Review
from .policies import ensure_reviewee, ensure_reviewer
from .serializers import ReviewSerializer, ReviewCreateSerializer, ReviewUpdateSerializer

logger = logging.getLogger("sciencehub.reviews")

REVIEW_RELATED = (
    "application",
    "application__project",
    "reviewer",
    "reviewee",
)


def _int_param(request, name):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError({name: "Must be an integer"})


class ReviewListCreateView(APIView):
    """
    GET /api/reviews/?user_id=&application_id=
    POST /api/reviews/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = Review.objects.select_related(*REVIEW_RELATED)

        user_id = _int_param(request, "user_id")
        if user_id is not None:
            qs = qs.filter(reviewee_id=user_id)

        application_id = _int_param(request, "application_id")
        if application_id is not None:
            qs = qs.filter(application_id=application_id)

        qs = qs.order_by("-created_at", "-id")
        return Response({"reviews": ReviewSerializer(qs, many=True).data})

    def post(self, request):
        caller = resolve_caller(request.user)

        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        application = get_or_404(
            Application.objects.select_related("project__company", "researcher"),
            data["application_id"],
            "Application",
        )
        if application.status != Application.STATUS_ACCEPTED:
            raise InvalidState("Can only review accepted applications")

        # Forbidden for non-participants, Validation for the wrong reviewee
        ensure_reviewee(application, caller.user_id, data["reviewee_id"])

        if Review.objects.filter(application=application, reviewer_id=caller.user_id).exists():
            raise Conflict("You have already reviewed this application")

        try:
            with transaction.atomic():
                review = Review.objects.create(
                    application=application,
                    reviewer_id=caller.user_id,
                    reviewee_id=data["reviewee_id"],
                    rating=data["rating"],
                    comment=data.get("comment", ""),
                )
        except IntegrityError:
            raise Conflict("You have already reviewed this application")

        logger.info(
            "Review created: review=%s, application=%s, reviewer=%s, reviewee=%s, rating=%s",
            review.id, application.id, caller.user_id, review.reviewee_id, review.rating,
        )
        analytics.track_event(
            analytics.REVIEW_CREATED,
            user_id=caller.user_id,
            metadata={"review_id": review.id, "application_id": application.id, "rating": review.rating},
        )

        review = Review.objects.select_related(*REVIEW_RELATED).get(pk=review.pk)
        return Response({"review": ReviewSerializer(review).data}, status=status.HTTP_201_CREATED)


class ReviewSummaryView(APIView):
    """
    GET /api/reviews/summary/?user_id=
    Count and average rating received by a user.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user_id = _int_param(request, "user_id")
        if user_id is None:
            raise ValidationError({"user_id": "This query parameter is required."})

        stats = Review.objects.filter(reviewee_id=user_id).aggregate(
            count=Count("id"),
            average=Avg("rating"),
        )
        average = stats["average"]

        return Response({
            "user_id": user_id,
            "count": stats["count"],
            "average_rating": round(float(average), 2) if average is not None else None,
        })


class ReviewDetailView(APIView):
    """
    GET /api/reviews/<review_id>/
    PUT|PATCH /api/reviews/<review_id>/  {rating?, comment?}
    DELETE /api/reviews/<review_id>/
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, review_id):
        return get_or_404(Review.objects.select_related(*REVIEW_RELATED), review_id, "Review")

    def get(self, request, review_id):
        review = self.get_object(review_id)
        return Response({"review": ReviewSerializer(review).data})

    def put(self, request, review_id):
        caller = resolve_caller(request.user)
        review = self.get_object(review_id)
        ensure_reviewer(caller, review)

        serializer = ReviewUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        changed = []
        for field, value in serializer.validated_data.items():
            setattr(review, field, value)
            changed.append(field)

        if changed:
            review.save(update_fields=changed + ["updated_at"])
            logger.info("Review updated: review=%s, fields=%s", review.id, changed)

        return Response({"review": ReviewSerializer(review).data})

    patch = put

    def delete(self, request, review_id):
        caller = resolve_caller(request.user)
        review = self.get_object(review_id)
        ensure_reviewer(caller, review)

        review.delete()
        logger.info("Review deleted: review=%s, reviewer=%s", review_id, caller.user_id)

        return Response({"message": "Review deleted successfully"})
