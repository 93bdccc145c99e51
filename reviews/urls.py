from django.urls import path
from .views import ReviewListCreateView, ReviewSummaryView, ReviewDetailView

urlpatterns = [
    path("", ReviewListCreateView.as_view(), name="review-list-create"),
    path("summary/", ReviewSummaryView.as_view(), name="review-summary"),
    path("<int:review_id>/", ReviewDetailView.as_view(), name="review-detail"),
]
