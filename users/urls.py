# users/urls.py

from django.urls import path
from .views import (
    CreateProfileView,
    MeView,
    MyProfileView,
    CompanyProfileDetailView,
    ResearcherProfileDetailView,
)

urlpatterns = [
    path("create-profile/", CreateProfileView.as_view(), name="create-profile"),
    path("me/", MeView.as_view(), name="me"),
    path("me/profile/", MyProfileView.as_view(), name="my-profile"),
    path("companies/<int:pk>/", CompanyProfileDetailView.as_view(), name="company-detail"),
    path("researchers/<int:pk>/", ResearcherProfileDetailView.as_view(), name="researcher-detail"),
]
