from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from applications.models import Application
from projects.models import Project
from reviews.models import Review
from users.tests.factories import make_company, make_researcher


class ReviewApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.company_user, self.company = make_company()
        self.researcher_user, self.researcher = make_researcher()
        self.outsider_user, _ = make_researcher("grace", "Grace", "Hopper")

        self.project = Project.objects.create(
            company=self.company,
            title="Protein folding study",
            description="d",
            status=Project.STATUS_IN_PROGRESS,
        )
        self.application = Application.objects.create(
            project=self.project,
            researcher=self.researcher,
            cover_letter="Hello",
            status=Application.STATUS_ACCEPTED,
        )
        self.list_url = reverse("review-list-create")

    def auth(self, user):
        self.client.force_authenticate(user=user)

    def review(self, user, reviewee, rating=4, **extra):
        self.auth(user)
        payload = {
            "application_id": self.application.id,
            "reviewee_id": reviewee.id,
            "rating": rating,
            "comment": "Great collaboration",
        }
        payload.update(extra)
        return self.client.post(self.list_url, payload, format="json")

    def test_company_reviews_researcher_once(self):
        resp = self.review(self.company_user, self.researcher_user, rating=6)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json(), {"error": "rating: Rating must be between 1 and 5"})

        resp = self.review(self.company_user, self.researcher_user, rating=4)
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        review = resp.data["review"]
        self.assertEqual(review["rating"], 4)
        self.assertEqual(review["reviewer"]["kind"], "company")
        self.assertEqual(review["reviewer"]["name"], "Acme Labs")
        self.assertEqual(review["reviewee"]["kind"], "researcher")
        self.assertEqual(review["reviewee"]["first_name"], "Ada")
        self.assertEqual(review["project"]["title"], "Protein folding study")

        resp = self.review(self.company_user, self.researcher_user, rating=5)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json(), {"error": "You have already reviewed this application"})
        self.assertEqual(Review.objects.count(), 1)

    def test_both_sides_can_review_each_other(self):
        self.assertEqual(
            self.review(self.company_user, self.researcher_user).status_code, status.HTTP_201_CREATED
        )
        self.assertEqual(
            self.review(self.researcher_user, self.company_user, rating=5).status_code, status.HTTP_201_CREATED
        )
        self.assertEqual(Review.objects.filter(application=self.application).count(), 2)

    def test_reviewee_must_be_the_other_participant(self):
        resp = self.review(self.company_user, self.company_user)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("reviewee_id", resp.json()["error"])

        resp = self.review(self.researcher_user, self.outsider_user)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Review.objects.exists())

    def test_only_participants_can_review(self):
        resp = self.review(self.outsider_user, self.researcher_user)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_application_must_be_accepted(self):
        Application.objects.filter(pk=self.application.pk).update(status=Application.STATUS_PENDING)
        resp = self.review(self.company_user, self.researcher_user)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json(), {"error": "Can only review accepted applications"})

        resp = self.review(self.company_user, self.researcher_user, application_id=99999)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_rating_must_be_integer(self):
        for bad in (4.5, "five", True, 0):
            resp = self.review(self.company_user, self.researcher_user, rating=bad)
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, bad)

        resp = self.review(self.company_user, self.researcher_user, rating=None)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete_by_reviewer_only(self):
        review_id = self.review(self.company_user, self.researcher_user).data["review"]["id"]
        url = reverse("review-detail", args=[review_id])

        self.auth(self.researcher_user)
        self.assertEqual(self.client.patch(url, {"rating": 1}, format="json").status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        self.auth(self.company_user)
        resp = self.client.patch(
            url,
            {"rating": 5, "comment": "Even better", "reviewee_id": self.company_user.id},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["review"]["rating"], 5)
        self.assertEqual(resp.data["review"]["reviewee_id"], self.researcher_user.id)

        resp = self.client.patch(url, {"rating": 9}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"message": "Review deleted successfully"})

        resp = self.client.get(url)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json(), {"error": "Review not found"})

    def test_list_filters_and_summary(self):
        self.review(self.company_user, self.researcher_user, rating=4)
        self.review(self.researcher_user, self.company_user, rating=5)

        self.auth(self.outsider_user)
        resp = self.client.get(self.list_url, {"user_id": self.researcher_user.id})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([r["rating"] for r in resp.data["reviews"]], [4])

        resp = self.client.get(self.list_url, {"application_id": self.application.id})
        self.assertEqual([r["rating"] for r in resp.data["reviews"]], [5, 4])

        resp = self.client.get(reverse("review-summary"), {"user_id": self.company_user.id})
        self.assertEqual(resp.data, {"user_id": self.company_user.id, "count": 1, "average_rating": 5.0})

        resp = self.client.get(reverse("review-summary"), {"user_id": self.outsider_user.id})
        self.assertEqual(resp.data["count"], 0)
        self.assertIsNone(resp.data["average_rating"])

        resp = self.client.get(reverse("review-summary"))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
