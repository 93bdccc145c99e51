from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from projects.models import Project
from users.models import User
from users.tests.factories import make_company, make_researcher


class ProjectApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.company_user, self.company = make_company()
        self.other_company_user, self.other_company = make_company("globex", "Globex")
        self.researcher_user, self.researcher = make_researcher()
        self.list_url = reverse("project-list-create")

    def auth(self, user):
        self.client.force_authenticate(user=user)

    def create_project(self, **overrides):
        payload = {
            "title": "Protein folding study",
            "description": "<p>Model folding pathways</p>",
            "skills_required": ["Python", "Biophysics"],
            "budget_min": "1000.00",
            "budget_max": "5000.00",
        }
        payload.update(overrides)
        self.auth(self.company_user)
        return self.client.post(self.list_url, payload, format="json")

    def test_draft_becomes_visible_to_researchers_once_published(self):
        resp = self.create_project()
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        project = resp.data["project"]
        self.assertEqual(project["status"], Project.STATUS_DRAFT)
        self.assertEqual(project["company_id"], self.company.id)
        self.assertEqual(project["company"]["name"], "Acme Labs")

        self.auth(self.researcher_user)
        resp = self.client.get(self.list_url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertNotIn(project["id"], [p["id"] for p in resp.data["projects"]])

        self.auth(self.company_user)
        resp = self.client.put(
            reverse("project-detail", args=[project["id"]]),
            {"status": Project.STATUS_PUBLISHED},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["project"]["status"], Project.STATUS_PUBLISHED)

        self.auth(self.researcher_user)
        resp = self.client.get(self.list_url)
        self.assertIn(project["id"], [p["id"] for p in resp.data["projects"]])

    def test_company_lists_only_its_own_projects_in_any_status(self):
        mine = Project.objects.create(company=self.company, title="Mine", description="d")
        Project.objects.create(
            company=self.other_company, title="Theirs", description="d", status=Project.STATUS_PUBLISHED
        )

        self.auth(self.company_user)
        resp = self.client.get(self.list_url)
        self.assertEqual([p["id"] for p in resp.data["projects"]], [mine.id])

    def test_list_newest_first_with_filters(self):
        first = Project.objects.create(
            company=self.company, title="Genome assembly", description="d", status=Project.STATUS_PUBLISHED
        )
        second = Project.objects.create(
            company=self.company, title="Battery chemistry", description="d", status=Project.STATUS_PUBLISHED
        )
        Project.objects.create(company=self.company, title="Genome draft", description="d")

        self.auth(self.researcher_user)
        resp = self.client.get(self.list_url)
        self.assertEqual([p["id"] for p in resp.data["projects"]], [second.id, first.id])

        resp = self.client.get(self.list_url, {"search": "genome"})
        self.assertEqual([p["id"] for p in resp.data["projects"]], [first.id])

        self.auth(self.company_user)
        resp = self.client.get(self.list_url, {"status": Project.STATUS_DRAFT})
        self.assertEqual([p["title"] for p in resp.data["projects"]], ["Genome draft"])

    def test_user_without_profile_sees_nothing(self):
        Project.objects.create(
            company=self.company, title="Open", description="d", status=Project.STATUS_PUBLISHED
        )
        loner = User.objects.create_user(username="loner", email="loner@example.com", password="x")
        self.auth(loner)
        resp = self.client.get(self.list_url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["projects"], [])

    def test_budget_min_above_max_is_rejected(self):
        resp = self.create_project(budget_min="9000", budget_max="100")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("budget_min", resp.json()["error"])
        self.assertFalse(Project.objects.exists())

    def test_budget_invariant_rechecked_on_partial_update(self):
        project = Project.objects.create(
            company=self.company, title="P", description="d", budget_min=100, budget_max=200
        )
        self.auth(self.company_user)
        resp = self.client.patch(
            reverse("project-detail", args=[project.id]), {"budget_min": "500"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        project.refresh_from_db()
        self.assertEqual(project.budget_min, 100)

    def test_invalid_input_is_rejected(self):
        for payload in (
            {"status": "archived"},
            {"budget_min": "-5"},
            {"skills_required": ["ok", 42]},
            {"title": "   "},
        ):
            resp = self.create_project(**payload)
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, payload)
            self.assertIn("error", resp.json())

    def test_researcher_cannot_create_project(self):
        self.auth(self.researcher_user)
        resp = self.client.post(self.list_url, {"title": "X", "description": "Y"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.json(), {"error": "Only companies can create projects"})

    def test_company_is_taken_from_caller(self):
        resp = self.create_project(company_id=self.other_company.id)
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Project.objects.get().company_id, self.company.id)

    def test_only_owner_can_update_or_delete(self):
        project = Project.objects.create(company=self.company, title="P", description="d")
        url = reverse("project-detail", args=[project.id])

        self.auth(self.other_company_user)
        resp = self.client.put(url, {"title": "Hijacked"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.auth(self.researcher_user)
        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.auth(self.company_user)
        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"message": "Project deleted successfully"})
        self.assertFalse(Project.objects.filter(pk=project.id).exists())

    def test_update_strips_immutable_fields(self):
        project = Project.objects.create(company=self.company, title="P", description="d")
        self.auth(self.company_user)
        resp = self.client.patch(
            reverse("project-detail", args=[project.id]),
            {"company_id": self.other_company.id, "id": 999, "title": "Renamed"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        project.refresh_from_db()
        self.assertEqual(project.company_id, self.company.id)
        self.assertEqual(project.title, "Renamed")

    def test_get_by_id_and_missing(self):
        project = Project.objects.create(company=self.company, title="Draft", description="d")

        # read by id has no visibility filter
        self.auth(self.researcher_user)
        resp = self.client.get(reverse("project-detail", args=[project.id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["project"]["company"]["industry"], "Biotech")

        resp = self.client.get(reverse("project-detail", args=[987654]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json(), {"error": "Project not found"})

    def test_unsupported_method(self):
        self.auth(self.company_user)
        resp = self.client.delete(self.list_url)
        self.assertEqual(resp.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
