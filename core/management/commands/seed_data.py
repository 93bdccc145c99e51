from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from applications.models import Application
from projects.models import Project
from users.models import CompanyProfile, ResearcherProfile

User = get_user_model()


class Command(BaseCommand):
    help = "Seeds the database with a demo company, researcher, projects and an application"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("🌱 Seeding data...")

        # 1. Ensure Users
        admin, _ = User.objects.get_or_create(username="admin", defaults={"email": "admin@example.com"})
        if not admin.check_password("admin"):
            admin.set_password("admin")
            admin.is_staff = True
            admin.is_superuser = True
            admin.save()

        company_user, _ = User.objects.get_or_create(
            username="acme",
            defaults={"email": "acme@example.com", "role": User.ROLE_COMPANY},
        )
        company_user.set_password("password")
        company_user.save()

        researcher_user, _ = User.objects.get_or_create(
            username="ada",
            defaults={"email": "ada@example.com", "role": User.ROLE_RESEARCHER},
        )
        researcher_user.set_password("password")
        researcher_user.save()

        # 2. Profiles
        company, _ = CompanyProfile.objects.get_or_create(
            user=company_user,
            defaults={
                "company_name": "Acme Labs",
                "description": "Applied research for materials and biotech.",
                "industry": "Biotech",
                "company_size": "50-200",
                "location": "Berlin",
                "website": "https://acme.example.com",
            },
        )
        researcher, _ = ResearcherProfile.objects.get_or_create(
            user=researcher_user,
            defaults={
                "first_name": "Ada",
                "last_name": "Lovelace",
                "bio": "Computational scientist.",
                "specialization": ["Machine learning", "Protein structure"],
                "education": "PhD, Computational Biology",
                "experience_years": 8,
                "location": "London",
            },
        )
        self.stdout.write(f"Company: {company.company_name}, researcher: {researcher.full_name}")

        # 3. Projects
        today = timezone.now().date()
        projects_data = [
            {
                "title": "Protein folding pathways",
                "description": "Model folding intermediates for a family of enzymes.",
                "skills_required": ["Python", "Molecular dynamics"],
                "budget_min": Decimal("5000"),
                "budget_max": Decimal("12000"),
                "deadline": today + timezone.timedelta(days=60),
                "status": Project.STATUS_PUBLISHED,
            },
            {
                "title": "Solid-state electrolyte screening",
                "description": "Rank candidate electrolytes from published datasets.",
                "skills_required": ["Materials science", "Data analysis"],
                "budget_min": Decimal("3000"),
                "budget_max": Decimal("8000"),
                "deadline": today + timezone.timedelta(days=90),
                "status": Project.STATUS_PUBLISHED,
            },
            {
                "title": "Sensor calibration study",
                "description": "Internal draft, not yet open for applications.",
                "skills_required": ["Statistics"],
                "status": Project.STATUS_DRAFT,
            },
        ]

        projects = []
        for data in projects_data:
            project, created = Project.objects.get_or_create(
                company=company,
                title=data["title"],
                defaults=data,
            )
            projects.append(project)
            if created:
                self.stdout.write(f"Created Project: {project.title}")

        # 4. Application
        application, created = Application.objects.get_or_create(
            project=projects[0],
            researcher=researcher,
            defaults={
                "cover_letter": "I have published on enzyme folding and would love to help.",
                "proposed_timeline": "10 weeks",
                "proposed_budget": Decimal("9000"),
            },
        )
        if created:
            self.stdout.write(f"Created Application #{application.id} ({application.status})")

        self.stdout.write(self.style.SUCCESS("✅ Seeding complete!"))
