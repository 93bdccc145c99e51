# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_COMPANY = "company"
    ROLE_RESEARCHER = "researcher"

    ROLE_CHOICES = (
        (ROLE_COMPANY, "Company"),
        (ROLE_RESEARCHER, "Researcher"),
    )

    email = models.EmailField(unique=True)

    # Empty until POST /create-profile; fixed afterwards
    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        blank=True,
        null=True,
    )

    # Supabase auth user id (JWT "sub")
    supabase_uid = models.CharField(max_length=64, unique=True, blank=True, null=True)

    def __str__(self):
        return self.email or self.username


class CompanyProfile(models.Model):
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="company_profile",
    )
    company_name = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")
    website = models.URLField(blank=True, null=True)
    industry = models.CharField(max_length=120, blank=True, null=True)
    company_size = models.CharField(max_length=50, blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, null=True)
    logo_url = models.URLField(max_length=1024, blank=True, null=True)
    verified = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.company_name or f"Company of {self.user}"


class ResearcherProfile(models.Model):
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="researcher_profile",
    )
    first_name = models.CharField(max_length=150, blank=True, default="")
    last_name = models.CharField(max_length=150, blank=True, default="")
    bio = models.TextField(blank=True, default="")
    specialization = models.JSONField(default=list, blank=True, help_text="List of research areas")
    education = models.TextField(blank=True, null=True)
    experience_years = models.PositiveIntegerField(blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, null=True)
    avatar_url = models.URLField(max_length=1024, blank=True, null=True)
    portfolio_url = models.URLField(max_length=1024, blank=True, null=True)
    verified = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return self.full_name or f"Researcher {self.user}"
