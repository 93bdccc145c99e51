from django.db import models


class Application(models.Model):
    """
    A researcher's application to a published project.

    One application per (project, researcher). Only pending applications
    change status; accepted, rejected and withdrawn are final.
    """
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"
    STATUS_WITHDRAWN = "withdrawn"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_WITHDRAWN, "Withdrawn"),
    ]

    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        related_name="applications"
    )
    researcher = models.ForeignKey(
        "users.ResearcherProfile",
        on_delete=models.CASCADE,
        related_name="applications"
    )
    cover_letter = models.TextField()
    proposed_timeline = models.CharField(max_length=255, blank=True, default="")
    proposed_budget = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        unique_together = ("project", "researcher")
        indexes = [
            models.Index(fields=["researcher", "created_at"], name="application_researcher_idx"),
            models.Index(fields=["project", "status"], name="application_project_status_idx"),
        ]

    def __str__(self):
        return f"{self.researcher} -> {self.project} ({self.status})"
