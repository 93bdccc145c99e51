from django.conf import settings
from django.db import models


class Review(models.Model):
    """
    A participant's review of the other side of an accepted application.
    One review per (application, reviewer).
    """
    application = models.ForeignKey(
        "applications.Application",
        on_delete=models.CASCADE,
        related_name="reviews"
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_given"
    )
    reviewee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_received"
    )
    rating = models.PositiveSmallIntegerField()
    comment = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        unique_together = ("application", "reviewer")
        indexes = [
            models.Index(fields=["reviewee", "created_at"], name="review_reviewee_created_idx"),
        ]

    def __str__(self):
        return f"{self.reviewer} -> {self.reviewee}: {self.rating}"
