from django.contrib import admin
from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('application', 'reviewer', 'reviewee', 'rating', 'created_at')
    list_filter = ('rating',)
    search_fields = ('comment', 'reviewer__username', 'reviewee__username')
    raw_id_fields = ('application', 'reviewer', 'reviewee')
