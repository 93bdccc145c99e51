from django.contrib import admin
from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('title', 'company', 'status', 'budget_min', 'budget_max', 'deadline', 'created_at')
    list_filter = ('status',)
    search_fields = ('title', 'description', 'company__company_name')
