from django.contrib import admin
from .models import Application


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ('project', 'researcher', 'status', 'proposed_budget', 'created_at')
    list_filter = ('status',)
    search_fields = ('project__title', 'researcher__first_name', 'researcher__last_name')
    raw_id_fields = ('project', 'researcher')
