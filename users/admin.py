from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User, CompanyProfile, ResearcherProfile


@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'role', 'is_staff', 'is_active')
    list_filter = ('role', 'is_staff', 'is_superuser', 'is_active')
    search_fields = ('username', 'email', 'supabase_uid')
    fieldsets = UserAdmin.fieldsets + (
        ('Science Hub', {'fields': ('role', 'supabase_uid')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Science Hub', {'fields': ('email', 'role')}),
    )


@admin.register(CompanyProfile)
class CompanyProfileAdmin(admin.ModelAdmin):
    list_display = ('company_name', 'user', 'industry', 'verified', 'created_at')
    list_filter = ('verified', 'industry')
    search_fields = ('company_name', 'user__email')


@admin.register(ResearcherProfile)
class ResearcherProfileAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'user', 'verified', 'created_at')
    list_filter = ('verified',)
    search_fields = ('first_name', 'last_name', 'user__email')
