"""
accounts/admin.py
─────────────────
Admin registrations for User and StudentGroup.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import StudentGroup, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Extends the default UserAdmin to surface role and group membership.
    """

    list_display  = BaseUserAdmin.list_display + ('role', 'group')
    list_filter   = BaseUserAdmin.list_filter  + ('role', 'group')

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Organisation', {'fields': ('role', 'group')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Organisation', {'fields': ('role', 'group')}),
    )


@admin.register(StudentGroup)
class StudentGroupAdmin(admin.ModelAdmin):
    list_display  = ('name', 'join_code', 'is_active', 'created_at')
    list_filter   = ('is_active',)
    search_fields = ('name', 'join_code')
