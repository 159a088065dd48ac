"""
accounts/models.py
──────────────────
Identity and group membership.

User         – extends AbstractUser with a role (student / treasurer /
               finance coordinator / admin) and the group they belong to.
StudentGroup – one student organisation, e.g. "BSCS 3-A Thesis Group".

Dues and payment claims (dues app) only ever reference these by id; the
role check for verify/reject happens at the view layer.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class StudentGroup(models.Model):
    """
    A student organisation whose members owe dues.

    The join code is what students type in when they register into a group.
    """

    name = models.CharField(
        max_length=150,
        unique=True,
        help_text='Human-readable group name, e.g. "BSCS 3-A".',
    )
    join_code = models.CharField(
        max_length=20,
        unique=True,
        help_text='Code students use to join this group.',
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Student Group'
        verbose_name_plural = 'Student Groups'
        ordering = ['name']

    def __str__(self):
        return self.name


class User(AbstractUser):
    """
    Custom user model.

    Roles
    -----
    STUDENT             – a member who owes dues and submits payment claims.
    TREASURER           – creates dues and may verify claims for their group.
    FINANCE_COORDINATOR – verifies or rejects submitted payment claims.
    ADMIN               – platform administrator (Django admin only).
    """

    class Role(models.TextChoices):
        STUDENT             = 'student',             'Student'
        TREASURER           = 'treasurer',           'Treasurer'
        FINANCE_COORDINATOR = 'finance_coordinator', 'Finance Coordinator'
        ADMIN               = 'admin',               'Administrator'

    COORDINATOR_ROLES = (Role.TREASURER, Role.FINANCE_COORDINATOR)

    role = models.CharField(
        max_length=30,
        choices=Role.choices,
        default=Role.STUDENT,
        help_text='Coordinators (treasurer / finance coordinator) decide payment claims.',
    )
    group = models.ForeignKey(
        StudentGroup,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='members',
        help_text='The group this user belongs to.',
    )

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    @property
    def is_coordinator(self):
        return self.role in self.COORDINATOR_ROLES

    def __str__(self):
        return f"{self.get_full_name() or self.username} ({self.get_role_display()})"
