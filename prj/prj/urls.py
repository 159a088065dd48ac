"""
URL configuration for prj project.

  /admin/      Django admin (groups, users, dues, claim audit trail)
  /api/auth/   session login / logout / current user
  /api/        dues, payment claims, coordinator decisions
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),
    path('api/', include('dues.urls')),
]
