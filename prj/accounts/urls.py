"""
accounts/urls.py
────────────────
URL patterns for session authentication.
Included in the root urls.py with:
    path('api/auth/', include('accounts.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('csrf/',   views.csrf_view,   name='csrf'),
    path('login/',  views.login_view,  name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('me/',     views.me_view,     name='me'),
]
