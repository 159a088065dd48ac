"""
accounts/views.py
─────────────────
Session authentication for the JSON API: CSRF bootstrap, login, logout,
and "who am I".

CsrfViewMiddleware is on.  A client first calls GET /api/auth/csrf/ (or
me/), which sets the `csrftoken` cookie, then sends that value back in the
`X-CSRFToken` header on every POST.  Logging in rotates the token, so read
the cookie again afterwards.

The dues endpoints read the role from req.user; this module is the only
place a session is created or destroyed.
"""

from django.contrib.auth import authenticate, login, logout
from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie


def _user_payload(user):
    return {
        'id':       user.pk,
        'username': user.username,
        'name':     user.get_full_name() or user.username,
        'role':     user.role,
        'group_id': user.group_id,
    }


def login_view(req):
    """POST username + password; starts a session."""
    if req.method != 'POST':
        return JsonResponse({'error': 'Method not allowed.'}, status=405, headers={'Allow': 'POST'})

    username = req.POST.get('username', '').strip()
    password = req.POST.get('password', '')
    user = authenticate(req, username=username, password=password)
    if user is None:
        return JsonResponse({'error': 'Invalid username or password.'}, status=401)
    login(req, user)
    return JsonResponse({'user': _user_payload(user)})


def logout_view(req):
    """Log the current user out (POST only)."""
    if req.method != 'POST':
        return JsonResponse({'error': 'Method not allowed.'}, status=405, headers={'Allow': 'POST'})
    logout(req)
    return JsonResponse({'message': 'Logged out.'})


@ensure_csrf_cookie
def csrf_view(req):
    """Set the CSRF cookie; the token is echoed for clients that cannot read cookies."""
    return JsonResponse({'csrf_token': get_token(req)})


def csrf_failure(req, reason=''):
    """CSRF_FAILURE_VIEW: same JSON error shape as the rest of the API."""
    return JsonResponse(
        {'error': 'CSRF verification failed. Send the csrftoken cookie value as X-CSRFToken.',
         'code': 'csrf_failed'},
        status=403,
    )


@ensure_csrf_cookie
def me_view(req):
    """The current principal's id and role."""
    if not req.user.is_authenticated:
        return JsonResponse({'error': 'Please authenticate.'}, status=401)
    return JsonResponse({'user': _user_payload(req.user)})
