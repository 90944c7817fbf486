"""Session authentication endpoints for the JSON API."""

import logging

from django.contrib.auth import authenticate, login, logout
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from elections.forms import LoginForm, ProfileForm, RegistrationForm
from elections.identity import current_identity, register_identity, update_profile
from elections.models import Identity
from elections.views_utils import identity_required, json_errors, parse_json_body

logger = logging.getLogger(__name__)


def _identity_payload(identity: Identity) -> dict[str, object]:
    return {
        "id": identity.pk,
        "username": identity.user.get_username(),
        "email": identity.user.email,
        "name": identity.name,
        "role": identity.role,
        "district": identity.district,
        "state": identity.state,
        "phone_number": identity.phone_number,
    }


@require_GET
@ensure_csrf_cookie
def csrf(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"ok": True})


@require_POST
@json_errors
def register(request: HttpRequest) -> JsonResponse:
    data = RegistrationForm(data=parse_json_body(request)).cleaned_or_raise()
    identity = register_identity(
        username=str(data["username"]),
        email=str(data["email"]),
        password=str(data["password"]),
        name=str(data["name"]),
        role=str(data["role"]),
        district=str(data.get("district") or ""),
        state=str(data.get("state") or ""),
        phone_number=str(data.get("phone_number") or ""),
    )
    return JsonResponse({"ok": True, "identity": _identity_payload(identity)}, status=201)


@require_POST
@json_errors
def login_view(request: HttpRequest) -> JsonResponse:
    data = LoginForm(data=parse_json_body(request)).cleaned_or_raise()
    user = authenticate(request, username=str(data["username"]), password=str(data["password"]))
    if user is None:
        logger.info("Failed login attempt for username=%r", data["username"])
        return JsonResponse({"ok": False, "error": "Invalid username or password.", "code": "NotAuthorized"}, status=401)

    login(request, user)
    identity = current_identity(request)
    return JsonResponse(
        {"ok": True, "identity": _identity_payload(identity) if identity is not None else None}
    )


@require_POST
def logout_view(request: HttpRequest) -> JsonResponse:
    logout(request)
    return JsonResponse({"ok": True})


@require_http_methods(["GET", "POST"])
@json_errors
@identity_required
def me(request: HttpRequest) -> JsonResponse:
    identity = current_identity(request)
    assert identity is not None
    if request.method == "POST":
        data = ProfileForm(data=parse_json_body(request)).cleaned_or_raise()
        identity = update_profile(
            identity_id=identity.pk,
            name=str(data["name"]),
            phone_number=str(data.get("phone_number") or ""),
            district=str(data.get("district") or ""),
            state=str(data.get("state") or ""),
        )
    return JsonResponse({"ok": True, "identity": _identity_payload(identity)})
