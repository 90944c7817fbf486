"""Identity directory: registration, profile edits and the current-identity accessor."""

from __future__ import annotations

import logging
import re

from django.contrib.auth import get_user_model, password_validation
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.http import HttpRequest

from elections.exceptions import ElectionValidationError, NotFoundError
from elections.models import Identity
from elections.storage import storage_boundary

logger = logging.getLogger(__name__)

SELF_REGISTRATION_ROLES: frozenset[str] = frozenset({Identity.Role.voter, Identity.Role.candidate})

PHONE_NUMBER_RE = re.compile(r"^\+?[0-9][0-9 -]{5,30}$")


def _clean_phone_number(value: object) -> str:
    phone_number = str(value or "").strip()
    if phone_number and not PHONE_NUMBER_RE.match(phone_number):
        raise ElectionValidationError("Phone number may only contain digits, spaces, dashes and a leading +.")
    return phone_number


@storage_boundary("current_identity")
def current_identity(request: HttpRequest) -> Identity | None:
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    try:
        return user.identity
    except Identity.DoesNotExist:
        # Staff accounts created through the Django admin have no election identity.
        return None


@storage_boundary("get_identity")
def get_identity(identity_id: int) -> Identity:
    identity = Identity.objects.filter(pk=identity_id).first()
    if identity is None:
        raise NotFoundError(f"Identity {identity_id} not found.")
    return identity


@storage_boundary("register_identity")
@transaction.atomic
def register_identity(
    *,
    username: str,
    email: str,
    password: str,
    name: str,
    role: str,
    district: str = "",
    state: str = "",
    phone_number: str = "",
    allow_admin: bool = False,
) -> Identity:
    """Create an auth user and its election identity in one transaction.

    Admin identities are only created with ``allow_admin`` (operator tooling).
    """
    username = str(username or "").strip()
    email = str(email or "").strip()
    name = str(name or "").strip()
    if not username or not email or not password or not name:
        raise ElectionValidationError("Username, email, password and name are required.")

    allowed_roles = set(Identity.Role.values) if allow_admin else SELF_REGISTRATION_ROLES
    if role not in allowed_roles:
        raise ElectionValidationError(f"Role must be one of: {', '.join(sorted(allowed_roles))}.")

    phone_number = _clean_phone_number(phone_number)

    try:
        password_validation.validate_password(password)
    except DjangoValidationError as exc:
        raise ElectionValidationError(" ".join(exc.messages)) from exc

    user_model = get_user_model()
    if user_model.objects.filter(email__iexact=email).exists():
        raise ElectionValidationError("Email already registered.")

    try:
        with transaction.atomic():
            user = user_model.objects.create_user(username=username, email=email, password=password)
    except IntegrityError as exc:
        raise ElectionValidationError("Username already registered.") from exc

    identity = Identity.objects.create(
        user=user,
        name=name,
        role=role,
        district=str(district or "").strip(),
        state=str(state or "").strip(),
        phone_number=phone_number,
    )
    logger.info("Registered identity id=%s role=%s", identity.pk, identity.role)
    return identity


@storage_boundary("update_profile")
@transaction.atomic
def update_profile(
    *,
    identity_id: int,
    name: str,
    phone_number: str = "",
    district: str = "",
    state: str = "",
) -> Identity:
    """Replace the editable profile fields. Role and account credentials are not touched."""
    identity = Identity.objects.select_for_update().filter(pk=identity_id).first()
    if identity is None:
        raise NotFoundError(f"Identity {identity_id} not found.")

    name = str(name or "").strip()
    if not name:
        raise ElectionValidationError("Name is required.")

    identity.name = name
    identity.phone_number = _clean_phone_number(phone_number)
    identity.district = str(district or "").strip()
    identity.state = str(state or "").strip()
    identity.save(update_fields=["name", "phone_number", "district", "state"])

    logger.info("Profile updated for identity id=%s", identity.pk)
    return identity
