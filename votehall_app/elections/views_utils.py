"""Shared JSON view helpers: body parsing, authentication and error mapping."""

from __future__ import annotations

import json
from collections.abc import Callable
from functools import wraps

from django.http import HttpRequest, HttpResponse, JsonResponse

from elections.exceptions import ElectionError, ElectionValidationError, StorageUnavailableError
from elections.identity import current_identity

ERROR_STATUS_CODES: dict[str, int] = {
    "ValidationError": 400,
    "NotAuthorized": 403,
    "InvalidElectionState": 409,
    "DuplicateCandidacy": 409,
    "DuplicateVote": 409,
    "InvalidTransition": 409,
    "NotFound": 404,
    "CandidacyNotFound": 404,
    "StorageUnavailable": 503,
}


def error_response(exc: ElectionError | StorageUnavailableError) -> JsonResponse:
    status = ERROR_STATUS_CODES.get(exc.code, 400)
    return JsonResponse({"ok": False, "error": str(exc), "code": exc.code}, status=status)


def parse_json_body(request: HttpRequest) -> dict[str, object]:
    raw = request.body.decode("utf-8") if request.body else "{}"
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ElectionValidationError("Request body must be valid JSON.") from exc
    if not isinstance(data, dict):
        raise ElectionValidationError("Request body must be a JSON object.")
    return data


def json_errors[**P](view_func: Callable[P, HttpResponse]) -> Callable[P, HttpResponse]:
    """Render election errors raised by a view as JSON error bodies."""

    @wraps(view_func)
    def _wrapped(*args: P.args, **kwargs: P.kwargs) -> HttpResponse:
        try:
            return view_func(*args, **kwargs)
        except ElectionError as exc:
            return error_response(exc)
        except StorageUnavailableError as exc:
            return error_response(exc)

    return _wrapped


def identity_required[**P](view_func: Callable[P, HttpResponse]) -> Callable[P, HttpResponse]:
    """401 for anonymous callers and accounts without an election identity.

    Stack it under ``json_errors`` so a failed identity lookup renders as 503.
    """

    @wraps(view_func)
    def _wrapped(*args: P.args, **kwargs: P.kwargs) -> HttpResponse:
        request = args[0]
        if not isinstance(request, HttpRequest) or current_identity(request) is None:
            return JsonResponse(
                {"ok": False, "error": "Authentication required.", "code": "NotAuthorized"},
                status=401,
            )
        return view_func(*args, **kwargs)

    return _wrapped
