"""JSON plumbing shared by the API views: authentication, body parsing,
the user-date context and the mapping of errors to status codes."""
from __future__ import annotations

import json
import logging
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError
from django.db.models import ProtectedError, RestrictedError
from django.http import Http404, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .auth import authenticate
from .dates import MonthContext
from .exceptions import AuthenticationFailed, ConflictError, PreconditionFailed

logger = logging.getLogger(__name__)


def respond(data, status: int = 200) -> JsonResponse:
    return JsonResponse(data, status=status, encoder=DjangoJSONEncoder, safe=False)


def error_response(kind: str, message: str, status: int, details=None) -> JsonResponse:
    body = {"error": kind, "message": message}
    if details:
        body["details"] = details
    return respond(body, status=status)


def _parse_body(request) -> dict:
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON.")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def api_endpoint(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            request.user = authenticate(request)
            request.payload = _parse_body(request)
            request.month_context = MonthContext.from_params({**request.GET.dict(), **request.payload})
            return view(request, *args, **kwargs)
        except AuthenticationFailed as e:
            return error_response("unauthorized", str(e), 401)
        except ValidationError as e:
            details = e.message_dict if hasattr(e, "error_dict") else None
            return error_response("validation", "; ".join(e.messages), 400, details)
        except (ObjectDoesNotExist, Http404) as e:
            return error_response("not_found", str(e) or "Not found.", 404)
        except ConflictError as e:
            return error_response("conflict", str(e), 409)
        except (ProtectedError, RestrictedError) as e:
            return error_response("conflict", e.args[0] if e.args else str(e), 409)
        except PreconditionFailed as e:
            return error_response("precondition_failed", str(e), 422)
        except DatabaseError as e:
            logger.exception(
                "Store error",
                extra={
                    "path": request.path,
                    "method": request.method,
                    "error": str(e),
                    "action": "store_error",
                    "component": "Api",
                },
            )
            return error_response("store", str(e), 500)

    return csrf_exempt(wrapper)


def month_params(request) -> tuple[int, int]:
    """``year``/``month`` from the query string or body, defaulting to the context month."""
    params = {**request.GET.dict(), **request.payload}
    context = request.month_context
    try:
        year = int(params.get("year") or context.year)
        month = int(params.get("month") or context.month)
    except (TypeError, ValueError):
        raise ValidationError("year and month must be integers.")
    if not 1 <= month <= 12:
        raise ValidationError({"month": ["Month must be between 1 and 12."]})
    return year, month
