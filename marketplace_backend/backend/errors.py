# backend/errors.py
"""
PATH: backend/errors.py

API ERROR ENVELOPE

Every domain failure that reaches an HTTP client is shaped as:

    {"error": {"code": "<STABLE_CODE>", "message": "<human text>", ...context}}

Codes are stable identifiers; clients switch on them, never on messages.
"""

from __future__ import annotations

from rest_framework.response import Response


def error_response(*, code: str, message: str, http_status: int, **context) -> Response:
    payload = {"code": code, "message": message}
    payload.update({k: v for k, v in context.items() if v is not None})
    return Response({"error": payload}, status=http_status)
