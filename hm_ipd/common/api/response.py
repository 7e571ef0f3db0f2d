# hm_ipd/common/api/response.py
from __future__ import annotations

from typing import Any, Optional

from rest_framework import status as http_status
from rest_framework.response import Response


def ok(data: Any = None, *, message: Optional[str] = None, status: int = http_status.HTTP_200_OK) -> Response:
    """
    Standard success wrapper:
    {
      "success": true,
      "message": "..." (optional),
      "data": ...
    }
    """
    payload: dict[str, Any] = {"success": True}
    if message:
        payload["message"] = message
    payload["data"] = data
    return Response(payload, status=status)


def created(data: Any = None, *, message: Optional[str] = None) -> Response:
    return ok(data, message=message, status=http_status.HTTP_201_CREATED)
