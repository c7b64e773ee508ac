"""Helpers shared by the API routers."""

import json
from typing import Any, Dict, List, Optional

from fastapi import Request, UploadFile

from portal.core.exceptions import ValidationError
from portal.schemas.schemas import PresentationContext


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def parse_payload(data: Optional[str]) -> Dict[str, Any]:
    """Decode the JSON ``data`` part of a multipart form."""
    if not data:
        return {}
    try:
        payload = json.loads(data)
    except ValueError:
        raise ValidationError({"data": ["The data field must be a JSON object."]}, {"data": data})
    if not isinstance(payload, dict):
        raise ValidationError({"data": ["The data field must be a JSON object."]}, {"data": data})
    return payload


def uploads(*files: Optional[UploadFile]) -> List[UploadFile]:
    return [f for f in files if f is not None]


def page_payload(page: Dict[str, Any], service, context: PresentationContext) -> Dict[str, Any]:
    """A listing page plus the category options and the presentation context."""
    return {
        **page,
        "options": service.options.as_payload(),
        "context": context,
    }


def record_payload(record, service, context: PresentationContext, message: Optional[str] = None) -> Dict[str, Any]:
    payload = {
        "data": service.to_out(record),
        "options": service.options.as_payload(),
        "context": context,
    }
    if message:
        payload["message"] = message
    return payload
