# --- posledger/utils/api.py ---
from flask import Response, current_app, request

from . import minijson

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def json_response(payload, status=200):
    body = minijson.encode(payload)
    return Response(body, status=status, content_type=JSON_CONTENT_TYPE)


def api_ok(data=None):
    return {
        "success": True,
        **(data or {}),
    }


def api_error(message, data=None):
    return {
        "error": message,
        **(data or {}),
    }


def ok(data, status=200):
    return json_response(data, status)


def err(message, status=400, data=None):
    return json_response(api_error(message, data), status)


def request_object():
    """Decode the request body with MiniJSON, honouring POS_STRICT_JSON."""
    body = request.get_data(as_text=True)
    return minijson.decode_object(body, strict=current_app.config.get("POS_STRICT_JSON", True))
