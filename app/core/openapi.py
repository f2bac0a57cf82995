"""OpenAPI metadata customization.

Adds tag descriptions and documents the 429 throttling response on every
rate-limited operation.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {"name": "Throttle", "description": "Rate-limited endpoints keyed by client IP."},
    {"name": "Email", "description": "Background email jobs."},
    {"name": "Health", "description": "Liveness checks."},
]

_THROTTLED_RESPONSE = {
    "description": "Too many requests from this client in the current window.",
    "content": {
        "application/json": {
            "example": {"message": "Too many request!. Try again some time later"}
        }
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with tags and the 429 response."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for methods in schema.get("paths", {}).values():
            for method_obj in methods.values():
                if isinstance(method_obj, dict) and "Throttle" in method_obj.get("tags", []):
                    method_obj.setdefault("responses", {}).setdefault("429", _THROTTLED_RESPONSE)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
