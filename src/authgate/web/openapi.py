from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from authgate.core.modules.credential.models import SESSION_COOKIE


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="AuthGate API",
            version="0.1.0",
            summary="Phone OTP login with revocable cookie sessions",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_COOKIE,
                "description": "Signed session token set at login",
            },
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Same session token for non-browser clients",
            },
        }

        openapi_schema["security"] = [
            {"SessionCookie": []},
            {"BearerAuth": []},
        ]

        public_endpoints = {
            ("POST", "/api/v1/auth/otp"),
            ("GET", "/api/v1/auth/otp/{phone}"),
            ("POST", "/api/v1/auth/login"),
            ("GET", "/health"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Unauthorized", "type": "authentication_error"},
                {"message": "OTP already sent, retry in 97 seconds", "type": "otp_cooldown"},
                {"message": "Service temporarily unavailable.", "type": "service_unavailable"},
            ]
        }
    }
