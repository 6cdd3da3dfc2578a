from __future__ import annotations

from flask import Flask, request

from ..common.http import error_response, internal_error, json_body, login_required, ok, session_role
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/config", methods=["GET"], endpoint="api_config_get")
    def get_config():
        """Public: the kiosk needs gym name, sessions and plans before anyone logs in."""
        try:
            return ok(container.config_service.get_or_seed().to_document())
        except Exception:
            return internal_error("Failed to fetch configuration")

    @app.route("/api/config", methods=["PUT"], endpoint="api_config_update")
    @login_required
    def update_config():
        try:
            config = container.config_service.update(json_body(request), current_role=session_role())
            return ok(config.to_document(), message="Configuration updated")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to update configuration")
