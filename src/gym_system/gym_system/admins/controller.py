from __future__ import annotations

from flask import Flask, request, session

from ..common.http import error_response, internal_error, json_body, login_required, ok
from ..core.exceptions import AuthenticationError, DomainError
from ..container import Container
from .service import SessionAdmin


def register(app: Flask, container: Container) -> None:
    def _start_session(admin: SessionAdmin) -> None:
        session.clear()
        session.permanent = True
        session["admin_id"] = admin.admin_id
        session["username"] = admin.username
        session["role"] = admin.role.value

    @app.route("/api/auth/setup", methods=["GET"], endpoint="api_auth_setup_status")
    def setup_status():
        try:
            return ok(setupRequired=container.auth_service.setup_required())
        except Exception:
            return internal_error("Internal server error")

    @app.route("/api/auth/setup", methods=["POST"], endpoint="api_auth_setup")
    def setup():
        try:
            data = json_body(request)
            container.auth_service.create_initial_admin(
                username=str(data.get("username") or ""),
                email=str(data.get("email") or ""),
                password=str(data.get("password") or ""),
            )
            return ok()
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Internal server error")

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_auth_login")
    def login():
        try:
            data = json_body(request)
            admin = container.auth_service.authenticate(
                str(data.get("username") or ""), str(data.get("password") or "")
            )
            _start_session(admin)
            return ok(user=admin.to_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Internal server error")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_auth_logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_auth_me")
    @login_required
    def me():
        try:
            admin = container.auth_service.get_session_admin(int(session["admin_id"]))
            return ok(user=admin.to_dict())
        except AuthenticationError as e:
            session.clear()
            return error_response(e)
        except Exception:
            return internal_error("Internal server error")
