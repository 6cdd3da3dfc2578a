from __future__ import annotations

from flask import Flask

from ..common.http import internal_error, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/stats", methods=["GET"], endpoint="api_dashboard_stats")
    @login_required
    def dashboard_stats():
        try:
            return ok(container.dashboard_service.stats().to_dict())
        except Exception:
            return internal_error("Failed to fetch dashboard stats")
