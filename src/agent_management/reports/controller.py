from __future__ import annotations

from flask import Blueprint, Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date, today_local
from ..common.web import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    bp = Blueprint("reports", __name__)
    guard = container.session_guard
    reports = container.report_service

    def _requested_date():
        return parse_optional_date(request.args.get("date"), default=today_local())

    def _submit():
        data = json_body()
        report = reports.submit(guard.current_user(), comment=data.get("comment"), clients_data=data.get("clientsData"))
        return jsonify(report.to_dict()), 201

    @bp.route("/agent/daily-reports", methods=["GET"])
    @guard.login_required
    def own_report():
        report = reports.own_report(guard.current_user(), _requested_date())
        return jsonify(report.to_dict() if report else None)

    @bp.route("/agent/daily-reports", methods=["POST"])
    @guard.login_required
    def submit_report():
        return _submit()

    @bp.route("/leader/daily-reports", methods=["GET"])
    @guard.login_required
    def team_reports():
        return jsonify(reports.list_for_date(guard.current_user(), _requested_date()))

    @bp.route("/leader/daily-reports", methods=["POST"])
    @guard.login_required
    def submit_leader_report():
        return _submit()

    app.register_blueprint(bp, url_prefix=app.config["API_PREFIX"])
