from __future__ import annotations

from flask import Blueprint, Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date, today_local
from ..common.web import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    bp = Blueprint("attendance", __name__)
    guard = container.session_guard
    attendance = container.attendance_service

    def _requested_date():
        return parse_optional_date(request.args.get("date"), default=today_local())

    @bp.route("/agent/attendance", methods=["GET"])
    @guard.login_required
    def get_attendance():
        user = guard.current_user()
        work_date = _requested_date()
        # Field roles see their own check-in; supervisors get the list for the day.
        if user.role.is_field_role:
            record = attendance.own_record(user, work_date)
            return jsonify(record.to_dict() if record else None)
        return jsonify(attendance.list_for_date(user, work_date))

    @bp.route("/agent/attendance", methods=["POST"])
    @guard.login_required
    def check_in():
        data = json_body()
        record = attendance.check_in(guard.current_user(), sector=data.get("sector"), location=data.get("location"))
        return jsonify(record.to_dict()), 201

    @bp.route("/leader/attendance", methods=["GET"])
    @guard.login_required
    def team_attendance():
        return jsonify(attendance.list_for_date(guard.current_user(), _requested_date()))

    @bp.route("/manager/attendance-time-frames", methods=["GET"])
    @guard.login_required
    def list_time_frames():
        return jsonify([f.to_dict() for f in attendance.list_time_frames(guard.current_user())])

    @bp.route("/manager/attendance-time-frames", methods=["POST"])
    @guard.login_required
    def create_time_frame():
        return jsonify(attendance.create_time_frame(guard.current_user(), json_body()).to_dict()), 201

    @bp.route("/manager/attendance-time-frames/<int:frame_id>", methods=["PATCH"])
    @guard.login_required
    def update_time_frame(frame_id: int):
        return jsonify(attendance.update_time_frame(guard.current_user(), frame_id, json_body()).to_dict())

    app.register_blueprint(bp, url_prefix=app.config["API_PREFIX"])
