from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import now_local, parse_iso_date, parse_iso_datetime
from ..common.validators import optional_id, require_positive_id
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def _parse_date(value: Optional[str], field_name: str) -> date:
    if not value:
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def _parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    return _parse_date(value, field_name) if value else None


def _parse_timestamp(value: object, field_name: str) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register(app: Flask, container: Container) -> None:
    def api_view(view):
        """Map domain errors to JSON responses."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"success": False, "message": str(e)}), 400
            except AuthorizationError as e:
                return jsonify({"success": False, "message": str(e)}), 403
            except NotFoundError as e:
                return jsonify({"success": False, "message": str(e)}), 404
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                return jsonify({"success": False, "message": "Internal server error"}), 500

        return wrapper

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            return view(*args, **kwargs)

        return wrapper

    def staff_required(view):
        """Admins and tutors only."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            if session.get("role") not in (Role.ADMIN.value, Role.TUTOR.value):
                raise AuthorizationError("Only admins and tutors may do this")
            return view(*args, **kwargs)

        return wrapper

    def _require_class_access(class_id: int) -> None:
        if session.get("role") != Role.TUTOR.value:
            return
        if not container.directory_service.is_tutor_assigned(tutor_id=int(session["user_id"]), class_id=class_id):
            raise AuthorizationError("You are not assigned to this class")

    @app.route("/attendance/auto-mark", methods=["POST"], endpoint="attendance_auto_mark")
    @api_view
    def attendance_auto_mark():
        data = _json_body()
        student_id = require_positive_id(data.get("student_id"), "student_id")
        login_at = _parse_timestamp(data.get("login_timestamp"), "login_timestamp")

        record = container.attendance_service.mark_from_login(student_id, login_at)
        if record is None:
            return jsonify({"success": True, "marked": False, "record": None}), 200
        return jsonify({"success": True, "marked": True, "record": record.to_dict()}), 200

    @app.route("/attendance/session-mark", methods=["POST"], endpoint="attendance_session_mark")
    @api_view
    @login_required
    def attendance_session_mark():
        data = _json_body()
        raw_ids = data.get("student_ids")
        if not isinstance(raw_ids, list) or not raw_ids:
            raise ValidationError("student_ids must be a non-empty list")
        student_ids = [require_positive_id(v, "student_ids") for v in raw_ids]
        if session.get("role") == Role.STUDENT.value and int(session["user_id"]) not in student_ids:
            raise AuthorizationError("Students may only confirm a team they belong to")
        if data.get("timestamp"):
            at = _parse_timestamp(data["timestamp"], "timestamp")
        else:
            at = now_local(container.school_tz)

        records = []
        for student_id in student_ids:
            record = container.attendance_service.mark_present_for_session(student_id, at)
            if record:
                records.append(record.to_dict())
        return jsonify({"success": True, "marked": len(records), "records": records}), 200

    @app.route("/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @api_view
    @staff_required
    def attendance_mark():
        data = _json_body()
        class_id = require_positive_id(data.get("class_id"), "class_id")
        _require_class_access(class_id)

        record = container.attendance_service.mark_manually(
            student_id=data.get("student_id"),
            class_id=class_id,
            attendance_date=_parse_date(data.get("attendance_date"), "attendance_date"),
            status=data.get("status"),
            notes=data.get("notes"),
            marked_by=int(session["user_id"]),
            course_level_id=optional_id(data.get("course_level_id"), "course_level_id"),
        )
        return jsonify({"success": True, "record": record.to_dict()}), 200

    @app.route("/attendance/register", methods=["GET"], endpoint="attendance_register")
    @api_view
    @staff_required
    def attendance_register():
        class_id = require_positive_id(request.args.get("class_id"), "class_id")
        _require_class_access(class_id)

        register_ = container.register_service.build_register(
            class_id=class_id,
            start_date=_parse_date(request.args.get("start_date"), "start_date"),
            end_date=_parse_optional_date(request.args.get("end_date"), "end_date"),
            course_level_id=optional_id(request.args.get("course_level_id"), "course_level_id"),
            student_id=optional_id(request.args.get("student_id"), "student_id"),
        )
        return jsonify({"success": True, "data": register_.to_dict()}), 200

    @app.route("/attendance/topics", methods=["GET"], endpoint="attendance_topics")
    @api_view
    @login_required
    def attendance_topics():
        start_date = _parse_date(request.args.get("start_date"), "start_date")
        end_date = _parse_date(request.args.get("end_date"), "end_date")
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        student_id = optional_id(request.args.get("student_id"), "student_id")
        class_id = optional_id(request.args.get("class_id"), "class_id")
        role = session.get("role")

        if role == Role.STUDENT.value:
            # Students only ever see their own history.
            own_id = int(session["user_id"])
            if student_id not in (None, own_id) or class_id is not None:
                raise AuthorizationError("Students may only view their own attendance")
            student_id = own_id

        if class_id is not None:
            _require_class_access(class_id)
            data = container.topics_report_service.class_report(
                class_id=class_id, start_date=start_date, end_date=end_date, student_id=student_id
            )
        elif student_id is not None:
            data = container.topics_report_service.student_report(
                student_id=student_id, start_date=start_date, end_date=end_date
            )
        else:
            raise ValidationError("student_id or class_id is required")
        return jsonify({"success": True, "data": data}), 200

    @app.route("/attendance/tutors/<int:tutor_id>/classes", methods=["GET"], endpoint="attendance_tutor_classes")
    @api_view
    @staff_required
    def attendance_tutor_classes(tutor_id: int):
        if session.get("role") == Role.TUTOR.value and int(session["user_id"]) != tutor_id:
            raise AuthorizationError("Tutors may only list their own classes")
        return jsonify({"success": True, "data": container.directory_service.tutor_classes(tutor_id)}), 200
