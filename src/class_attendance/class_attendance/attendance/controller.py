from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import NotFoundError, PersistenceError, ValidationError
from .model import AttendanceSession

logger = logging.getLogger(__name__)


def session_to_dict(att: AttendanceSession) -> dict:
    return {
        "lesson_id": att.lesson_id,
        "dirty": att.dirty,
        "present_count": att.present_count,
        "absent_count": att.absent_count,
        "students": [{"student_id": e.student_id, "present": e.present} for e in att.roster],
    }


def register(app: Flask, container) -> None:
    def staff_required(view):
        """Teachers and admins only."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            if session.get("role") not in (Role.TEACHER.value, Role.ADMIN.value):
                return jsonify({"success": False, "message": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/lessons/<int:lesson_id>/attendance", methods=["GET"], endpoint="api_lesson_attendance")
    @staff_required
    def api_lesson_attendance(lesson_id: int):
        try:
            att = container.attendance_service.open_session(lesson_id)
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except Exception:
            logger.exception("Loading attendance of lesson %s failed", lesson_id)
            return jsonify({"success": False, "message": "Attendance is unavailable"}), 500
        return jsonify({"success": True, **session_to_dict(att)})

    @app.route("/api/lessons/<int:lesson_id>/attendance", methods=["POST"], endpoint="api_lesson_attendance_save")
    @staff_required
    def api_lesson_attendance_save(lesson_id: int):
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"success": False, "message": "Request body must be a JSON object"}), 400
        marks = data.get("attendance")
        if not isinstance(marks, list):
            return jsonify({"success": False, "message": "attendance must be a list"}), 400

        service = container.attendance_service
        try:
            today = parse_iso_date(data["date"]) if data.get("date") else None
            att = service.open_session(lesson_id)
            for item in marks:
                service.manager.set_present(att, int(item["student_id"]), bool(item.get("present")))
            saved = service.save_session(att, today=today)
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            return jsonify({"success": False, "message": f"Invalid attendance: {e}"}), 400
        except PersistenceError as e:
            return jsonify({"success": False, "message": str(e)}), 502
        except Exception:
            logger.exception("Saving attendance of lesson %s failed", lesson_id)
            return jsonify({"success": False, "message": "Attendance was not saved"}), 500

        return jsonify({"success": True, "saved": len(saved), **session_to_dict(att)})
