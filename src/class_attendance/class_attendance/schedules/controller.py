from __future__ import annotations

import asyncio
import logging
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..core.enums import Role, ViewMode, WeekParity
from ..core.exceptions import AuthorizationError, ValidationError
from .model import LessonSlot, Requester, ScheduleQuery

logger = logging.getLogger(__name__)


def _optional_int(name: str) -> Optional[int]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer") from None


def query_from_args() -> ScheduleQuery:
    try:
        view_mode = ViewMode(request.args.get("view") or ViewMode.WEEK.value)
    except ValueError:
        raise ValidationError("view must be 'week' or 'month'") from None

    week_type = _optional_int("week_type")
    try:
        parity = WeekParity(week_type) if week_type else None
    except ValueError:
        raise ValidationError("week_type must be 1 (odd) or 2 (even)") from None

    return ScheduleQuery(
        view_mode=view_mode,
        parity=parity,
        week_offset=_optional_int("offset") or 0,
        month=_optional_int("month"),
        year=_optional_int("year"),
    )


def lesson_to_dict(lesson: LessonSlot) -> dict:
    return {
        "id": lesson.lesson_id,
        "subject_id": lesson.subject_id,
        "subject_name": lesson.subject_name,
        "group_id": lesson.group_id,
        "group_name": lesson.group_name,
        "teacher_id": lesson.teacher_id,
        "day_of_week": lesson.day_of_week,
        "time_start": lesson.time_start.strftime("%H:%M"),
        "time_end": lesson.time_end.strftime("%H:%M"),
        "room": lesson.room,
        "week_type": int(lesson.week_parity),
        "lesson_type": lesson.lesson_type.value,
    }


def register(app: Flask, container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/schedule", methods=["GET"], endpoint="api_schedule")
    @login_required
    def api_schedule():
        try:
            role = Role(session.get("role"))
        except ValueError:
            return jsonify({"success": False, "message": "Forbidden"}), 403

        requester = Requester(user_id=int(session["user_id"]), role=role)
        try:
            result = asyncio.run(
                container.schedule_service.get_schedule(
                    requester,
                    query_from_args(),
                    group_filter=_optional_int("group_id"),
                    subject_filter=request.args.get("subject") or None,
                )
            )
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except AuthorizationError as e:
            return jsonify({"success": False, "message": str(e)}), 403
        except Exception:
            logger.exception("Loading schedule failed")
            return jsonify({"success": False, "message": "Schedule is unavailable"}), 500

        return jsonify(
            {
                "success": True,
                "lessons": [lesson_to_dict(lesson) for lesson in result.lessons],
                "subjects": result.subjects,
                "warnings": [str(w) for w in result.warnings],
            }
        )
