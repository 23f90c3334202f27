import logging

from flask import jsonify
from marshmallow import ValidationError as SchemaError

logger = logging.getLogger(__name__)


class SchedulingError(Exception):
    """Base class for errors the engine reports back to its caller."""

    status_code = 400
    kind = "scheduling_error"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.kind, "message": self.message}


class ValidationError(SchedulingError):
    """Malformed input: bad date, missing field, out-of-range value."""

    kind = "validation_error"

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self):
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class NotFoundError(SchedulingError):
    status_code = 404
    kind = "not_found"

    def __init__(self, entity, entity_id):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class CapacityError(SchedulingError):
    """A trainer is full for a week, or unavailable because it teaches a class."""

    status_code = 409
    kind = "capacity_error"

    def __init__(self, trainer_id, trainer_name, week_start_date, current_count, max_count, message=None):
        self.trainer_id = trainer_id
        self.trainer_name = trainer_name
        self.week_start_date = week_start_date
        self.current_count = current_count
        self.max_count = max_count
        if message is None:
            if self.unavailable:
                message = (
                    f"Trainer {trainer_name} is teaching a class the week of "
                    f"{week_start_date.isoformat()}"
                )
            else:
                message = (
                    f"Trainer {trainer_name} at capacity the week of "
                    f"{week_start_date.isoformat()} ({current_count}/{max_count})"
                )
        super().__init__(message)

    @property
    def unavailable(self):
        return self.max_count == 0

    def to_dict(self):
        data = super().to_dict()
        data.update({
            "trainer_id": self.trainer_id,
            "trainer_name": self.trainer_name,
            "week_start_date": self.week_start_date.isoformat(),
            "current_count": self.current_count,
            "max_count": self.max_count,
            "unavailable": self.unavailable,
        })
        return data


class ConsistencyError(SchedulingError):
    """An internal invariant does not hold. Never recovered automatically."""

    status_code = 500
    kind = "consistency_error"

    def __init__(self, message):
        super().__init__(message)
        logger.error("Consistency check failed: %s", message)


def register_error_handlers(app):
    @app.errorhandler(SchedulingError)
    def handle_scheduling_error(error):
        if error.status_code >= 500:
            return jsonify({"error": error.kind, "message": "Internal scheduling error"}), error.status_code
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SchemaError)
    def handle_schema_error(error):
        return jsonify(ValidationError("Invalid request", error.messages).to_dict()), 400
