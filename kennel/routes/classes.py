from flask import Blueprint, jsonify, request

from domain.classes import services
from domain.classes.schemas import (
    ClassScheduleSchema,
    class_schema,
    classes_schema,
    ready_dogs_schema,
    schedule_result_schema,
)
from infrastructure.db.repository import get_repository
from kennel.errors import ValidationError
from kennel.routes import load_json

classes_bp = Blueprint("classes", __name__)


@classes_bp.route("", methods=["GET"])
def list_classes():
    return jsonify(classes_schema.dump(services.list_classes(get_repository())))


@classes_bp.route("/<int:class_id>", methods=["GET"])
def get_class(class_id):
    return jsonify(class_schema.dump(services.get_class(get_repository(), class_id)))


@classes_bp.route("/ready-dogs", methods=["GET"])
def ready_dogs():
    start = request.args.get("startDate")
    if not start:
        raise ValidationError("startDate query parameter is required (YYYY-MM-DD)")
    rows = services.dogs_ready_for_class(get_repository(), start)
    return jsonify(ready_dogs_schema.dump(
        [{"id": dog.id, "name": dog.name, "training_weeks": weeks} for dog, weeks in rows]
    ))


@classes_bp.route("/schedule", methods=["POST"])
def schedule_class():
    data = load_json(ClassScheduleSchema())
    result = services.schedule_class(get_repository(), data["start_date"], data["assignments"])
    return jsonify(schedule_result_schema.dump(result))


@classes_bp.route("", methods=["POST"])
def confirm_class():
    data = load_json(ClassScheduleSchema())
    training_class = services.confirm_class(
        get_repository(), data["start_date"], data["assignments"], data["displaced_actions"]
    )
    return jsonify(class_schema.dump(training_class)), 201


@classes_bp.route("/<int:class_id>", methods=["PUT"])
def update_class(class_id):
    data = load_json(ClassScheduleSchema())
    training_class = services.update_class(
        get_repository(), class_id, data["start_date"], data["assignments"], data["displaced_actions"]
    )
    return jsonify(class_schema.dump(training_class))


@classes_bp.route("/<int:class_id>", methods=["DELETE"])
def delete_class(class_id):
    services.delete_class(get_repository(), class_id)
    return "", 204
