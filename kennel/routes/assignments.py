from flask import Blueprint, jsonify

from domain.assignments import services
from domain.assignments.schemas import (
    AssignmentInputSchema,
    AssignmentKeySchema,
    BulkAssignmentSchema,
    RemainingTrainingSchema,
    assignment_schema,
    assignments_schema,
)
from infrastructure.db.repository import get_repository
from kennel.routes import load_json

assignments_bp = Blueprint("assignments", __name__)


@assignments_bp.route("", methods=["POST"])
def create_assignment():
    data = load_json(AssignmentInputSchema())
    assignment = services.create_assignment(
        get_repository(), data["dog_id"], data["week_start_date"], data["trainer_id"], data["type"]
    )
    return jsonify(assignment_schema.dump(assignment)), 201


@assignments_bp.route("", methods=["DELETE"])
def delete_assignment():
    data = load_json(AssignmentKeySchema())
    removed = services.delete_assignment(get_repository(), data["dog_id"], data["week_start_date"])
    return jsonify({"deleted": removed})


@assignments_bp.route("/bulk", methods=["POST"])
def bulk_create_assignments():
    data = load_json(BulkAssignmentSchema())
    rows = services.bulk_create_assignments(get_repository(), data["assignments"])
    return jsonify(assignments_schema.dump(rows)), 201


@assignments_bp.route("/parking-lot", methods=["POST"])
def move_to_parking_lot():
    data = load_json(AssignmentKeySchema())
    assignment = services.move_to_parking_lot(get_repository(), data["dog_id"], data["week_start_date"])
    return jsonify(assignment_schema.dump(assignment))


@assignments_bp.route("/remaining-training", methods=["POST"])
def schedule_remaining_training():
    data = load_json(RemainingTrainingSchema())
    rows = services.schedule_remaining_training(
        get_repository(), data["dog_id"], data["week_start_date"], data["trainer_id"]
    )
    return jsonify(assignments_schema.dump(rows)), 201
