from flask import Blueprint, jsonify, request

from domain.dogs import services
from domain.dogs.schemas import (
    DogInputSchema,
    DropoutSchema,
    PauseSchema,
    RecallSchema,
    dog_schema,
    dogs_schema,
)
from infrastructure.db.repository import get_repository
from kennel.routes import load_json

dogs_bp = Blueprint("dogs", __name__)


@dogs_bp.route("", methods=["GET"])
def list_dogs():
    statuses = request.args.getlist("status") or None
    return jsonify(dogs_schema.dump(services.list_dogs(get_repository(), statuses)))


@dogs_bp.route("", methods=["POST"])
def create_dog():
    data = load_json(DogInputSchema())
    dog = services.create_dog(get_repository(), **data)
    return jsonify(dog_schema.dump(dog)), 201


@dogs_bp.route("/<int:dog_id>", methods=["PATCH"])
def update_dog(dog_id):
    data = load_json(DogInputSchema(), partial=True)
    dog = services.update_dog(get_repository(), dog_id, **data)
    return jsonify(dog_schema.dump(dog))


@dogs_bp.route("/<int:dog_id>", methods=["DELETE"])
def delete_dog(dog_id):
    services.delete_dog(get_repository(), dog_id)
    return "", 204


@dogs_bp.route("/<int:dog_id>/dropout", methods=["POST"])
def mark_dropout(dog_id):
    data = load_json(DropoutSchema())
    dog = services.mark_dropout(get_repository(), dog_id, data["effective_date"])
    return jsonify(dog_schema.dump(dog))


@dogs_bp.route("/<int:dog_id>/pause", methods=["POST"])
def pause_from(dog_id):
    data = load_json(PauseSchema())
    dog = services.pause_from(get_repository(), dog_id, data["week_start_date"])
    return jsonify(dog_schema.dump(dog))


@dogs_bp.route("/recall", methods=["POST"])
def schedule_recall():
    data = load_json(RecallSchema())
    dogs = services.schedule_recall(get_repository(), data["week_start_date"], data["dogs"])
    return jsonify(dogs_schema.dump(dogs)), 201


@dogs_bp.route("/<int:dog_id>/sync", methods=["POST"])
def sync_dog_status(dog_id):
    status = services.sync_dog_status(get_repository(), dog_id)
    return jsonify({"id": dog_id, "status": status})


@dogs_bp.route("/sync", methods=["POST"])
def sync_all_dogs_status():
    changed = services.sync_all_dogs_status(get_repository())
    return jsonify({
        "changed": [
            {"id": dog_id, "from": before, "to": after}
            for dog_id, (before, after) in sorted(changed.items())
        ]
    })
