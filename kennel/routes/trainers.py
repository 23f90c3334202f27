from flask import Blueprint, jsonify

from domain.trainers import services
from domain.trainers.schemas import TrainerInputSchema, trainer_schema, trainers_schema
from infrastructure.db.repository import get_repository
from kennel.routes import load_json

trainers_bp = Blueprint("trainers", __name__)


@trainers_bp.route("", methods=["GET"])
def list_trainers():
    return jsonify(trainers_schema.dump(services.list_trainers(get_repository())))


@trainers_bp.route("", methods=["POST"])
def create_trainer():
    data = load_json(TrainerInputSchema())
    trainer = services.create_trainer(get_repository(), data["name"])
    return jsonify(trainer_schema.dump(trainer)), 201


@trainers_bp.route("/<int:trainer_id>", methods=["PATCH"])
def rename_trainer(trainer_id):
    data = load_json(TrainerInputSchema())
    trainer = services.rename_trainer(get_repository(), trainer_id, data["name"])
    return jsonify(trainer_schema.dump(trainer))


@trainers_bp.route("/<int:trainer_id>", methods=["DELETE"])
def delete_trainer(trainer_id):
    services.delete_trainer(get_repository(), trainer_id)
    return "", 204
