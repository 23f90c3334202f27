from flask import Blueprint, current_app, jsonify, request
from marshmallow import fields

from domain.forecast.schemas import available_dogs_schema, forecast_schema
from domain.forecast.services import available_dogs_for_week, get_forecast_data
from infrastructure.db.repository import get_repository
from kennel.errors import ValidationError
from kennel.extensions import ma
from kennel.utils.dates import current_week
from kennel.routes import load_args

forecast_bp = Blueprint("forecast", __name__)


class ForecastQuerySchema(ma.Schema):
    start_date = fields.Date(load_default=None, data_key="startDate")
    week_count = fields.Integer(load_default=None, data_key="weekCount")


@forecast_bp.route("", methods=["GET"])
def forecast():
    args = load_args(ForecastQuerySchema())
    start = args["start_date"] or current_week()
    grid = get_forecast_data(get_repository(), start, args["week_count"])
    return jsonify(forecast_schema.dump(grid))


@forecast_bp.route("/available-dogs", methods=["GET"])
def available_dogs():
    week = request.args.get("weekDate")
    if not week:
        raise ValidationError("weekDate required")
    rows = available_dogs_for_week(get_repository(), week)
    current_app.logger.debug("Available dogs for %s: %s", week, len(rows))
    return jsonify({
        "dogs": available_dogs_schema.dump(
            [{"id": dog.id, "name": dog.name, "status": status} for dog, status in rows]
        )
    })
