from marshmallow import fields

from kennel.extensions import ma


class ForecastDogSchema(ma.Schema):
    id = fields.Integer()
    name = fields.String()
    type = fields.String()
    training_weeks = fields.Integer(data_key="trainingWeeks")
    assignment_id = fields.Integer(allow_none=True, data_key="assignmentId")
    warning = fields.String(allow_none=True)


class ForecastRowSchema(ma.Schema):
    key = fields.String()
    label = fields.String()
    trainer_id = fields.Integer(allow_none=True, data_key="trainerId")
    weeks = fields.Dict(keys=fields.Date(), values=fields.List(fields.Nested(ForecastDogSchema)))


class ForecastSchema(ma.Schema):
    week_starts = fields.List(fields.Date(), data_key="weekStarts")
    trainers = fields.List(fields.Nested(ForecastRowSchema))
    parking_lot = fields.Nested(ForecastRowSchema, data_key="parkingLot")
    not_yet_ift = fields.Nested(ForecastRowSchema, data_key="notYetIft")
    graduated = fields.Nested(ForecastRowSchema)
    dropped_out = fields.Nested(ForecastRowSchema, data_key="droppedOut")
    recall_week_starts = fields.List(fields.Date(), data_key="recallWeekStarts")
    recall_count_by_week = fields.Dict(keys=fields.Date(), values=fields.Integer(), data_key="recallCountByWeek")
    class_week_starts = fields.List(fields.Date(), data_key="classWeekStarts")


class AvailableDogSchema(ma.Schema):
    id = fields.Integer()
    name = fields.String()
    status = fields.String()


forecast_schema = ForecastSchema()
available_dogs_schema = AvailableDogSchema(many=True)
