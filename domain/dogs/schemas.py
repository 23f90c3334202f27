from marshmallow import fields, validate

from kennel.extensions import ma


class DogInputSchema(ma.Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    initial_training_weeks = fields.Integer(load_default=0, data_key="initialTrainingWeeks",
                                            validate=validate.Range(min=0))
    recall_week_start_date = fields.Date(load_default=None, allow_none=True, data_key="recallWeekStartDate")


class RecallDogSchema(ma.Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    # 0 means the trainer is not decided yet
    trainer_id = fields.Integer(load_default=None, allow_none=True, data_key="trainerId",
                                validate=validate.Range(min=0))
    initial_training_weeks = fields.Integer(load_default=0, data_key="initialTrainingWeeks",
                                            validate=validate.Range(min=0))
    weeks = fields.Integer(load_default=None, allow_none=True, validate=validate.Range(min=1))


class RecallSchema(ma.Schema):
    week_start_date = fields.Date(required=True, data_key="weekStartDate")
    dogs = fields.List(fields.Nested(RecallDogSchema), required=True, validate=validate.Length(min=1))


class DropoutSchema(ma.Schema):
    effective_date = fields.Date(load_default=None, allow_none=True, data_key="effectiveDate")


class PauseSchema(ma.Schema):
    week_start_date = fields.Date(required=True, data_key="weekStartDate")


class DogSchema(ma.Schema):
    id = fields.Integer()
    name = fields.String()
    initial_training_weeks = fields.Integer(data_key="initialTrainingWeeks")
    status = fields.String()
    recall_week_start_date = fields.Date(allow_none=True, data_key="recallWeekStartDate")
    dropout_date = fields.Date(allow_none=True, data_key="dropoutDate")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


dog_schema = DogSchema()
dogs_schema = DogSchema(many=True)
