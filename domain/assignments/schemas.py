from marshmallow import fields, validate

from kennel.extensions import ma
from kennel.models import AssignmentType


class AssignmentInputSchema(ma.Schema):
    dog_id = fields.Integer(required=True, data_key="dogId", validate=validate.Range(min=1))
    trainer_id = fields.Integer(load_default=None, allow_none=True, data_key="trainerId",
                                validate=validate.Range(min=1))
    week_start_date = fields.Date(required=True, data_key="weekStartDate")
    type = fields.String(load_default=AssignmentType.TRAINING, validate=validate.OneOf(AssignmentType.ALL))


class AssignmentKeySchema(ma.Schema):
    dog_id = fields.Integer(required=True, data_key="dogId", validate=validate.Range(min=1))
    week_start_date = fields.Date(required=True, data_key="weekStartDate")


class BulkAssignmentSchema(ma.Schema):
    assignments = fields.List(fields.Nested(AssignmentInputSchema), required=True,
                              validate=validate.Length(min=1))


class RemainingTrainingSchema(ma.Schema):
    dog_id = fields.Integer(required=True, data_key="dogId", validate=validate.Range(min=1))
    trainer_id = fields.Integer(required=True, data_key="trainerId", validate=validate.Range(min=1))
    week_start_date = fields.Date(required=True, data_key="weekStartDate")


class AssignmentSchema(ma.Schema):
    id = fields.Integer()
    dog_id = fields.Integer(data_key="dogId")
    trainer_id = fields.Integer(allow_none=True, data_key="trainerId")
    week_start_date = fields.Date(data_key="weekStartDate")
    type = fields.String()


assignment_schema = AssignmentSchema()
assignments_schema = AssignmentSchema(many=True)
