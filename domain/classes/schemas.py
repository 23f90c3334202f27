from marshmallow import fields, validate

from domain.classes.services import RESOLUTION_ACTIONS
from kennel.extensions import ma


class ClassPairSchema(ma.Schema):
    dog_id = fields.Integer(required=True, data_key="dogId", validate=validate.Range(min=1))
    trainer_id = fields.Integer(required=True, data_key="trainerId", validate=validate.Range(min=1))


class DisplacedActionSchema(ma.Schema):
    dog_id = fields.Integer(required=True, data_key="dogId", validate=validate.Range(min=1))
    week_start_date = fields.Date(required=True, data_key="weekStartDate")
    action = fields.String(required=True, validate=validate.OneOf(RESOLUTION_ACTIONS))


class ClassScheduleSchema(ma.Schema):
    start_date = fields.Date(required=True, data_key="startDate")
    assignments = fields.List(fields.Nested(ClassPairSchema), required=True, validate=validate.Length(min=1))
    displaced_actions = fields.List(fields.Nested(DisplacedActionSchema), load_default=list,
                                    data_key="displacedActions")


class DisplacedDogSchema(ma.Schema):
    dog_id = fields.Integer(data_key="dogId")
    dog_name = fields.String(data_key="dogName")
    trainer_id = fields.Integer(data_key="trainerId")
    trainer_name = fields.String(data_key="trainerName")
    week_start_date = fields.Date(data_key="weekStartDate")


class ScheduleClassResultSchema(ma.Schema):
    valid = fields.Boolean()
    errors = fields.List(fields.String())
    displaced_dogs = fields.List(fields.Nested(DisplacedDogSchema), data_key="displacedDogs")


class ClassMemberSchema(ma.Schema):
    dog_id = fields.Integer(data_key="dogId")
    dog_name = fields.String(attribute="dog.name", data_key="dogName")
    trainer_id = fields.Integer(allow_none=True, data_key="trainerId")
    trainer_name = fields.Method("get_trainer_name", data_key="trainerName")

    def get_trainer_name(self, obj):
        return obj.trainer.name if obj.trainer is not None else None


class ClassSchema(ma.Schema):
    id = fields.Integer()
    start_date = fields.Date(data_key="startDate")
    assignments = fields.List(fields.Nested(ClassMemberSchema), attribute="class_assignments")


class ReadyDogSchema(ma.Schema):
    id = fields.Integer()
    name = fields.String()
    training_weeks = fields.Integer(data_key="trainingWeeks")


schedule_result_schema = ScheduleClassResultSchema()
class_schema = ClassSchema()
classes_schema = ClassSchema(many=True)
ready_dogs_schema = ReadyDogSchema(many=True)
