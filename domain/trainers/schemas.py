from marshmallow import fields, validate

from kennel.extensions import ma


class TrainerInputSchema(ma.Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))


class TrainerSchema(ma.Schema):
    id = fields.Integer()
    name = fields.String()


trainer_schema = TrainerSchema()
trainers_schema = TrainerSchema(many=True)
