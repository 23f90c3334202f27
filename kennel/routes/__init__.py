from flask import request

from kennel.errors import ValidationError


def load_json(schema, partial=False):
    """Load the request body through a marshmallow schema."""
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError("Request body must be JSON")
    return schema.load(payload, partial=partial)


def load_args(schema):
    return schema.load(request.args.to_dict())
