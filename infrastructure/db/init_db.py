from kennel.extensions import db
import kennel.models  # noqa: F401  registers every table on db.metadata


def init_db():
    db.create_all()


def drop_db():
    db.drop_all()
