from datetime import datetime
from kennel.extensions import db


class Trainer(db.Model):
    __tablename__ = "trainers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    assignments = db.relationship("Assignment", back_populates="trainer", lazy="dynamic")
    class_assignments = db.relationship("ClassAssignment", back_populates="trainer", lazy="dynamic")

    def __repr__(self):
        return f"<Trainer {self.id} {self.name}>"
