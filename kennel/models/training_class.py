from datetime import datetime
from kennel.extensions import db


class TrainingClass(db.Model):
    __tablename__ = "classes"

    id = db.Column(db.Integer, primary_key=True)
    start_date = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    class_assignments = db.relationship(
        "ClassAssignment",
        back_populates="training_class",
        cascade="all, delete-orphan",
        order_by="ClassAssignment.id",
    )

    def __repr__(self):
        return f"<TrainingClass {self.id} {self.start_date}>"


class ClassAssignment(db.Model):
    __tablename__ = "class_assignments"

    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    dog_id = db.Column(db.Integer, db.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False, index=True)
    trainer_id = db.Column(db.Integer, db.ForeignKey("trainers.id"), nullable=True, index=True)

    training_class = db.relationship("TrainingClass", back_populates="class_assignments")
    dog = db.relationship("Dog", back_populates="class_assignments")
    trainer = db.relationship("Trainer", back_populates="class_assignments")

    __table_args__ = (
        db.UniqueConstraint("class_id", "dog_id", name="uq_class_assignment_dog"),
    )
