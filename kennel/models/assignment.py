from kennel.extensions import db


class AssignmentType:
    TRAINING = "training"
    CLASS = "class"
    PAUSED = "paused"

    ALL = (TRAINING, CLASS, PAUSED)
    CAPACITY_LIMITED = (TRAINING, CLASS)


class Assignment(db.Model):
    """One dog's slot for one week. No row means the dog is unassigned that week."""

    __tablename__ = "assignments"

    id = db.Column(db.Integer, primary_key=True)
    dog_id = db.Column(db.Integer, db.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False, index=True)
    trainer_id = db.Column(db.Integer, db.ForeignKey("trainers.id"), nullable=True, index=True)
    week_start_date = db.Column(db.Date, nullable=False)
    type = db.Column(
        db.String(20),
        db.CheckConstraint("type IN ('training','class','paused')"),
        nullable=False,
    )

    dog = db.relationship("Dog", back_populates="assignments")
    trainer = db.relationship("Trainer", back_populates="assignments")

    __table_args__ = (
        db.UniqueConstraint("dog_id", "week_start_date", name="uq_assignment_dog_week"),
        db.Index("idx_assignments_trainer_week", "trainer_id", "week_start_date"),
    )

    def __repr__(self):
        return f"<Assignment dog={self.dog_id} week={self.week_start_date} {self.type}>"
