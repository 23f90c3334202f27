from datetime import datetime
from kennel.extensions import db


class DogStatus:
    NOT_YET_IFT = "not_yet_ift"
    IN_TRAINING = "in_training"
    READY_FOR_CLASS = "ready_for_class"
    IN_CLASS = "in_class"
    GRADUATED = "graduated"
    PAUSED = "paused"
    DROPOUT = "dropout"

    ALL = (NOT_YET_IFT, IN_TRAINING, READY_FOR_CLASS, IN_CLASS, GRADUATED, PAUSED, DROPOUT)


class Dog(db.Model):
    __tablename__ = "dogs"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    initial_training_weeks = db.Column(db.Integer, nullable=False, default=0)
    # cached; written only by domain.dogs.lifecycle.recompute and mark_dropout
    status = db.Column(
        db.String(20),
        db.CheckConstraint(
            "status IN ('not_yet_ift','in_training','ready_for_class','in_class',"
            "'graduated','paused','dropout')"
        ),
        nullable=False,
        default=DogStatus.PAUSED,
        index=True,
    )
    recall_week_start_date = db.Column(db.Date, nullable=True)
    dropout_date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = db.relationship(
        "Assignment",
        back_populates="dog",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    class_assignments = db.relationship(
        "ClassAssignment",
        back_populates="dog",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.CheckConstraint("initial_training_weeks >= 0", name="ck_dogs_initial_weeks"),
    )

    def __repr__(self):
        return f"<Dog {self.id} {self.name} {self.status}>"
