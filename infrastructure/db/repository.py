"""Repository over the Flask-SQLAlchemy session.

The scheduling engine only talks to storage through this class. Every
mutating operation is wrapped in :meth:`Repository.transaction`; nested
transactions join the outermost one, which alone commits or rolls back.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import func

from kennel.errors import ConsistencyError, NotFoundError
from kennel.extensions import db
from kennel.models import Assignment, ClassAssignment, Dog, Trainer, TrainingClass

logger = logging.getLogger(__name__)

_TX_DEPTH = "kennel_tx_depth"


class Repository:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    # ============================================
    # Transactions
    # ============================================

    @contextmanager
    def transaction(self):
        depth = self.session.info.get(_TX_DEPTH, 0)
        self.session.info[_TX_DEPTH] = depth + 1
        try:
            yield self
            if depth == 0:
                self.session.commit()
            else:
                self.session.flush()
        except Exception:
            if depth == 0:
                self.session.rollback()
            raise
        finally:
            self.session.info[_TX_DEPTH] = depth

    def with_transaction(self, fn, *args, **kwargs):
        with self.transaction():
            return fn(*args, **kwargs)

    # ============================================
    # Dogs
    # ============================================

    def find_dog(self, dog_id):
        if dog_id is None:
            return None
        return self.session.get(Dog, dog_id)

    def get_dog(self, dog_id):
        dog = self.find_dog(dog_id)
        if dog is None:
            raise NotFoundError("Dog", dog_id)
        return dog

    def list_dogs(self, statuses=None, exclude_statuses=None, ids=None):
        query = self.session.query(Dog)
        if statuses is not None:
            query = query.filter(Dog.status.in_(list(statuses)))
        if exclude_statuses is not None:
            query = query.filter(Dog.status.notin_(list(exclude_statuses)))
        if ids is not None:
            query = query.filter(Dog.id.in_(list(ids)))
        return query.order_by(Dog.name, Dog.id).all()

    def create_dog(self, **values):
        dog = Dog(**values)
        self.session.add(dog)
        self.session.flush()
        return dog

    def delete_dog(self, dog):
        self.session.delete(dog)
        self.session.flush()

    # ============================================
    # Trainers
    # ============================================

    def find_trainer(self, trainer_id):
        if trainer_id is None:
            return None
        return self.session.get(Trainer, trainer_id)

    def get_trainer(self, trainer_id):
        trainer = self.find_trainer(trainer_id)
        if trainer is None:
            raise NotFoundError("Trainer", trainer_id)
        return trainer

    def list_trainers(self):
        return self.session.query(Trainer).order_by(Trainer.name, Trainer.id).all()

    def create_trainer(self, name):
        trainer = Trainer(name=name)
        self.session.add(trainer)
        self.session.flush()
        return trainer

    def delete_trainer(self, trainer):
        self.session.delete(trainer)
        self.session.flush()

    def lock_trainers(self, trainer_ids):
        """Row-lock the given trainers for the rest of the transaction.

        Capacity checks followed by writes for the same trainer are
        serialized by this lock. Locks are taken in id order.
        """
        ids = sorted(set(trainer_ids))
        if not ids:
            return {}
        rows = (
            self.session.query(Trainer).filter(Trainer.id.in_(ids))
            .order_by(Trainer.id)
            .with_for_update()
            .all()
        )
        found = {t.id: t for t in rows}
        for trainer_id in ids:
            if trainer_id not in found:
                raise NotFoundError("Trainer", trainer_id)
        return found

    # ============================================
    # Assignments
    # ============================================

    def _assignment_query(self, dog_id=None, dog_ids=None, trainer_id=None, week=None,
                          week_from=None, week_to=None, type=None, types=None,
                          exclude_dog_ids=None, has_trainer=None):
        query = self.session.query(Assignment)
        if dog_id is not None:
            query = query.filter(Assignment.dog_id == dog_id)
        if dog_ids is not None:
            query = query.filter(Assignment.dog_id.in_(list(dog_ids)))
        if trainer_id is not None:
            query = query.filter(Assignment.trainer_id == trainer_id)
        if week is not None:
            query = query.filter(Assignment.week_start_date == week)
        if week_from is not None:
            query = query.filter(Assignment.week_start_date >= week_from)
        if week_to is not None:
            query = query.filter(Assignment.week_start_date < week_to)
        if type is not None:
            query = query.filter(Assignment.type == type)
        if types is not None:
            query = query.filter(Assignment.type.in_(list(types)))
        if exclude_dog_ids:
            query = query.filter(Assignment.dog_id.notin_(list(exclude_dog_ids)))
        if has_trainer is True:
            query = query.filter(Assignment.trainer_id.isnot(None))
        elif has_trainer is False:
            query = query.filter(Assignment.trainer_id.is_(None))
        return query

    def get_assignments(self, descending=False, **filters):
        """``week_to`` is exclusive."""
        order = Assignment.week_start_date.desc() if descending else Assignment.week_start_date
        return self._assignment_query(**filters).order_by(order, Assignment.dog_id).all()

    def count_assignments(self, **filters):
        return self._assignment_query(**filters).count()

    def find_assignment(self, dog_id, week):
        rows = self._assignment_query(dog_id=dog_id, week=week).all()
        if len(rows) > 1:
            raise ConsistencyError(
                f"{len(rows)} assignments stored for dog {dog_id} week {week.isoformat()}"
            )
        return rows[0] if rows else None

    def upsert_assignment(self, dog_id, week, trainer_id, type):
        assignment = self.find_assignment(dog_id, week)
        if assignment is None:
            assignment = Assignment(dog_id=dog_id, week_start_date=week)
            self.session.add(assignment)
        assignment.trainer_id = trainer_id
        assignment.type = type
        self.session.flush()
        return assignment

    def delete_assignments(self, **filters):
        if not filters:
            raise ValueError("refusing to delete every assignment")
        rows = self._assignment_query(**filters).all()
        for row in rows:
            self.session.delete(row)
        self.session.flush()
        return len(rows)

    def _week_per_dog(self, aggregate, type=None):
        query = self.session.query(Assignment.dog_id, aggregate(Assignment.week_start_date))
        if type is not None:
            query = query.filter(Assignment.type == type)
        return {dog_id: week for dog_id, week in query.group_by(Assignment.dog_id).all()}

    def earliest_assignment_weeks(self, type=None):
        return self._week_per_dog(func.min, type)

    def latest_assignment_weeks(self, type=None):
        """``{dog_id: week}`` of each dog's last row, optionally of one type."""
        return self._week_per_dog(func.max, type)

    # ============================================
    # Classes
    # ============================================

    def find_class(self, class_id):
        if class_id is None:
            return None
        return self.session.get(TrainingClass, class_id)

    def get_class(self, class_id):
        training_class = self.find_class(class_id)
        if training_class is None:
            raise NotFoundError("Class", class_id)
        return training_class

    def list_classes(self, start_from=None, start_to=None):
        query = self.session.query(TrainingClass)
        if start_from is not None:
            query = query.filter(TrainingClass.start_date >= start_from)
        if start_to is not None:
            query = query.filter(TrainingClass.start_date < start_to)
        return query.order_by(TrainingClass.start_date.desc(), TrainingClass.id).all()

    def create_class(self, start_date, pairs=()):
        training_class = TrainingClass(start_date=start_date)
        self.session.add(training_class)
        self.session.flush()
        self.add_class_assignments(training_class, pairs)
        return training_class

    def add_class_assignments(self, training_class, pairs):
        for dog_id, trainer_id in pairs:
            training_class.class_assignments.append(
                ClassAssignment(dog_id=dog_id, trainer_id=trainer_id)
            )
        self.session.flush()

    def clear_class_assignments(self, training_class):
        training_class.class_assignments.clear()
        self.session.flush()

    def class_assignments_for_trainer(self, trainer_id):
        return self.session.query(ClassAssignment).filter_by(trainer_id=trainer_id).all()

    def delete_class(self, training_class):
        self.session.delete(training_class)
        self.session.flush()


def get_repository():
    return Repository()
