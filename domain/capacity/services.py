"""Trainer capacity checks.

A trainer takes at most MAX_TRAINING_DOGS_PER_TRAINER training dogs and
MAX_CLASS_DOGS_PER_TRAINER class dogs in a week, and takes no training dogs
in a week where it teaches a class.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from domain.assignments import store
from kennel.config import resolve_rules
from kennel.errors import CapacityError, ValidationError
from kennel.models import AssignmentType
from kennel.utils.dates import monday_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapacityCheck:
    valid: bool
    current_count: int
    max_count: int

    @property
    def unavailable(self):
        return not self.valid and self.max_count == 0


@dataclass(frozen=True)
class PlannedAssignment:
    """A row a batch operation intends to write. ``dog_id`` is None for dogs not created yet."""

    dog_id: Optional[int]
    trainer_id: Optional[int]
    week_start_date: object
    type: str


def max_for(type, rules):
    if type == AssignmentType.TRAINING:
        return rules.max_training_dogs_per_trainer
    if type == AssignmentType.CLASS:
        return rules.max_class_dogs_per_trainer
    raise ValidationError(f"Assignment type {type!r} has no trainer capacity")


def validate(repo, trainer_id, week_start, type, exclude_dog_id=None, rules=None):
    rules = resolve_rules(rules)
    week = monday_of(week_start)
    max_count = max_for(type, rules)

    if type == AssignmentType.TRAINING and store.has_class(repo, trainer_id, week, exclude_dog_id):
        return CapacityCheck(valid=False, current_count=0, max_count=0)

    current_count = store.count_for_trainer_week(repo, trainer_id, week, type, exclude_dog_id)
    return CapacityCheck(
        valid=current_count < max_count,
        current_count=current_count,
        max_count=max_count,
    )


def ensure_capacity(repo, trainer_id, week_start, type, exclude_dog_id=None, rules=None):
    """Like :func:`validate` but raises :class:`CapacityError` when the slot is not free."""
    check = validate(repo, trainer_id, week_start, type, exclude_dog_id, rules)
    if not check.valid:
        trainer = repo.get_trainer(trainer_id)
        logger.warning(
            "Capacity check rejected %s dog for trainer %s week %s (%s/%s)",
            type, trainer.name, monday_of(week_start), check.current_count, check.max_count,
        )
        raise CapacityError(
            trainer.id, trainer.name, monday_of(week_start), check.current_count, check.max_count
        )
    return check


def validate_batch(repo, planned, rules=None):
    """Check every week of a batch before any of it is written.

    Existing rows of dogs that the batch rewrites for the same week are not
    counted, since the upsert replaces them. Raises on the first problem.
    """
    rules = resolve_rules(rules)
    planned = [
        PlannedAssignment(p.dog_id, p.trainer_id, monday_of(p.week_start_date), store.check_type(p.type))
        for p in planned
    ]

    seen = set()
    for p in planned:
        if p.dog_id is None:
            continue
        key = (p.dog_id, p.week_start_date)
        if key in seen:
            raise ValidationError(
                f"Dog {p.dog_id} is scheduled twice for the week of {p.week_start_date.isoformat()}"
            )
        seen.add(key)

    rewritten_by_week = defaultdict(set)
    slots = defaultdict(list)
    for p in planned:
        if p.dog_id is not None:
            rewritten_by_week[p.week_start_date].add(p.dog_id)
        if p.trainer_id is not None and p.type in AssignmentType.CAPACITY_LIMITED:
            slots[(p.trainer_id, p.week_start_date, p.type)].append(p.dog_id)

    for (trainer_id, week, type), dogs in sorted(slots.items(), key=lambda item: (item[0][1], item[0][0], item[0][2])):
        rewritten = rewritten_by_week[week]
        if type == AssignmentType.TRAINING:
            class_rows = repo.count_assignments(
                trainer_id=trainer_id, week=week, type=AssignmentType.CLASS, exclude_dog_ids=rewritten,
            )
            if class_rows or (trainer_id, week, AssignmentType.CLASS) in slots:
                trainer = repo.get_trainer(trainer_id)
                logger.warning("Batch rejected: trainer %s teaches a class the week of %s", trainer.name, week)
                raise CapacityError(trainer.id, trainer.name, week, 0, 0)

        max_count = max_for(type, rules)
        existing = repo.count_assignments(
            trainer_id=trainer_id, week=week, type=type, exclude_dog_ids=rewritten,
        )
        if existing + len(dogs) > max_count:
            trainer = repo.get_trainer(trainer_id)
            logger.warning(
                "Batch rejected: trainer %s week %s would hold %s %s dogs (max %s)",
                trainer.name, week, existing + len(dogs), type, max_count,
            )
            raise CapacityError(
                trainer.id, trainer.name, week, existing, max_count,
                message=(
                    f"Trainer {trainer.name} would exceed capacity the week of "
                    f"{week.isoformat()} ({existing + len(dogs)}/{max_count})"
                ),
            )
    return planned
