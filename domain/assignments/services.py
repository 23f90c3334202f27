import logging

from domain.assignments import store
from domain.capacity.services import PlannedAssignment, ensure_capacity, validate_batch
from domain.dogs import lifecycle
from kennel.config import resolve_rules
from kennel.errors import ValidationError
from kennel.models import AssignmentType, DogStatus
from kennel.utils.dates import add_weeks, parse_week
from kennel.utils.decorators import transactional

logger = logging.getLogger(__name__)


def _check_dog_can_be_scheduled(dog, week):
    if dog.status == DogStatus.DROPOUT and (dog.dropout_date is None or week >= dog.dropout_date):
        raise ValidationError(f"Dog {dog.name} has dropped out and cannot be scheduled")


def _check_trainer_for_type(trainer_id, type):
    if type in AssignmentType.CAPACITY_LIMITED and trainer_id is None:
        raise ValidationError(f"A {type} assignment needs a trainer")


@transactional
def create_assignment(repo, dog_id, week_start_date, trainer_id, type, today=None, rules=None):
    """Assign (or move) a dog to a trainer for one week."""
    rules = resolve_rules(rules)
    week = parse_week(week_start_date)
    store.check_type(type)
    _check_trainer_for_type(trainer_id, type)
    dog = repo.get_dog(dog_id)
    _check_dog_can_be_scheduled(dog, week)

    if trainer_id is not None:
        repo.lock_trainers([trainer_id])
    if type in AssignmentType.CAPACITY_LIMITED:
        # the dog's own row for the week is replaced, so it never counts against itself
        ensure_capacity(repo, trainer_id, week, type, exclude_dog_id=dog.id, rules=rules)

    assignment = store.upsert(repo, dog.id, week, trainer_id, type)
    lifecycle.recompute(repo, dog.id, today=today, rules=rules)
    return assignment


@transactional
def delete_assignment(repo, dog_id, week_start_date, today=None, rules=None):
    dog = repo.get_dog(dog_id)
    removed = store.delete(repo, dog.id, parse_week(week_start_date))
    lifecycle.recompute(repo, dog.id, today=today, rules=rules)
    return removed


@transactional
def bulk_create_assignments(repo, assignments, today=None, rules=None):
    """Write many rows at once. Nothing is written unless every row passes."""
    rules = resolve_rules(rules)
    if not assignments:
        raise ValidationError("At least one assignment is required")

    planned = []
    for a in assignments:
        week = parse_week(a.get("week_start_date"))
        type = store.check_type(a.get("type", AssignmentType.TRAINING))
        trainer_id = a.get("trainer_id")
        _check_trainer_for_type(trainer_id, type)
        dog = repo.get_dog(a.get("dog_id"))
        _check_dog_can_be_scheduled(dog, week)
        planned.append(PlannedAssignment(dog.id, trainer_id, week, type))

    repo.lock_trainers(p.trainer_id for p in planned if p.trainer_id is not None)
    planned = validate_batch(repo, planned, rules)

    rows = [store.upsert(repo, p.dog_id, p.week_start_date, p.trainer_id, p.type) for p in planned]
    lifecycle.recompute_many(repo, [p.dog_id for p in planned], today=today, rules=rules)
    logger.info("Bulk created %s assignments for %s dogs", len(rows), len({p.dog_id for p in planned}))
    return rows


@transactional
def move_to_parking_lot(repo, dog_id, week_start_date, today=None, rules=None):
    """Keep the dog in the program for the week but take it off its trainer."""
    week = parse_week(week_start_date)
    dog = repo.get_dog(dog_id)
    _check_dog_can_be_scheduled(dog, week)
    assignment = store.upsert(repo, dog.id, week, None, AssignmentType.PAUSED)
    lifecycle.recompute(repo, dog.id, today=today, rules=rules)
    return assignment


@transactional
def schedule_remaining_training(repo, dog_id, week_start_date, trainer_id, today=None, rules=None):
    """Book consecutive training weeks until the dog reaches MIN_TRAINING_WEEKS."""
    rules = resolve_rules(rules)
    week = parse_week(week_start_date)
    dog = repo.get_dog(dog_id)
    done_before = lifecycle.training_weeks_as_of(
        dog.initial_training_weeks,
        [a.week_start_date for a in repo.get_assignments(dog_id=dog.id, type=AssignmentType.TRAINING, week_to=week)],
        week,
    )
    remaining = rules.min_training_weeks - done_before
    if remaining <= 0:
        raise ValidationError(f"Dog {dog.name} already has {done_before} training weeks")
    return bulk_create_assignments(
        repo,
        [
            {
                "dog_id": dog.id,
                "trainer_id": trainer_id,
                "week_start_date": add_weeks(week, i),
                "type": AssignmentType.TRAINING,
            }
            for i in range(remaining)
        ],
        today=today,
        rules=rules,
    )
