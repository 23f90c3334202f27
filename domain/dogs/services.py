import logging

from domain.assignments import store
from domain.capacity.services import PlannedAssignment, validate_batch
from domain.dogs import lifecycle
from kennel.config import resolve_rules
from kennel.errors import ValidationError
from kennel.models import AssignmentType, DogStatus
from kennel.utils.dates import add_weeks, current_week, monday_of, parse_week
from kennel.utils.decorators import transactional

logger = logging.getLogger(__name__)

_UNSET = object()


def clean_name(name, field="name"):
    name = (name or "").strip()
    if not name:
        raise ValidationError(f"{field} is required")
    if len(name) > 100:
        raise ValidationError(f"{field} must be at most 100 characters")
    return name


def check_initial_weeks(value, rules):
    try:
        weeks = int(value or 0)
    except (TypeError, ValueError):
        raise ValidationError(f"initialTrainingWeeks must be a whole number, got {value!r}") from None
    if weeks < 0 or weeks > rules.max_training_weeks:
        raise ValidationError(
            f"initialTrainingWeeks must be between 0 and {rules.max_training_weeks}"
        )
    return weeks


def _optional_week(value):
    if value is None or value == "":
        return None
    return parse_week(value, "recallWeekStartDate")


@transactional
def create_dog(repo, name, initial_training_weeks=0, recall_week_start_date=None, today=None, rules=None):
    rules = resolve_rules(rules)
    dog = repo.create_dog(
        name=clean_name(name),
        initial_training_weeks=check_initial_weeks(initial_training_weeks, rules),
        recall_week_start_date=_optional_week(recall_week_start_date),
        status=DogStatus.PAUSED,
    )
    lifecycle.recompute(repo, dog.id, today=today, rules=rules)
    logger.info("Created dog %s (%s) as %s", dog.id, dog.name, dog.status)
    return dog


@transactional
def update_dog(repo, dog_id, name=None, initial_training_weeks=None,
               recall_week_start_date=_UNSET, today=None, rules=None):
    """Edit a dog's facts and re-derive its status.

    Moving ``recall_week_start_date`` past the current week puts the dog
    back into ``not_yet_ift``.
    """
    rules = resolve_rules(rules)
    dog = repo.get_dog(dog_id)
    if name is not None:
        dog.name = clean_name(name)
    if initial_training_weeks is not None:
        dog.initial_training_weeks = check_initial_weeks(initial_training_weeks, rules)
    if recall_week_start_date is not _UNSET:
        dog.recall_week_start_date = _optional_week(recall_week_start_date)
    repo.session.flush()
    lifecycle.recompute(repo, dog.id, today=today, rules=rules)
    return dog


@transactional
def delete_dog(repo, dog_id):
    dog = repo.get_dog(dog_id)
    logger.info("Deleting dog %s (%s)", dog.id, dog.name)
    repo.delete_dog(dog)


@transactional
def mark_dropout(repo, dog_id, effective_date=None):
    """Drop a dog from the program from the week of ``effective_date`` (default: this week).

    Rows for that week and every later week are deleted. Dropout is terminal.
    """
    dog = repo.get_dog(dog_id)
    if dog.status == DogStatus.DROPOUT:
        raise ValidationError(f"Dog {dog.name} has already dropped out")
    week = monday_of(effective_date) if effective_date is not None else current_week()
    dog.status = DogStatus.DROPOUT
    dog.dropout_date = week
    removed = store.delete_from(repo, dog.id, week)
    logger.info("Dog %s (%s) dropped out from %s, %s assignments removed", dog.id, dog.name, week, removed)
    return dog


@transactional
def pause_from(repo, dog_id, week_start, today=None, rules=None):
    """Take a dog off every trainer from ``week_start`` on. It lands in the parking lot."""
    dog = repo.get_dog(dog_id)
    if dog.status == DogStatus.DROPOUT:
        raise ValidationError(f"Dog {dog.name} has dropped out")
    week = parse_week(week_start)
    removed = store.delete_from(repo, dog.id, week)
    lifecycle.recompute(repo, dog.id, today=today, rules=rules)
    logger.info("Dog %s paused from %s, %s assignments removed", dog.id, week, removed)
    return dog


def training_weeks(repo, dog_id, as_of=None):
    """Cumulative training weeks (initial weeks included) up to the week of ``as_of``."""
    dog = repo.get_dog(dog_id)
    week = current_week(as_of)
    weeks = [
        a.week_start_date
        for a in repo.get_assignments(dog_id=dog.id, type=AssignmentType.TRAINING)
    ]
    return lifecycle.training_weeks_as_of(dog.initial_training_weeks, weeks, week)


@transactional
def schedule_recall(repo, week_start, dogs, today=None, rules=None):
    """Bring a group of new dogs into the program starting the week of ``week_start``.

    Each entry is a mapping with ``name``, ``trainer_id`` (None when the
    trainer is not decided yet), ``initial_training_weeks`` and optionally
    ``weeks``, the number of consecutive training weeks to book. Every week
    of every dog is capacity-checked before anything is written.
    """
    rules = resolve_rules(rules)
    week = parse_week(week_start)
    if not dogs:
        raise ValidationError("At least one dog is required")

    prepared = []
    for entry in dogs:
        initial = check_initial_weeks(entry.get("initial_training_weeks", 0), rules)
        trainer_id = entry.get("trainer_id") or None
        weeks = entry.get("weeks")
        if weeks is None:
            weeks = max(1, rules.min_training_weeks - initial)
        if int(weeks) < 1:
            raise ValidationError("weeks must be at least 1")
        prepared.append({
            "name": clean_name(entry.get("name")),
            "initial_training_weeks": initial,
            "trainer_id": trainer_id,
            "weeks": int(weeks) if trainer_id is not None else 0,
        })

    repo.lock_trainers(p["trainer_id"] for p in prepared if p["trainer_id"] is not None)
    planned = [
        PlannedAssignment(None, p["trainer_id"], add_weeks(week, i), AssignmentType.TRAINING)
        for p in prepared
        for i in range(p["weeks"])
    ]
    validate_batch(repo, planned, rules)

    created = []
    for p in prepared:
        dog = repo.create_dog(
            name=p["name"],
            initial_training_weeks=p["initial_training_weeks"],
            recall_week_start_date=week,
            status=DogStatus.NOT_YET_IFT,
        )
        for i in range(p["weeks"]):
            store.upsert(repo, dog.id, add_weeks(week, i), p["trainer_id"], AssignmentType.TRAINING)
        lifecycle.recompute(repo, dog.id, today=today, rules=rules)
        created.append(dog)

    logger.info("Recall scheduled for %s: %s dogs, %s training weeks", week, len(created), len(planned))
    return created


@transactional
def sync_dog_status(repo, dog_id, today=None, rules=None):
    return lifecycle.recompute(repo, dog_id, today=today, rules=rules)


@transactional
def sync_all_dogs_status(repo, today=None, rules=None):
    return lifecycle.recompute_all(repo, today=today, rules=rules)


def list_dogs(repo, statuses=None):
    return repo.list_dogs(statuses=statuses)
