"""Class Scheduler.

Scheduling a class runs in three stages: validate the dog/trainer pairs,
report the training dogs the class would displace, then commit the class
together with the caller's resolution for each displaced dog.
"""
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import List

from domain.assignments import store
from domain.dogs import lifecycle
from kennel.config import resolve_rules
from kennel.errors import CapacityError, ValidationError
from kennel.models import AssignmentType, DogStatus
from kennel.utils.dates import add_weeks, current_week, parse_week, week_starts
from kennel.utils.decorators import transactional

logger = logging.getLogger(__name__)

PAUSE = "pause"
REMOVE = "remove"
RESOLUTION_ACTIONS = (PAUSE, REMOVE)


@dataclass(frozen=True)
class ClassPair:
    dog_id: int
    trainer_id: int


@dataclass(frozen=True)
class DisplacedDog:
    dog_id: int
    dog_name: str
    trainer_id: int
    trainer_name: str
    week_start_date: object


@dataclass(frozen=True)
class DisplacedResolution:
    dog_id: int
    week_start_date: object
    action: str


@dataclass
class ScheduleClassResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    displaced_dogs: List[DisplacedDog] = field(default_factory=list)


def class_weeks(start_date, rules=None):
    rules = resolve_rules(rules)
    return week_starts(start_date, rules.class_duration_weeks)


def _pairs(assignments):
    pairs = []
    for a in assignments or ():
        if isinstance(a, ClassPair):
            pairs.append(a)
            continue
        if a.get("dog_id") is None or a.get("trainer_id") is None:
            raise ValidationError("Each class assignment needs a dogId and a trainerId")
        pairs.append(ClassPair(int(a["dog_id"]), int(a["trainer_id"])))
    if not pairs:
        raise ValidationError("At least one dog-trainer pair is required")
    duplicates = [dog_id for dog_id, n in Counter(p.dog_id for p in pairs).items() if n > 1]
    if duplicates:
        raise ValidationError(f"Dogs listed more than once: {', '.join(map(str, sorted(duplicates)))}")
    return pairs


def _resolutions(resolutions):
    parsed = []
    for r in resolutions or ():
        if not isinstance(r, DisplacedResolution):
            r = DisplacedResolution(r.get("dog_id"), r.get("week_start_date"), r.get("action"))
        if r.action not in RESOLUTION_ACTIONS:
            raise ValidationError(f"Invalid action {r.action!r}, expected 'pause' or 'remove'")
        parsed.append(DisplacedResolution(int(r.dog_id), parse_week(r.week_start_date), r.action))
    return parsed


def _capacity_problems(repo, start, pairs, rules):
    problems = []
    per_trainer = Counter(p.trainer_id for p in pairs)
    class_dog_ids = {p.dog_id for p in pairs}

    for trainer_id, count in sorted(per_trainer.items()):
        trainer = repo.get_trainer(trainer_id)
        if count > rules.max_class_dogs_per_trainer:
            problems.append(CapacityError(
                trainer.id, trainer.name, start, count, rules.max_class_dogs_per_trainer,
                message=(
                    f"Trainer {trainer.name} has {count} dogs assigned "
                    f"(max {rules.max_class_dogs_per_trainer})"
                ),
            ))
            continue
        # other classes running the same weeks
        for week in class_weeks(start, rules):
            existing = repo.count_assignments(
                trainer_id=trainer_id, week=week, type=AssignmentType.CLASS,
                exclude_dog_ids=class_dog_ids,
            )
            if existing + count > rules.max_class_dogs_per_trainer:
                problems.append(CapacityError(
                    trainer.id, trainer.name, week, existing, rules.max_class_dogs_per_trainer,
                    message=(
                        f"Trainer {trainer.name} already has {existing} class dogs the week of "
                        f"{week.isoformat()} (max {rules.max_class_dogs_per_trainer})"
                    ),
                ))
                break
    return problems


def _check_dogs_can_join(repo, pairs):
    for pair in pairs:
        dog = repo.get_dog(pair.dog_id)
        if dog.status == DogStatus.DROPOUT:
            raise ValidationError(f"Dog {dog.name} has dropped out and cannot join a class")


def validate_class(repo, start_date, assignments, rules=None):
    """Return the capacity errors for a proposed class; empty when it fits."""
    rules = resolve_rules(rules)
    start = parse_week(start_date, "startDate")
    pairs = _pairs(assignments)
    _check_dogs_can_join(repo, pairs)
    return [problem.message for problem in _capacity_problems(repo, start, pairs, rules)]


def find_displaced(repo, start_date, assignments, rules=None):
    """Training dogs that lose their slot because their trainer teaches the class.

    Every dog in the class is excluded, whichever trainer it is paired with,
    so a class dog that was training with another class trainer that week is
    not reported.
    """
    rules = resolve_rules(rules)
    start = parse_week(start_date, "startDate")
    pairs = _pairs(assignments)
    class_dog_ids = {p.dog_id for p in pairs}
    trainer_ids = sorted({p.trainer_id for p in pairs})

    displaced = []
    for trainer_id in trainer_ids:
        trainer = repo.get_trainer(trainer_id)
        for week in class_weeks(start, rules):
            rows = repo.get_assignments(
                trainer_id=trainer_id, week=week, type=AssignmentType.TRAINING,
                exclude_dog_ids=class_dog_ids,
            )
            for row in rows:
                displaced.append(DisplacedDog(
                    dog_id=row.dog_id,
                    dog_name=row.dog.name,
                    trainer_id=trainer.id,
                    trainer_name=trainer.name,
                    week_start_date=week,
                ))
    return displaced


def schedule_class(repo, start_date, assignments, rules=None):
    """Dry run: validation errors plus displaced dogs. Writes nothing."""
    rules = resolve_rules(rules)
    errors = validate_class(repo, start_date, assignments, rules)
    if errors:
        return ScheduleClassResult(valid=False, errors=errors)
    return ScheduleClassResult(valid=True, displaced_dogs=find_displaced(repo, start_date, assignments, rules))


def _commit(repo, training_class, start, pairs, resolutions, today, rules):
    problems = _capacity_problems(repo, start, pairs, rules)
    if problems:
        logger.warning("Class %s rejected: %s", start, "; ".join(p.message for p in problems))
        raise problems[0]

    displaced = find_displaced(repo, start, pairs, rules)
    displaced_keys = {(d.dog_id, d.week_start_date) for d in displaced}
    class_dog_ids = {p.dog_id for p in pairs}
    resolved = {}
    for r in resolutions:
        if r.dog_id in class_dog_ids:
            continue  # the class row always wins
        if (r.dog_id, r.week_start_date) not in displaced_keys:
            raise ValidationError(
                f"Dog {r.dog_id} is not displaced the week of {r.week_start_date.isoformat()}"
            )
        resolved[(r.dog_id, r.week_start_date)] = r.action
    missing = sorted(displaced_keys - set(resolved))
    if missing:
        raise ValidationError(
            "Displaced dogs need a pause or remove decision",
            errors={"displaced": [
                {"dogId": dog_id, "weekStartDate": week.isoformat()} for dog_id, week in missing
            ]},
        )

    repo.add_class_assignments(training_class, [(p.dog_id, p.trainer_id) for p in pairs])
    for pair in pairs:
        for week in class_weeks(start, rules):
            store.upsert(repo, pair.dog_id, week, pair.trainer_id, AssignmentType.CLASS)

    for (dog_id, week), action in sorted(resolved.items()):
        if action == PAUSE:
            store.upsert(repo, dog_id, week, None, AssignmentType.PAUSED)
        else:
            store.delete(repo, dog_id, week)

    affected = class_dog_ids | {dog_id for dog_id, _ in resolved}
    lifecycle.recompute_many(repo, affected, today=today, rules=rules)
    return affected


def _teardown(repo, training_class, rules):
    """Remove the rows a class generated for its stored start date."""
    dog_ids = {ca.dog_id for ca in training_class.class_assignments}
    weeks = class_weeks(training_class.start_date, rules)
    for dog_id in dog_ids:
        repo.delete_assignments(
            dog_id=dog_id,
            week_from=weeks[0],
            week_to=add_weeks(weeks[-1], 1),
            type=AssignmentType.CLASS,
        )
    repo.clear_class_assignments(training_class)
    return dog_ids


@transactional
def confirm_class(repo, start_date, assignments, displaced_resolutions=(), today=None, rules=None):
    rules = resolve_rules(rules)
    start = parse_week(start_date, "startDate")
    pairs = _pairs(assignments)
    resolutions = _resolutions(displaced_resolutions)
    _check_dogs_can_join(repo, pairs)
    repo.lock_trainers(p.trainer_id for p in pairs)

    training_class = repo.create_class(start)
    _commit(repo, training_class, start, pairs, resolutions, today, rules)
    logger.info("Class %s confirmed for %s with %s dogs", training_class.id, start, len(pairs))
    return training_class


@transactional
def update_class(repo, class_id, start_date, assignments, displaced_resolutions=(), today=None, rules=None):
    """Move and/or re-staff a class.

    Rows generated for the OLD start date are torn down first, then the
    class is rebuilt on the NEW start date.
    """
    rules = resolve_rules(rules)
    new_start = parse_week(start_date, "startDate")
    pairs = _pairs(assignments)
    resolutions = _resolutions(displaced_resolutions)
    training_class = repo.get_class(class_id)
    _check_dogs_can_join(repo, pairs)
    old_trainers = {ca.trainer_id for ca in training_class.class_assignments if ca.trainer_id is not None}
    repo.lock_trainers(old_trainers | {p.trainer_id for p in pairs})

    old_start = training_class.start_date
    old_dog_ids = _teardown(repo, training_class, rules)
    training_class.start_date = new_start
    repo.session.flush()

    affected = _commit(repo, training_class, new_start, pairs, resolutions, today, rules)
    lifecycle.recompute_many(repo, old_dog_ids - affected, today=today, rules=rules)
    logger.info("Class %s moved from %s to %s with %s dogs", training_class.id, old_start, new_start, len(pairs))
    return training_class


@transactional
def delete_class(repo, class_id, today=None, rules=None):
    rules = resolve_rules(rules)
    training_class = repo.get_class(class_id)
    dog_ids = _teardown(repo, training_class, rules)
    repo.delete_class(training_class)
    lifecycle.recompute_many(repo, dog_ids, today=today, rules=rules)
    logger.info("Class %s deleted, %s dogs recomputed", class_id, len(dog_ids))


def list_classes(repo):
    return repo.list_classes()


def get_class(repo, class_id):
    return repo.get_class(class_id)


def dogs_ready_for_class(repo, as_of=None, rules=None):
    """Dogs in training (or ready) with at least MIN_TRAINING_WEEKS by the week of ``as_of``.

    Returns ``(dog, training_weeks)`` pairs sorted by dog name.
    """
    rules = resolve_rules(rules)
    week = current_week(as_of)
    dogs = repo.list_dogs(statuses=[DogStatus.IN_TRAINING, DogStatus.READY_FOR_CLASS])
    training = defaultdict(list)
    if dogs:
        for row in repo.get_assignments(dog_ids=[d.id for d in dogs], type=AssignmentType.TRAINING):
            training[row.dog_id].append(row.week_start_date)
    ready = []
    for dog in dogs:
        weeks = lifecycle.training_weeks_as_of(dog.initial_training_weeks, training[dog.id], week)
        if weeks >= rules.min_training_weeks:
            ready.append((dog, weeks))
    return ready
