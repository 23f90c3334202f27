"""Assignment Store: the weekly dog/trainer record.

At most one row exists per (dog, week). Every week argument goes through
``monday_of`` before it reaches the repository.
"""
from kennel.errors import ValidationError
from kennel.models import AssignmentType
from kennel.utils.dates import monday_of


def check_type(type):
    if type not in AssignmentType.ALL:
        raise ValidationError(
            f"Invalid assignment type {type!r}, expected one of {', '.join(AssignmentType.ALL)}"
        )
    return type


def upsert(repo, dog_id, week_start, trainer_id, type):
    """Create or replace the dog's row for that week."""
    check_type(type)
    return repo.upsert_assignment(dog_id, monday_of(week_start), trainer_id, type)


def get(repo, dog_id, week_start):
    return repo.find_assignment(dog_id, monday_of(week_start))


def delete(repo, dog_id, week_start):
    return repo.delete_assignments(dog_id=dog_id, week=monday_of(week_start))


def delete_from(repo, dog_id, week_start):
    """Delete the dog's row for ``week_start`` and every later week."""
    return repo.delete_assignments(dog_id=dog_id, week_from=monday_of(week_start))


def count_for_trainer_week(repo, trainer_id, week_start, type, exclude_dog_id=None):
    exclude = [exclude_dog_id] if exclude_dog_id is not None else None
    return repo.count_assignments(
        trainer_id=trainer_id,
        week=monday_of(week_start),
        type=type,
        exclude_dog_ids=exclude,
    )


def find_for_trainer_week(repo, trainer_id, week_start):
    return repo.get_assignments(trainer_id=trainer_id, week=monday_of(week_start))


def find_for_dog_range(repo, dog_id, week_from, week_to):
    """Rows for the dog with ``week_from <= week < week_to``."""
    return repo.get_assignments(
        dog_id=dog_id,
        week_from=monday_of(week_from),
        week_to=monday_of(week_to),
    )


def has_class(repo, trainer_id, week_start, exclude_dog_id=None):
    return count_for_trainer_week(repo, trainer_id, week_start, AssignmentType.CLASS, exclude_dog_id) > 0
