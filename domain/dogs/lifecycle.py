"""Lifecycle Engine.

A dog's ``status`` column is a cache. The facts are its assignment history,
``recall_week_start_date`` and ``dropout_date``; :func:`derive_status`
turns those facts into a status for a given week and :func:`recompute`
stores the result. Nothing else writes ``Dog.status`` apart from the
dropout operation, which makes the dog terminal.
"""
import logging
from bisect import bisect_right

from kennel.config import resolve_rules
from kennel.models import AssignmentType, DogStatus
from kennel.utils.dates import add_weeks, current_week

logger = logging.getLogger(__name__)


def training_weeks_as_of(initial_training_weeks, training_weeks, week):
    """Cumulative training weeks up to and including ``week``.

    ``training_weeks`` must be the dog's sorted training week-starts.
    """
    return initial_training_weeks + bisect_right(training_weeks, week)


def derive_status(dog, assignments, today=None, rules=None):
    rules = resolve_rules(rules)
    if dog.status == DogStatus.DROPOUT:
        return DogStatus.DROPOUT

    week = current_week(today)
    if dog.recall_week_start_date is not None and dog.recall_week_start_date > week:
        return DogStatus.NOT_YET_IFT

    past_class_weeks = [
        a.week_start_date for a in assignments
        if a.type == AssignmentType.CLASS and a.week_start_date <= week
    ]
    if past_class_weeks:
        class_end = add_weeks(max(past_class_weeks), rules.class_duration_weeks)
        if week >= class_end:
            return DogStatus.GRADUATED
        return DogStatus.IN_CLASS

    training = sorted(a.week_start_date for a in assignments if a.type == AssignmentType.TRAINING)
    if not training:
        if dog.initial_training_weeks >= rules.min_training_weeks:
            return DogStatus.READY_FOR_CLASS
        return DogStatus.PAUSED

    next_week = add_weeks(week, 1)
    completed = dog.initial_training_weeks + sum(1 for w in training if w < next_week)
    if completed >= rules.min_training_weeks:
        return DogStatus.READY_FOR_CLASS

    if week in training:
        return DogStatus.IN_TRAINING
    return DogStatus.PAUSED


def recompute(repo, dog_id, today=None, rules=None):
    """Re-derive and store one dog's status. Idempotent."""
    dog = repo.get_dog(dog_id)
    if dog.status == DogStatus.DROPOUT:
        return dog.status

    assignments = repo.get_assignments(dog_id=dog.id)
    status = derive_status(dog, assignments, today=today, rules=rules)
    if status != dog.status:
        logger.debug("Dog %s (%s): %s -> %s", dog.id, dog.name, dog.status, status)
        dog.status = status
        repo.session.flush()
    return status


def recompute_many(repo, dog_ids, today=None, rules=None):
    rules = resolve_rules(rules)
    return {
        dog_id: recompute(repo, dog_id, today=today, rules=rules)
        for dog_id in sorted(set(dog_ids))
    }


def recompute_all(repo, today=None, rules=None):
    """Reconcile every dog. Returns ``{dog_id: (old, new)}`` for the dogs that changed."""
    rules = resolve_rules(rules)
    changed = {}
    for dog in repo.list_dogs():
        before = dog.status
        after = recompute(repo, dog.id, today=today, rules=rules)
        if after != before:
            changed[dog.id] = (before, after)
    logger.info("Status sync: %s dogs changed status", len(changed))
    return changed
