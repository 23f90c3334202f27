import logging

from domain.dogs import lifecycle
from domain.dogs.services import clean_name
from kennel.config import resolve_rules
from kennel.errors import ValidationError
from kennel.utils.dates import add_weeks, current_week
from kennel.utils.decorators import transactional

logger = logging.getLogger(__name__)


def list_trainers(repo):
    return repo.list_trainers()


@transactional
def create_trainer(repo, name):
    trainer = repo.create_trainer(clean_name(name))
    logger.info("Created trainer %s (%s)", trainer.id, trainer.name)
    return trainer


@transactional
def rename_trainer(repo, trainer_id, name):
    trainer = repo.get_trainer(trainer_id)
    trainer.name = clean_name(name)
    repo.session.flush()
    return trainer


@transactional
def delete_trainer(repo, trainer_id, today=None, rules=None):
    """Delete a trainer without leaving dangling rows behind.

    Refused while the trainer belongs to a class that has not finished.
    Past rows keep their history with the trainer cleared; rows for this
    week and later are deleted, so those dogs fall into the parking lot.
    """
    rules = resolve_rules(rules)
    trainer = repo.get_trainer(trainer_id)
    week = current_week(today)

    class_links = repo.class_assignments_for_trainer(trainer.id)
    for link in class_links:
        class_end = add_weeks(link.training_class.start_date, rules.class_duration_weeks)
        if class_end > week:
            raise ValidationError(
                f"Trainer {trainer.name} teaches the class starting "
                f"{link.training_class.start_date.isoformat()}; reassign it first"
            )
    for link in class_links:
        link.trainer_id = None

    affected = set()
    for assignment in repo.get_assignments(trainer_id=trainer.id):
        affected.add(assignment.dog_id)
        if assignment.week_start_date >= week:
            repo.session.delete(assignment)
        else:
            assignment.trainer_id = None
    repo.session.flush()

    logger.info("Deleting trainer %s (%s), %s dogs affected", trainer.id, trainer.name, len(affected))
    repo.delete_trainer(trainer)
    lifecycle.recompute_many(repo, affected, today=today, rules=rules)
