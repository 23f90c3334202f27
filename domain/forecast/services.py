"""Forecast Projector.

Builds the trainer x week grid straight from stored rows. Each dog lands in
exactly one place per week, checked in this order: Dropped Out, a trainer
row, Not Yet IFT, Graduated, and finally the Parking Lot, which collects
every started dog not placed anywhere else.
"""
import logging
from bisect import bisect_right
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from flask import current_app

from kennel.config import resolve_rules
from kennel.errors import ConsistencyError, ValidationError
from kennel.models import AssignmentType, DogStatus
from kennel.utils.dates import add_weeks, parse_week, week_starts

logger = logging.getLogger(__name__)

TRAINER = "trainer"
PARKING_LOT = "parking_lot"
NOT_YET_IFT = "not_yet_ift"
GRADUATED = "graduated"
DROPPED_OUT = "dropped_out"

ROW_LABELS = {
    PARKING_LOT: "Parking Lot",
    NOT_YET_IFT: "Not Yet IFT",
    GRADUATED: "Graduated",
    DROPPED_OUT: "Dropped Out",
}

WARNING_READY = "ready"
WARNING_OVER_MAX = "over_max"


@dataclass
class ForecastDog:
    id: int
    name: str
    type: str
    training_weeks: int
    assignment_id: Optional[int] = None
    warning: Optional[str] = None


@dataclass
class ForecastRow:
    key: str
    label: str
    trainer_id: Optional[int] = None
    weeks: Dict[date, List[ForecastDog]] = field(default_factory=dict)


@dataclass
class ForecastGrid:
    week_starts: List[date]
    trainers: List[ForecastRow]
    parking_lot: ForecastRow
    not_yet_ift: ForecastRow
    graduated: ForecastRow
    dropped_out: ForecastRow
    recall_week_starts: List[date]
    recall_count_by_week: Dict[date, int]
    class_week_starts: List[date]

    @property
    def rows(self):
        return self.trainers + [self.parking_lot, self.not_yet_ift, self.graduated, self.dropped_out]

    def placements(self, week):
        """``{dog_id: row_key}`` for one week; trainer rows keyed ``trainer:<id>``."""
        placed = {}
        for row in self.rows:
            key = row.key if row.trainer_id is None else f"{row.key}:{row.trainer_id}"
            for dog in row.weeks.get(week, []):
                placed[dog.id] = key
        return placed


def _synthetic_row(key, weeks):
    return ForecastRow(key=key, label=ROW_LABELS[key], weeks={w: [] for w in weeks})


def _training_warning(type, training_weeks, rules):
    if type != AssignmentType.TRAINING:
        return None
    if training_weeks >= rules.max_training_weeks:
        return WARNING_OVER_MAX
    if training_weeks >= rules.min_training_weeks:
        return WARNING_READY
    return None


def _dropout_start(dog, last_week):
    if dog.dropout_date is not None:
        return dog.dropout_date
    if last_week is not None:
        return add_weeks(last_week, 1)
    return date.min


def project(repo, start_date, week_count, rules=None):
    rules = resolve_rules(rules)
    if week_count < 1:
        raise ValidationError("weekCount must be at least 1")
    weeks = week_starts(start_date, week_count)
    first, end = weeks[0], add_weeks(weeks[0], week_count)

    trainers = repo.list_trainers()
    dogs = repo.list_dogs()
    # rows after the window cannot change any cell; the last-week aggregates still see them
    assignments = repo.get_assignments(week_to=end)
    latest = repo.latest_assignment_weeks()
    last_class_week = repo.latest_assignment_weeks(type=AssignmentType.CLASS)

    training_by_dog = defaultdict(list)
    earliest = {}
    in_window = defaultdict(dict)  # week -> dog_id -> assignment
    for a in assignments:
        if a.type == AssignmentType.TRAINING:
            training_by_dog[a.dog_id].append(a.week_start_date)
        earliest.setdefault(a.dog_id, a.week_start_date)
        if first <= a.week_start_date:
            if a.dog_id in in_window[a.week_start_date]:
                raise ConsistencyError(
                    f"dog {a.dog_id} has two assignments the week of {a.week_start_date.isoformat()}"
                )
            in_window[a.week_start_date][a.dog_id] = a

    def cumulative(dog, week):
        return dog.initial_training_weeks + bisect_right(training_by_dog[dog.id], week)

    graduation_week = {dog_id: add_weeks(week, 1) for dog_id, week in last_class_week.items()}

    trainer_rows = {
        t.id: ForecastRow(key=TRAINER, label=t.name, trainer_id=t.id, weeks={w: [] for w in weeks})
        for t in trainers
    }
    parking_lot = _synthetic_row(PARKING_LOT, weeks)
    not_yet_ift = _synthetic_row(NOT_YET_IFT, weeks)
    graduated = _synthetic_row(GRADUATED, weeks)
    dropped_out = _synthetic_row(DROPPED_OUT, weeks)

    for week in weeks:
        rows_this_week = in_window.get(week, {})
        for dog in dogs:
            training_weeks = cumulative(dog, week)
            row = rows_this_week.get(dog.id)

            if dog.status == DogStatus.DROPOUT and week >= _dropout_start(dog, latest.get(dog.id)):
                dropped_out.weeks[week].append(ForecastDog(dog.id, dog.name, DogStatus.DROPOUT, training_weeks))
                continue

            if row is not None and row.trainer_id is not None:
                trainer_row = trainer_rows.get(row.trainer_id)
                if trainer_row is None:
                    raise ConsistencyError(f"assignment {row.id} references missing trainer {row.trainer_id}")
                trainer_row.weeks[week].append(ForecastDog(
                    dog.id, dog.name, row.type, training_weeks, row.id,
                    _training_warning(row.type, training_weeks, rules),
                ))
                continue

            if dog.recall_week_start_date is not None and dog.recall_week_start_date > week:
                not_yet_ift.weeks[week].append(ForecastDog(dog.id, dog.name, NOT_YET_IFT, training_weeks))
                continue

            if (dog.status != DogStatus.DROPOUT and dog.id in graduation_week
                    and week >= graduation_week[dog.id]):
                graduated.weeks[week].append(ForecastDog(dog.id, dog.name, DogStatus.GRADUATED, training_weeks))
                continue

            started = (
                (dog.id in earliest and earliest[dog.id] <= week)
                or (dog.recall_week_start_date is not None and dog.recall_week_start_date <= week)
            )
            if started:
                parking_lot.weeks[week].append(ForecastDog(
                    dog.id, dog.name, AssignmentType.PAUSED, training_weeks,
                    row.id if row is not None else None,
                ))

    recall_count_by_week = {w: 0 for w in weeks}
    for dog in dogs:
        if dog.recall_week_start_date in recall_count_by_week:
            recall_count_by_week[dog.recall_week_start_date] += 1

    class_week_set = set()
    earliest_start = add_weeks(first, -(rules.class_duration_weeks - 1))
    for training_class in repo.list_classes(start_from=earliest_start, start_to=end):
        for i in range(rules.class_duration_weeks):
            class_week_set.add(add_weeks(training_class.start_date, i))

    logger.debug("Projected %s weeks from %s for %s dogs", week_count, first, len(dogs))
    return ForecastGrid(
        week_starts=weeks,
        trainers=[trainer_rows[t.id] for t in trainers],
        parking_lot=parking_lot,
        not_yet_ift=not_yet_ift,
        graduated=graduated,
        dropped_out=dropped_out,
        recall_week_starts=[w for w in weeks if recall_count_by_week[w] > 0],
        recall_count_by_week=recall_count_by_week,
        class_week_starts=[w for w in weeks if w in class_week_set],
    )


def get_forecast_data(repo, start_date, week_count=None, rules=None):
    """Validate the window then :func:`project` it."""
    if week_count is None:
        week_count = current_app.config.get("DEFAULT_FORECAST_WEEKS", 12)
    max_weeks = current_app.config.get("MAX_FORECAST_WEEKS", 52)
    try:
        week_count = int(week_count)
    except (TypeError, ValueError):
        raise ValidationError(f"weekCount must be a whole number, got {week_count!r}") from None
    if not 1 <= week_count <= max_weeks:
        raise ValidationError(f"weekCount must be between 1 and {max_weeks}")
    return project(repo, parse_week(start_date, "startDate"), week_count, rules)


def available_dogs_for_week(repo, week_start):
    """Dogs without any row for the week, with the status they effectively have that week.

    Dropped out and graduated dogs are left out.
    """
    week = parse_week(week_start, "weekDate")
    taken = {a.dog_id for a in repo.get_assignments(week=week)}
    earliest = repo.earliest_assignment_weeks()

    available = []
    for dog in repo.list_dogs(exclude_statuses=[DogStatus.DROPOUT, DogStatus.GRADUATED]):
        if dog.id in taken:
            continue
        recall = dog.recall_week_start_date
        if recall is not None and week < recall:
            status = DogStatus.NOT_YET_IFT
        elif (dog.id in earliest and earliest[dog.id] <= week) or (recall is not None and recall <= week):
            status = DogStatus.PAUSED
        else:
            status = dog.status
        available.append((dog, status))
    return available
