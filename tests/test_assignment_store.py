import pytest

from domain.assignments import store
from kennel.errors import ValidationError
from kennel.models import Assignment
from tests.helpers import midweek, week


def test_upsert_replaces_the_row_for_the_same_week(repo, make_dog, make_trainer):
    dog = make_dog("Ace")
    t1, t2 = make_trainer("Alex"), make_trainer("Bo")

    store.upsert(repo, dog.id, week(0), t1.id, "training")
    store.upsert(repo, dog.id, midweek(0), t2.id, "class")

    rows = repo.get_assignments(dog_id=dog.id)
    assert len(rows) == 1
    assert rows[0].week_start_date == week(0)
    assert rows[0].trainer_id == t2.id
    assert rows[0].type == "class"


def test_one_row_per_dog_week_after_many_upserts(repo, make_dog, make_trainer):
    dogs = [make_dog(f"Dog {i}") for i in range(3)]
    trainer = make_trainer()
    for n in range(4):
        for dog in dogs:
            store.upsert(repo, dog.id, midweek(n % 2), trainer.id, "training")
            store.upsert(repo, dog.id, week(n % 2), None, "paused")

    pairs = [(a.dog_id, a.week_start_date) for a in repo.session.query(Assignment).all()]
    assert len(pairs) == len(set(pairs)) == 6


def test_weeks_are_stored_as_mondays(repo, make_dog):
    dog = make_dog()
    row = store.upsert(repo, dog.id, "2024-01-10", None, "paused")
    assert row.week_start_date == week(1)
    assert store.get(repo, dog.id, week(1)) is row


def test_invalid_type_is_rejected(repo, make_dog):
    dog = make_dog()
    with pytest.raises(ValidationError):
        store.upsert(repo, dog.id, week(0), None, "holiday")


def test_delete_and_delete_from(repo, make_dog, make_trainer):
    dog = make_dog()
    trainer = make_trainer()
    for n in range(5):
        store.upsert(repo, dog.id, week(n), trainer.id, "training")

    assert store.delete(repo, dog.id, midweek(0)) == 1
    assert store.delete(repo, dog.id, week(0)) == 0
    assert store.delete_from(repo, dog.id, week(3)) == 2

    assert [a.week_start_date for a in repo.get_assignments(dog_id=dog.id)] == [week(1), week(2)]


def test_count_for_trainer_week(repo, make_dog, make_trainer):
    trainer = make_trainer()
    a, b, c = make_dog("A"), make_dog("B"), make_dog("C")
    store.upsert(repo, a.id, week(0), trainer.id, "training")
    store.upsert(repo, b.id, week(0), trainer.id, "training")
    store.upsert(repo, c.id, week(0), trainer.id, "class")

    assert store.count_for_trainer_week(repo, trainer.id, midweek(0), "training") == 2
    assert store.count_for_trainer_week(repo, trainer.id, week(0), "training", exclude_dog_id=a.id) == 1
    assert store.count_for_trainer_week(repo, trainer.id, week(0), "class") == 1
    assert store.count_for_trainer_week(repo, trainer.id, week(1), "training") == 0
    assert {r.dog_id for r in store.find_for_trainer_week(repo, trainer.id, week(0))} == {a.id, b.id, c.id}


def test_find_for_dog_range_is_half_open(repo, make_dog, make_trainer):
    dog = make_dog()
    trainer = make_trainer()
    for n in range(6):
        store.upsert(repo, dog.id, week(n), trainer.id, "training")

    rows = store.find_for_dog_range(repo, dog.id, midweek(1), week(4))
    assert [r.week_start_date for r in rows] == [week(1), week(2), week(3)]
