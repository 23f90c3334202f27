import pytest

from domain.classes import services as class_services
from domain.dogs import services as dog_services
from domain.forecast import services as forecast
from kennel.errors import ConsistencyError, ValidationError
from kennel.models import DogStatus
from tests.helpers import week


def names(row, week_start):
    return [dog.name for dog in row.weeks[week_start]]


@pytest.fixture
def kennel(make_trainer, make_dog, assign, repo):
    tess = make_trainer("Tess")
    uma = make_trainer("Uma")
    rex = make_dog("Rex")
    for n in range(3):
        assign(rex, week(n), tess)
    pup = make_dog("Pup", recall_week_start_date=week(2))
    make_dog("Fresh")
    scholar = make_dog("Scholar", initial_training_weeks=14)
    class_services.confirm_class(repo, week(1), [{"dog_id": scholar.id, "trainer_id": uma.id}])
    quitter = make_dog("Quitter")
    for n in range(9):
        assign(quitter, week(n), tess)
    dog_services.mark_dropout(repo, quitter.id, week(5))
    return {"tess": tess, "uma": uma, "rex": rex, "pup": pup, "scholar": scholar, "quitter": quitter}


def test_grid_shape(repo, kennel):
    grid = forecast.project(repo, week(0), 8)
    assert grid.week_starts == [week(n) for n in range(8)]
    assert [row.label for row in grid.trainers] == ["Tess", "Uma"]
    assert [row.label for row in grid.rows[2:]] == ["Parking Lot", "Not Yet IFT", "Graduated", "Dropped Out"]
    for row in grid.rows:
        assert list(row.weeks) == grid.week_starts


def test_trainer_cells_carry_cumulative_weeks(repo, kennel):
    grid = forecast.project(repo, week(0), 4)
    tess = grid.trainers[0]
    rex = [d for d in tess.weeks[week(2)] if d.name == "Rex"][0]
    assert (rex.type, rex.training_weeks) == ("training", 3)
    assert rex.assignment_id is not None
    assert names(tess, week(3)) == ["Quitter"]


def test_started_dog_without_a_trainer_is_in_the_parking_lot(repo, kennel):
    grid = forecast.project(repo, week(0), 5)
    assert "Rex" not in names(grid.parking_lot, week(2))
    assert "Rex" in names(grid.parking_lot, week(3))
    parked = [d for d in grid.parking_lot.weeks[week(3)] if d.name == "Rex"][0]
    assert (parked.type, parked.training_weeks) == ("paused", 3)


def test_unstarted_dog_is_nowhere(repo, kennel):
    grid = forecast.project(repo, week(0), 6)
    for week_start in grid.week_starts:
        assert "Fresh" not in [d.name for row in grid.rows for d in row.weeks[week_start]]


def test_recall_dog_waits_in_not_yet_ift(repo, kennel):
    grid = forecast.project(repo, week(0), 4)
    assert names(grid.not_yet_ift, week(0)) == ["Pup"]
    assert names(grid.not_yet_ift, week(1)) == ["Pup"]
    assert names(grid.not_yet_ift, week(2)) == []
    assert "Pup" in names(grid.parking_lot, week(2))
    assert grid.recall_week_starts == [week(2)]
    assert grid.recall_count_by_week[week(2)] == 1
    assert grid.recall_count_by_week[week(0)] == 0


def test_class_dog_graduates_after_its_class(repo, kennel):
    grid = forecast.project(repo, week(0), 5)
    uma = grid.trainers[1]
    assert [d.type for d in uma.weeks[week(1)]] == ["class"]
    assert names(uma, week(2)) == ["Scholar"]
    assert names(grid.graduated, week(2)) == []
    assert names(grid.graduated, week(3)) == ["Scholar"]
    assert grid.class_week_starts == [week(1), week(2)]


def test_class_starting_before_the_window_marks_its_tail(repo, kennel):
    grid = forecast.project(repo, week(2), 3)
    assert grid.class_week_starts == [week(2)]


def test_dropout_moves_dog_to_dropped_out(repo, kennel):
    grid = forecast.project(repo, week(0), 8)
    assert "Quitter" in names(grid.trainers[0], week(4))
    for n in range(5, 8):
        assert names(grid.dropped_out, week(n)) == ["Quitter"]
        assert "Quitter" not in names(grid.trainers[0], week(n))
    assert [r.week_start_date for r in repo.get_assignments(dog_id=kennel["quitter"].id)] == [
        week(n) for n in range(5)
    ]


def test_each_dog_is_placed_at_most_once_per_week(repo, kennel):
    grid = forecast.project(repo, week(0), 10)
    for week_start in grid.week_starts:
        seen = [d.id for row in grid.rows for d in row.weeks[week_start]]
        assert len(seen) == len(set(seen))
        assert set(grid.placements(week_start)) == set(seen)


def test_training_warnings(repo, make_trainer, make_dog, assign):
    tess = make_trainer("Tess")
    nearly = make_dog("Nearly", initial_training_weeks=13)
    over = make_dog("Over", initial_training_weeks=22)
    fresh = make_dog("Fresh")
    for dog in (nearly, over, fresh):
        assign(dog, week(0), tess)
    grid = forecast.project(repo, week(0), 1)
    warnings = {d.name: d.warning for d in grid.trainers[0].weeks[week(0)]}
    assert warnings == {"Nearly": "ready", "Over": "over_max", "Fresh": None}


def test_dropout_without_a_date_starts_after_its_last_row(repo, make_trainer, make_dog, assign):
    tess = make_trainer("Tess")
    dog = make_dog("Old")
    assign(dog, week(0), tess)
    dog.status = DogStatus.DROPOUT
    repo.session.commit()
    grid = forecast.project(repo, week(0), 3)
    assert names(grid.trainers[0], week(0)) == ["Old"]
    assert names(grid.dropped_out, week(1)) == ["Old"]


def test_row_with_a_missing_trainer_is_a_consistency_error(repo, make_trainer, make_dog, assign):
    dog = make_dog("Orphan")
    row = assign(dog, week(0), make_trainer("Tess"))
    row.trainer_id = 999
    repo.session.commit()
    with pytest.raises(ConsistencyError):
        forecast.project(repo, week(0), 1)


def test_week_count_limits(repo):
    assert len(forecast.get_forecast_data(repo, week(0)).week_starts) == 12
    assert len(forecast.get_forecast_data(repo, week(0), "52").week_starts) == 52
    for bad in (0, 53, "many"):
        with pytest.raises(ValidationError):
            forecast.get_forecast_data(repo, week(0), bad)


def test_start_date_is_normalized_to_monday(repo):
    grid = forecast.get_forecast_data(repo, "2024-01-04", 2)
    assert grid.week_starts == [week(0), week(1)]


def test_available_dogs_for_week(repo, kennel):
    available = {dog.name: status for dog, status in forecast.available_dogs_for_week(repo, week(1))}
    assert available == {
        "Pup": DogStatus.NOT_YET_IFT,
        "Fresh": DogStatus.PAUSED,
    }
    later = {dog.name: status for dog, status in forecast.available_dogs_for_week(repo, week(3))}
    assert later["Rex"] == DogStatus.PAUSED
    assert later["Pup"] == DogStatus.PAUSED
    assert "Quitter" not in later


def test_rows_after_the_window_still_set_dropout_start(repo, make_trainer, make_dog, assign):
    tess = make_trainer("Tess")
    dog = make_dog("Returner")
    assign(dog, week(0), tess)
    assign(dog, week(20), tess)
    dog.status = DogStatus.DROPOUT
    repo.session.commit()

    grid = forecast.project(repo, week(0), 10)
    for n in range(1, 10):
        assert names(grid.dropped_out, week(n)) == []
        assert names(grid.parking_lot, week(n)) == ["Returner"]


def test_graduation_follows_the_latest_class_even_beyond_the_window(repo, make_trainer, make_dog, assign):
    tess = make_trainer("Tess")
    dog = make_dog("Repeater", initial_training_weeks=14)
    for n in (2, 3, 30, 31):
        assign(dog, week(n), tess, "class")

    grid = forecast.project(repo, week(0), 8)
    assert names(grid.trainers[0], week(3)) == ["Repeater"]
    for n in range(4, 8):
        assert names(grid.graduated, week(n)) == []
    assert names(forecast.project(repo, week(32), 1).graduated, week(32)) == ["Repeater"]
