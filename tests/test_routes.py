import pytest

from tests.helpers import week


@pytest.fixture
def tess(client):
    return client.post("/api/trainers", json={"name": "Tess"}).get_json()


@pytest.fixture
def rex(client, today):
    return client.post("/api/dogs", json={"name": "Rex"}).get_json()


def test_create_dog(client, today):
    response = client.post("/api/dogs", json={
        "name": "Pup", "initialTrainingWeeks": 2, "recallWeekStartDate": "2024-01-17",
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body["recallWeekStartDate"] == "2024-01-15"
    assert body["status"] == "not_yet_ift"
    assert body["initialTrainingWeeks"] == 2


def test_bad_body_is_a_400(client, today):
    response = client.post("/api/dogs", json={"initialTrainingWeeks": -1})
    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "validation_error"
    assert "name" in body["errors"]

    response = client.post("/api/dogs", data="not json", content_type="text/plain")
    assert response.status_code == 400


def test_missing_dog_is_a_404(client):
    response = client.delete("/api/dogs/404")
    assert response.status_code == 404
    assert response.get_json()["error"] == "not_found"


def test_assignment_and_capacity_conflict(client, tess, today):
    dogs = [client.post("/api/dogs", json={"name": f"Dog {n}"}).get_json() for n in range(7)]
    for dog in dogs[:6]:
        response = client.post("/api/assignments", json={
            "dogId": dog["id"], "trainerId": tess["id"], "weekStartDate": "2024-01-01",
        })
        assert response.status_code == 201
    assert response.get_json()["type"] == "training"

    response = client.post("/api/assignments", json={
        "dogId": dogs[6]["id"], "trainerId": tess["id"], "weekStartDate": "2024-01-03",
    })
    assert response.status_code == 409
    body = response.get_json()
    assert body["error"] == "capacity_error"
    assert (body["current_count"], body["max_count"]) == (6, 6)
    assert body["week_start_date"] == "2024-01-01"
    assert body["unavailable"] is False


def test_delete_assignment_and_parking_lot(client, tess, rex):
    key = {"dogId": rex["id"], "weekStartDate": "2024-01-01"}
    client.post("/api/assignments", json={**key, "trainerId": tess["id"]})
    parked = client.post("/api/assignments/parking-lot", json=key).get_json()
    assert (parked["type"], parked["trainerId"]) == ("paused", None)
    assert client.delete("/api/assignments", json=key).get_json() == {"deleted": 1}


def test_forecast_payload(client, tess, rex):
    client.post("/api/assignments", json={
        "dogId": rex["id"], "trainerId": tess["id"], "weekStartDate": "2024-01-08",
    })
    response = client.get("/api/forecast?startDate=2024-01-01&weekCount=3")
    assert response.status_code == 200
    body = response.get_json()
    assert body["weekStarts"] == ["2024-01-01", "2024-01-08", "2024-01-15"]
    assert set(body) >= {
        "trainers", "parkingLot", "notYetIft", "graduated", "droppedOut",
        "recallWeekStarts", "recallCountByWeek", "classWeekStarts",
    }
    cell = body["trainers"][0]["weeks"]["2024-01-08"]
    assert cell == [{
        "id": rex["id"], "name": "Rex", "type": "training", "trainingWeeks": 1,
        "assignmentId": cell[0]["assignmentId"], "warning": None,
    }]
    assert body["parkingLot"]["weeks"]["2024-01-15"][0]["name"] == "Rex"


def test_forecast_defaults_to_this_week(client, today):
    body = client.get("/api/forecast").get_json()
    assert body["weekStarts"][0] == week(0).isoformat()
    assert len(body["weekStarts"]) == 12


def test_forecast_rejects_bad_week_count(client):
    assert client.get("/api/forecast?weekCount=0").status_code == 400
    assert client.get("/api/forecast?weekCount=lots").status_code == 400
    assert client.get("/api/forecast?startDate=yesterday").status_code == 400


def test_available_dogs_requires_a_week(client, rex):
    assert client.get("/api/forecast/available-dogs").status_code == 400
    body = client.get("/api/forecast/available-dogs?weekDate=2024-01-01").get_json()
    assert body == {"dogs": [{"id": rex["id"], "name": "Rex", "status": "paused"}]}


def test_recall_route(client, tess, today):
    response = client.post("/api/dogs/recall", json={
        "weekStartDate": "2024-01-15",
        "dogs": [{"name": "Alpha", "trainerId": tess["id"], "weeks": 3}, {"name": "Bravo", "trainerId": 0}],
    })
    assert response.status_code == 201
    assert [d["name"] for d in response.get_json()] == ["Alpha", "Bravo"]


def test_class_flow(client, tess, today):
    scholar = client.post("/api/dogs", json={"name": "Scholar", "initialTrainingWeeks": 14}).get_json()
    trainee = client.post("/api/dogs", json={"name": "Trainee"}).get_json()
    client.post("/api/assignments", json={
        "dogId": trainee["id"], "trainerId": tess["id"], "weekStartDate": "2024-03-04",
    })
    payload = {"startDate": "2024-03-04", "assignments": [{"dogId": scholar["id"], "trainerId": tess["id"]}]}

    dry_run = client.post("/api/classes/schedule", json=payload).get_json()
    assert dry_run["valid"] is True
    assert dry_run["displacedDogs"] == [{
        "dogId": trainee["id"], "dogName": "Trainee", "trainerId": tess["id"],
        "trainerName": "Tess", "weekStartDate": "2024-03-04",
    }]

    assert client.post("/api/classes", json=payload).status_code == 400

    payload["displacedActions"] = [{"dogId": trainee["id"], "weekStartDate": "2024-03-04", "action": "pause"}]
    response = client.post("/api/classes", json=payload)
    assert response.status_code == 201
    created = response.get_json()
    assert created["assignments"] == [{
        "dogId": scholar["id"], "dogName": "Scholar", "trainerId": tess["id"], "trainerName": "Tess",
    }]

    listed = client.get("/api/classes").get_json()
    assert [c["id"] for c in listed] == [created["id"]]
    assert client.delete(f"/api/classes/{created['id']}").status_code == 204
    assert client.get(f"/api/classes/{created['id']}").status_code == 404


def test_trainer_routes(client):
    created = client.post("/api/trainers", json={"name": "Tess"}).get_json()
    renamed = client.patch(f"/api/trainers/{created['id']}", json={"name": "Tessa"}).get_json()
    assert renamed["name"] == "Tessa"
    assert [t["name"] for t in client.get("/api/trainers").get_json()] == ["Tessa"]
    assert client.delete(f"/api/trainers/{created['id']}").status_code == 204
