"""
End-to-end tests through the HTTP API
"""
import pytest
from fastapi.testclient import TestClient

from conftest import split_total
from judging.main import create_app
from judging.models import Settings


@pytest.fixture
def client(tmp_path):
    with TestClient(create_app(Settings(db_path=str(tmp_path / "api.sqlite")))) as c:
        yield c


@pytest.fixture
def demo(client):
    """Event with two teams and two judges created over HTTP"""
    event = client.post("/events", json={"name": "Demo Day"}).json()["event"]
    teams = [
        client.post(f"/events/{event['id']}/teams", json={"name": name, "description": desc}).json()["team"]
        for name, desc in (("Team A", "Solar kiosks"), ("Team B", None))
    ]
    judges = [
        client.post(f"/events/{event['id']}/judges", json={"name": name}).json()["judge"]
        for name in ("Ada", "Ben")
    ]
    return {"event": event, "teams": teams, "judges": judges}


def _scores(total):
    return [cs.model_dump() for cs in split_total(total)]


def _submit(client, demo, team=0, judge=0, total=80):
    return client.post("/scores", json={
        "event_id": demo["event"]["id"],
        "team_id": demo["teams"][team]["id"],
        "judge_id": demo["judges"][judge]["id"],
        "scores": _scores(total),
        "time_spent_seconds": 300,
    })


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["store_ready"] is True


def test_config_endpoint(client):
    body = client.get("/config").json()
    assert body["poll_interval_seconds"] == 5
    assert body["allow_resubmission"] is False


def test_event_detail_and_rubric(client, demo):
    event_id = demo["event"]["id"]

    detail = client.get(f"/events/{event_id}").json()
    assert detail["event"]["judging_phase"] == "not-started"
    assert [t["name"] for t in detail["teams"]] == ["Team A", "Team B"]
    assert detail["stats"]["teams_by_status"]["waiting"] == 2

    rubric = client.get(f"/events/{event_id}/rubric").json()
    assert rubric["max_total"] == 100
    assert [c["short_name"] for c in rubric["criteria"]] == ["Communication", "Funding", "Presentation", "Cohesion"]


def test_unknown_event_is_404(client):
    response = client.get("/events/event-missing")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_submit_and_duplicate(client, demo):
    response = _submit(client, demo, total=78)
    assert response.status_code == 201
    assert response.json()["receipt"]["total_score"] == 78

    again = _submit(client, demo, total=50)
    assert again.status_code == 409
    assert again.json()["error"] == "duplicate_submission"


def test_submit_validation_error_names_field(client, demo):
    scores = _scores(50)
    scores[2]["score"] = 30

    response = client.post("/scores", json={
        "event_id": demo["event"]["id"],
        "team_id": demo["teams"][0]["id"],
        "judge_id": demo["judges"][0]["id"],
        "scores": scores,
    })

    assert response.status_code == 400
    assert response.json()["field"] == "criteria_scores.presentation"


def test_submit_without_judge(client, demo):
    response = client.post("/scores", json={
        "event_id": demo["event"]["id"],
        "team_id": demo["teams"][0]["id"],
        "scores": _scores(50),
    })
    assert response.status_code == 400
    assert response.json()["field"] == "judge_id"


def test_resubmit_disabled(client, demo):
    _submit(client, demo)
    response = client.put("/scores", json={
        "event_id": demo["event"]["id"],
        "team_id": demo["teams"][0]["id"],
        "judge_id": demo["judges"][0]["id"],
        "scores": _scores(10),
    })
    assert response.status_code == 409
    assert response.json()["error"] == "precondition_failed"


def test_leaderboard_ranks_and_etag(client, demo):
    event_id = demo["event"]["id"]
    _submit(client, demo, team=0, judge=0, total=90)
    _submit(client, demo, team=0, judge=1, total=80)
    _submit(client, demo, team=1, judge=0, total=95)

    response = client.get(f"/events/{event_id}/leaderboard")
    board = response.json()

    assert response.status_code == 200
    assert board["results_mode"] == "live"
    assert [e["team_name"] for e in board["entries"]] == ["Team B", "Team A"]
    assert board["entries"][1]["total_score"] == 170
    assert board["entries"][1]["avg_score"] == 85
    etag = response.headers["etag"]

    unchanged = client.get(f"/events/{event_id}/leaderboard", headers={"If-None-Match": etag})
    assert unchanged.status_code == 304

    _submit(client, demo, team=1, judge=1, total=10)
    changed = client.get(f"/events/{event_id}/leaderboard", headers={"If-None-Match": etag})
    assert changed.status_code == 200
    assert changed.headers["etag"] != etag


def test_team_status_and_phase_flow(client, demo):
    event_id = demo["event"]["id"]
    team_ids = [t["id"] for t in demo["teams"]]

    assert client.patch(f"/events/{event_id}/phase", json={"judging_phase": "in-progress"}).status_code == 200

    first = client.patch(f"/teams/{team_ids[0]}/status", json={"status": "completed"}).json()
    assert first["team"]["status"] == "completed"
    assert first["all_teams_completed"] is False

    blocked = client.patch(f"/events/{event_id}/phase", json={"judging_phase": "ended"})
    assert blocked.status_code == 409
    assert "Team B" in blocked.json()["detail"]

    last = client.patch(f"/teams/{team_ids[1]}/status", json={"status": "completed"}).json()
    assert last["all_teams_completed"] is True

    ended = client.patch(f"/events/{event_id}/phase", json={"judging_phase": "ended"})
    assert ended.status_code == 200
    assert ended.json()["results_mode"] == "final"

    frozen = client.patch(f"/teams/{team_ids[0]}/status", json={"status": "active"})
    assert frozen.status_code == 409

    assert client.get(f"/events/{event_id}/leaderboard").json()["results_mode"] == "final"


def test_invalid_phase_value(client, demo):
    response = client.patch(f"/events/{demo['event']['id']}/phase", json={"judging_phase": "paused"})
    assert response.status_code == 400
    assert response.json()["field"] == "judging_phase"


def test_completed_team_rejects_scores(client, demo):
    client.patch(f"/teams/{demo['teams'][0]['id']}/status", json={"status": "completed"})
    response = _submit(client, demo)
    assert response.status_code == 409


def test_roster_and_progress(client, demo):
    event_id = demo["event"]["id"]
    judge_id = demo["judges"][0]["id"]
    _submit(client, demo, team=0, judge=0, total=60)

    roster = client.get(f"/events/{event_id}/teams", params={"judge_id": judge_id}).json()["teams"]
    assert [row["has_current_judge_scored"] for row in roster] == [True, False]
    assert roster[0]["description_preview"] == "Solar kiosks"

    progress = client.get(f"/events/{event_id}/my-progress", params={"judge_id": judge_id}).json()
    (entry,) = progress["scored_teams"]
    assert entry["team_name"] == "Team A"
    assert entry["breakdown"]["communication"] == 25


def test_score_matrix(client, demo):
    event_id = demo["event"]["id"]
    _submit(client, demo, team=1, judge=1, total=42)

    body = client.get(f"/events/{event_id}/teams/scores").json()
    team_b = next(row for row in body["teams"] if row["team_name"] == "Team B")

    assert [cell["score"] for cell in team_b["scores"]] == [None, 42]
    assert [j["name"] for j in body["judges"]] == ["Ada", "Ben"]


def test_compare(client, demo):
    event_id = demo["event"]["id"]
    a, b = (t["id"] for t in demo["teams"])
    _submit(client, demo, team=0, judge=0, total=90)
    _submit(client, demo, team=1, judge=0, total=70)

    body = client.get(f"/events/{event_id}/compare", params={"team1": a, "team2": b}).json()
    assert body["score_gap"] == 20
    assert body["agreement"]["team1_preferred"] == 1

    same = client.get(f"/events/{event_id}/compare", params={"team1": a, "team2": a})
    assert same.status_code == 400


def test_duplicate_team_name_rejected(client, demo):
    response = client.post(f"/events/{demo['event']['id']}/teams", json={"name": "Team A"})
    assert response.status_code == 400


@pytest.mark.parametrize("bad_score", [True, 10.5])
def test_non_integer_score_is_validation_error(client, demo, bad_score):
    """Bools and fractions are rejected with the engine's error body, nothing stored"""
    scores = _scores(50)
    scores[0]["score"] = bad_score

    response = client.post("/scores", json={
        "event_id": demo["event"]["id"],
        "team_id": demo["teams"][0]["id"],
        "judge_id": demo["judges"][0]["id"],
        "scores": scores,
    })

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert body["field"] == "scores.0.score"
    assert client.get(f"/events/{demo['event']['id']}").json()["stats"]["total_submissions"] == 0


def test_event_stats_insights(client, demo):
    _submit(client, demo, team=0, judge=0, total=80)
    _submit(client, demo, team=1, judge=0, total=40)

    stats = client.get(f"/events/{demo['event']['id']}").json()["stats"]

    assert stats["total_submissions"] == 2
    assert stats["total_judges"] == 1
    assert stats["average_criterion_score"] == 15
