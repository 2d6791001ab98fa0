"""Tests for peer evaluations of completed assignments."""
import pytest

from tests.conftest import add_member, create_test_group, create_test_task, register_user


@pytest.fixture
def finished_chore(client):
    """A group of three where the doer has completed an assignment."""
    owner = register_user(client, name="Owner")
    doer = register_user(client, name="Doer")
    peer = register_user(client, name="Peer")
    group = create_test_group(client, owner)
    doer_membership = add_member(client, owner, group, doer)
    add_member(client, owner, group, peer)
    task = create_test_task(client, owner, group)
    assignment = client.post(
        f"/api/v1/tasks/{task['task_id']}/assignments",
        json={"membership_id": doer_membership["membership_id"], "completed_date": "2024-05-01"},
        headers=owner["headers"],
    ).json()
    return {"owner": owner, "doer": doer, "peer": peer, "group": group, "task": task, "assignment": assignment}


def _evaluate(client, evaluator, assignment, score=4, **fields):
    return client.post(
        "/api/v1/evaluations/",
        json={"assignment_id": assignment["assignment_id"], "score": score, **fields},
        headers=evaluator["headers"],
    )


class TestCreateEvaluation:
    def test_peer_evaluates(self, client, finished_chore):
        f = finished_chore
        resp = _evaluate(client, f["peer"], f["assignment"], score=5, feedback="Spotless")
        assert resp.status_code == 201
        body = resp.json()
        assert body["evaluator_id"] == f["peer"]["user_id"]
        assert body["score"] == 5
        assert body["feedback"] == "Spotless"

    def test_same_evaluator_twice(self, client, finished_chore):
        """E scores X twice → rejected; F scoring X succeeds."""
        f = finished_chore
        assert _evaluate(client, f["peer"], f["assignment"]).status_code == 201

        resp = _evaluate(client, f["peer"], f["assignment"], score=2)
        assert resp.status_code == 409
        assert resp.json()["error"] == "duplicate_evaluation"

        assert _evaluate(client, f["owner"], f["assignment"]).status_code == 201

    def test_unfinished_assignment(self, client, finished_chore):
        f = finished_chore
        other_task = create_test_task(client, f["owner"], f["group"], name="Laundry")
        membership = client.get(
            f"/api/v1/memberships/?group_id={f['group']['group_id']}", headers=f["owner"]["headers"]
        ).json()[0]
        pending = client.post(
            f"/api/v1/tasks/{other_task['task_id']}/assignments",
            json={"membership_id": membership["membership_id"]},
            headers=f["owner"]["headers"],
        ).json()
        resp = _evaluate(client, f["peer"], pending)
        assert resp.status_code == 422
        assert resp.json()["error"] == "assignment_not_completed"

    @pytest.mark.parametrize("score", [0, 6])
    def test_score_out_of_range(self, client, finished_chore, score):
        f = finished_chore
        assert _evaluate(client, f["peer"], f["assignment"], score=score).status_code == 422

    def test_feedback_too_long(self, client, finished_chore):
        f = finished_chore
        resp = _evaluate(client, f["peer"], f["assignment"], feedback="x" * 101)
        assert resp.status_code == 422

    def test_outsider_cannot_evaluate(self, client, finished_chore):
        f = finished_chore
        outsider = register_user(client, name="Outsider")
        resp = _evaluate(client, outsider, f["assignment"])
        assert resp.status_code == 403
        assert resp.json()["error"] == "not_a_member"

    def test_unknown_assignment(self, client, finished_chore):
        f = finished_chore
        resp = _evaluate(client, f["peer"], {"assignment_id": "00000000-0000-0000-0000-000000000000"})
        assert resp.status_code == 404


class TestEvaluationAccess:
    def test_listing_is_scoped_to_my_groups(self, client, finished_chore):
        f = finished_chore
        _evaluate(client, f["peer"], f["assignment"])

        outsider = register_user(client, name="Outsider")
        assert client.get("/api/v1/evaluations/", headers=outsider["headers"]).json() == []

        resp = client.get("/api/v1/evaluations/", headers=f["doer"]["headers"])
        assert len(resp.json()) == 1

        resp = client.get(
            f"/api/v1/evaluations/?assignment_id={f['assignment']['assignment_id']}",
            headers=f["doer"]["headers"],
        )
        assert len(resp.json()) == 1

    def test_member_updates_evaluation(self, client, finished_chore):
        f = finished_chore
        evaluation = _evaluate(client, f["peer"], f["assignment"]).json()
        resp = client.patch(
            f"/api/v1/evaluations/{evaluation['evaluation_id']}",
            json={"score": 3},
            headers=f["peer"]["headers"],
        )
        assert resp.status_code == 200
        assert resp.json()["score"] == 3

    def test_score_cannot_be_nulled(self, client, finished_chore):
        f = finished_chore
        evaluation = _evaluate(client, f["peer"], f["assignment"], score=4, feedback="Good").json()
        url = f"/api/v1/evaluations/{evaluation['evaluation_id']}"
        resp = client.patch(url, json={"score": None}, headers=f["peer"]["headers"])
        assert resp.status_code == 422

        resp = client.patch(url, json={"feedback": None}, headers=f["peer"]["headers"])
        assert resp.status_code == 200
        assert resp.json()["score"] == 4
        assert resp.json()["feedback"] is None

    def test_only_admin_deletes(self, client, finished_chore):
        f = finished_chore
        evaluation = _evaluate(client, f["peer"], f["assignment"]).json()
        url = f"/api/v1/evaluations/{evaluation['evaluation_id']}"
        assert client.delete(url, headers=f["peer"]["headers"]).status_code == 403
        assert client.delete(url, headers=f["owner"]["headers"]).status_code == 204
        assert client.get(url, headers=f["owner"]["headers"]).status_code == 404

    def test_deleting_assignment_removes_evaluations(self, client, finished_chore):
        f = finished_chore
        evaluation = _evaluate(client, f["peer"], f["assignment"]).json()
        resp = client.delete(
            f"/api/v1/assignments/{f['assignment']['assignment_id']}", headers=f["owner"]["headers"]
        )
        assert resp.status_code == 204
        resp = client.get(f"/api/v1/evaluations/{evaluation['evaluation_id']}", headers=f["owner"]["headers"])
        assert resp.status_code == 404
