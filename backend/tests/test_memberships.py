"""Tests for the membership endpoints."""
from tests.conftest import add_member, create_test_group, membership_of, register_user


class TestMembershipCRUD:
    """Create / show / list / update / delete."""

    def test_admin_adds_member(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        group = create_test_group(client, owner, name="Tanaka House")
        m = add_member(client, owner, group, member)
        assert m["role"] == "member"
        assert m["active"] is True
        assert m["workload_ratio"] is None
        assert m["user_name"] == "Member"
        assert m["group_name"] == "Tanaka House"
        assert m["assignments_count"] == 0

    def test_member_cannot_add_members(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        newcomer = register_user(client, name="Newcomer")
        group = create_test_group(client, owner)
        add_member(client, owner, group, member)
        resp = client.post("/api/v1/memberships/", json={
            "user_id": newcomer["user_id"],
            "group_id": group["group_id"],
        }, headers=member["headers"])
        assert resp.status_code == 403
        assert resp.json()["error"] == "insufficient_role"

    def test_duplicate_membership(self, client):
        owner = register_user(client, name="Owner")
        group = create_test_group(client, owner)
        resp = client.post("/api/v1/memberships/", json={
            "user_id": owner["user_id"],
            "group_id": group["group_id"],
        }, headers=owner["headers"])
        assert resp.status_code == 409
        assert resp.json()["error"] == "duplicate_membership"

    def test_unknown_group(self, client):
        owner = register_user(client, name="Owner")
        resp = client.post("/api/v1/memberships/", json={
            "user_id": owner["user_id"],
            "group_id": "00000000-0000-0000-0000-000000000000",
        }, headers=owner["headers"])
        assert resp.status_code == 404

    def test_unknown_user(self, client):
        owner = register_user(client, name="Owner")
        group = create_test_group(client, owner)
        resp = client.post("/api/v1/memberships/", json={
            "user_id": "00000000-0000-0000-0000-000000000000",
            "group_id": group["group_id"],
        }, headers=owner["headers"])
        assert resp.status_code == 404

    def test_show_membership(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        outsider = register_user(client, name="Outsider")
        group = create_test_group(client, owner)
        m = add_member(client, owner, group, member)

        resp = client.get(f"/api/v1/memberships/{m['membership_id']}", headers=member["headers"])
        assert resp.status_code == 200
        assert resp.json()["membership_id"] == m["membership_id"]

        resp = client.get(f"/api/v1/memberships/{m['membership_id']}", headers=outsider["headers"])
        assert resp.status_code == 403

    def test_membership_not_found(self, client):
        owner = register_user(client, name="Owner")
        resp = client.get(
            "/api/v1/memberships/00000000-0000-0000-0000-000000000000", headers=owner["headers"]
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    def test_member_cannot_update(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        group = create_test_group(client, owner)
        m = add_member(client, owner, group, member)
        resp = client.patch(
            f"/api/v1/memberships/{m['membership_id']}", json={"active": False}, headers=member["headers"]
        )
        assert resp.status_code == 403

    def test_deactivate_and_reactivate_member(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        group = create_test_group(client, owner)
        m = add_member(client, owner, group, member)
        url = f"/api/v1/memberships/{m['membership_id']}"
        assert client.patch(url, json={"active": False}, headers=owner["headers"]).json()["active"] is False
        assert client.patch(url, json={"active": True}, headers=owner["headers"]).json()["active"] is True

    def test_active_cannot_be_nulled(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        group = create_test_group(client, owner)
        m = add_member(client, owner, group, member)
        url = f"/api/v1/memberships/{m['membership_id']}"
        resp = client.patch(url, json={"active": None}, headers=owner["headers"])
        assert resp.status_code == 422
        assert client.get(url, headers=owner["headers"]).json()["active"] is True

    def test_workload_ratio_can_be_cleared(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        group = create_test_group(client, owner)
        m = add_member(client, owner, group, member)
        url = f"/api/v1/memberships/{m['membership_id']}"
        resp = client.patch(url, json={"workload_ratio": None}, headers=owner["headers"])
        assert resp.status_code == 200
        assert resp.json()["workload_ratio"] is None

    def test_delete_member(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        group = create_test_group(client, owner)
        m = add_member(client, owner, group, member)
        resp = client.delete(f"/api/v1/memberships/{m['membership_id']}", headers=owner["headers"])
        assert resp.status_code == 204
        resp = client.get(f"/api/v1/groups/{group['group_id']}", headers=member["headers"])
        assert resp.status_code == 403
        assert resp.json()["error"] == "not_a_member"


class TestMembershipListing:
    def test_list_for_group(self, client):
        owner = register_user(client, name="Owner")
        member = register_user(client, name="Member")
        group = create_test_group(client, owner)
        add_member(client, owner, group, member)
        resp = client.get(f"/api/v1/memberships/?group_id={group['group_id']}", headers=member["headers"])
        assert resp.status_code == 200
        assert {m["user_name"] for m in resp.json()} == {"Owner", "Member"}

    def test_list_for_foreign_group(self, client):
        owner = register_user(client, name="Owner")
        outsider = register_user(client, name="Outsider")
        group = create_test_group(client, owner)
        resp = client.get(f"/api/v1/memberships/?group_id={group['group_id']}", headers=outsider["headers"])
        assert resp.status_code == 403

    def test_list_without_group_is_scoped(self, client):
        alice = register_user(client, name="Alice")
        bob = register_user(client, name="Bob")
        mine = create_test_group(client, alice, name="Mine")
        create_test_group(client, bob, name="Theirs")
        resp = client.get("/api/v1/memberships/", headers=alice["headers"])
        assert resp.status_code == 200
        assert {m["group_id"] for m in resp.json()} == {mine["group_id"]}

    def test_assignment_counts(self, client):
        owner = register_user(client, name="Owner")
        group = create_test_group(client, owner)
        me = membership_of(client, owner, group, owner)
        task = client.post(
            f"/api/v1/groups/{group['group_id']}/tasks", json={"name": "Dishes"}, headers=owner["headers"]
        ).json()
        client.post(f"/api/v1/tasks/{task['task_id']}/assignments", json={
            "membership_id": me["membership_id"],
            "completed_date": "2024-05-01",
        }, headers=owner["headers"])

        refreshed = membership_of(client, owner, group, owner)
        assert refreshed["assignments_count"] == 1
        assert refreshed["completed_assignments_count"] == 1
