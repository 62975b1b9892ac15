"""Integration tests for the issue routes."""

import uuid

import pytest
from fastapi.testclient import TestClient

from tests.conftest import login


def create(client: TestClient, headers: dict[str, str], **fields) -> dict:
    response = client.post("/issues", json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestIssueRoutes:
    def test_requires_authentication(self, client: TestClient) -> None:
        assert client.get("/issues").status_code == 401
        assert client.post("/issues", json={"title": "Fix login bug"}).status_code == 401

    def test_create_sets_creator_from_token(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        data = create(client, auth_headers, title="Fix login bug", description="Safari only", priority="High")

        issue = data["issue"]
        assert issue["title"] == "Fix login bug"
        assert issue["description"] == "Safari only"
        assert issue["priority"] == "High"
        assert issue["status"] == "Open"
        assert issue["created_by"] == "alice@example.com"
        assert issue["assigned_to"] is None
        assert issue["created_at"] is not None
        assert issue["allowed_statuses"] == ["Open", "In Progress"]
        assert data["similar_issues"] == []

    def test_create_rejects_blank_title(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post("/issues", json={"title": "   "}, headers=auth_headers)

        assert response.status_code == 422

    def test_create_rejects_unknown_priority(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post("/issues", json={"title": "Fix login bug", "priority": "Urgent"}, headers=auth_headers)

        assert response.status_code == 422

    def test_duplicate_warning_and_forbidden_transition(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        first = create(client, auth_headers, title="Fix login bug")
        assert first["similar_issues"] == []
        first_id = first["issue"]["uuid"]

        second = create(client, auth_headers, title="Fix login bug now")
        assert [issue["uuid"] for issue in second["similar_issues"]] == [first_id]
        assert second["similar_issues"][0]["status"] == "Open"
        assert second["similar_issues"][0]["priority"] == "Medium"

        response = client.patch(f"/issues/{first_id}", json={"status": "Done"}, headers=auth_headers)
        assert response.status_code == 409
        assert response.json() == {
            "detail": "cannot move directly from Open to Done",
            "current_status": "Open",
            "requested_status": "Done",
        }

        response = client.get(f"/issues/{first_id}", headers=auth_headers)
        assert response.json()["status"] == "Open"

    def test_status_workflow(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        issue_id = create(client, auth_headers, title="Fix login bug")["issue"]["uuid"]

        for requested in ["In Progress", "Done", "In Progress", "Open"]:
            response = client.patch(f"/issues/{issue_id}", json={"status": requested}, headers=auth_headers)
            assert response.status_code == 200
            assert response.json()["status"] == requested

    def test_reassign(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        issue_id = create(client, auth_headers, title="Fix login bug")["issue"]["uuid"]

        response = client.patch(f"/issues/{issue_id}", json={"assigned_to": "bob@example.com"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["assigned_to"] == "bob@example.com"

    def test_other_users_see_creator(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        issue_id = create(client, auth_headers, title="Fix login bug")["issue"]["uuid"]
        bob = {"Authorization": f"Bearer {login(client, 'bob@example.com')}"}

        response = client.patch(f"/issues/{issue_id}", json={"status": "In Progress"}, headers=bob)

        assert response.status_code == 200
        assert response.json()["created_by"] == "alice@example.com"

    def test_list_filters_are_a_conjunction(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        create(client, auth_headers, title="Open low", priority="Low")
        open_high = create(client, auth_headers, title="Open high", priority="High")["issue"]["uuid"]
        done_low = create(client, auth_headers, title="Done low", priority="Low")["issue"]["uuid"]
        done_high = create(client, auth_headers, title="Done high", priority="High")["issue"]["uuid"]
        for issue_id in (done_low, done_high):
            client.patch(f"/issues/{issue_id}", json={"status": "In Progress"}, headers=auth_headers)
            client.patch(f"/issues/{issue_id}", json={"status": "Done"}, headers=auth_headers)

        response = client.get("/issues", params={"status": "Open", "priority": "High"}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [issue["uuid"] for issue in data["issues"]] == [open_high]
        assert data["status_filter"] == "Open"
        assert data["priority_filter"] == "High"

        response = client.get("/issues", headers=auth_headers)
        assert response.json()["total"] == 4
        assert response.json()["status_filter"] == "All"

    def test_back_to_back_issues_listed_newest_first(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        titles = [f"Issue number {n}" for n in range(6)]
        for title in titles:
            create(client, auth_headers, title=title)

        response = client.get("/issues", headers=auth_headers)

        assert response.status_code == 200
        assert [issue["title"] for issue in response.json()["issues"]] == list(reversed(titles))

        similar = client.get("/issues/similar", params={"title": "issue number"}, headers=auth_headers)
        assert [issue["title"] for issue in similar.json()["similar_issues"]] == list(reversed(titles))

    def test_list_rejects_unknown_filter(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.get("/issues", params={"status": "Closed"}, headers=auth_headers)

        assert response.status_code == 400

    @pytest.mark.parametrize(("title", "expected"), [("login", 1), ("LOGIN BUG ", 1), ("lo", 0), ("signup", 0)])
    def test_similar_endpoint(
        self, client: TestClient, auth_headers: dict[str, str], title: str, expected: int
    ) -> None:
        create(client, auth_headers, title="Fix login bug")

        response = client.get("/issues/similar", params={"title": title}, headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["similar_issues"]) == expected

    def test_delete(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        issue_id = create(client, auth_headers, title="Fix login bug")["issue"]["uuid"]

        assert client.delete(f"/issues/{issue_id}", headers=auth_headers).status_code == 204
        assert client.get(f"/issues/{issue_id}", headers=auth_headers).status_code == 404
        assert client.delete(f"/issues/{issue_id}", headers=auth_headers).status_code == 404

    def test_missing_issue(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        missing = uuid.uuid4()

        assert client.get(f"/issues/{missing}", headers=auth_headers).status_code == 404
        response = client.patch(f"/issues/{missing}", json={"status": "Done"}, headers=auth_headers)
        assert response.status_code == 404
