"""Goals, macro plans and progress check-ins."""

import pytest

from fitcoach.services.tracking_service import macro_percentages


@pytest.fixture
def owner(make_user):
    return make_user(email="owner@example.com")


@pytest.fixture
def goal_id(client, owner, auth_headers):
    response = client.post(
        "/api/goals",
        headers=auth_headers(owner),
        json={
            "goal_type": "weight_loss",
            "current_weight": 200,
            "target_weight": 180,
            "activity_level": "moderate",
            "preferences": {"diet": "vegetarian"},
        },
    )
    assert response.status_code == 200
    return response.json()["id"]


def test_macro_percentages() -> None:
    assert macro_percentages(2000, 150, 200, 67) == (30, 40, 30)


class TestGoals:

    def test_goal_is_listed_for_owner_only(self, client, owner, goal_id, make_user, auth_headers) -> None:
        mine = client.get("/api/goals", headers=auth_headers(owner)).json()
        assert [g["id"] for g in mine] == [goal_id]
        assert mine[0]["preferences"] == {"diet": "vegetarian"}
        assert mine[0]["is_active"] is True

        stranger = make_user(email="stranger@example.com")
        assert client.get("/api/goals", headers=auth_headers(stranger)).json() == []

    def test_unknown_goal_type(self, client, owner, auth_headers) -> None:
        response = client.post(
            "/api/goals", headers=auth_headers(owner), json={"goal_type": "flexibility"}
        )

        assert response.status_code == 400


class TestMacroPlans:

    def test_percentages_are_derived(self, client, owner, goal_id, auth_headers) -> None:
        response = client.post(
            "/api/macros",
            headers=auth_headers(owner),
            json={
                "goal_id": goal_id,
                "daily_calories": 2000,
                "protein_grams": 150,
                "carb_grams": 200,
                "fat_grams": 67,
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["protein_percent"], body["carb_percent"], body["fat_percent"]) == (30, 40, 30)
        assert body["meals_per_day"] == 3

    def test_foreign_goal_is_not_found(self, client, goal_id, make_user, auth_headers) -> None:
        stranger = make_user(email="stranger@example.com")

        response = client.post(
            "/api/macros",
            headers=auth_headers(stranger),
            json={
                "goal_id": goal_id,
                "daily_calories": 2000,
                "protein_grams": 150,
                "carb_grams": 200,
                "fat_grams": 67,
            },
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Goal not found"


class TestProgress:

    def test_record_and_filter_by_goal(self, client, owner, goal_id, auth_headers) -> None:
        headers = auth_headers(owner)
        other_goal = client.post(
            "/api/goals", headers=headers, json={"goal_type": "strength"}
        ).json()["id"]

        created = client.post(
            "/api/progress",
            headers=headers,
            json={"goal_id": goal_id, "weight": 195, "mood": "good", "energy_level": 7},
        )
        client.post("/api/progress", headers=headers, json={"goal_id": other_goal, "weight": 194})

        assert created.status_code == 200
        assert created.json()["workout_completed"] is False

        filtered = client.get(f"/api/progress?goal_id={goal_id}", headers=headers).json()
        assert [p["weight"] for p in filtered] == [195]
        assert len(client.get("/api/progress", headers=headers).json()) == 2

    def test_energy_level_bounds(self, client, owner, goal_id, auth_headers) -> None:
        response = client.post(
            "/api/progress",
            headers=auth_headers(owner),
            json={"goal_id": goal_id, "energy_level": 11},
        )

        assert response.status_code == 400
