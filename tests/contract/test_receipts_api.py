"""Contract tests for receipt endpoints."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi.testclient import TestClient

from sharezin.domain.invite_code import INVITE_CODE_ALPHABET


def as_user(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


def test_create_receipt_returns_201(
    create_receipt: Callable[..., dict[str, Any]],
) -> None:
    body = create_receipt(service_charge_percent="10", cover="15.5")

    assert body["title"] == "Dinner"
    assert body["creator_id"] == "ana"
    assert body["service_charge_percent"] == "10.00"
    assert body["cover"] == "15.50"
    assert body["total"] == "15.50"
    assert body["is_closed"] is False
    assert len(body["invite_code"]) == 6
    assert set(body["invite_code"]) <= set(INVITE_CODE_ALPHABET)
    assert [(p["name"], p["user_id"]) for p in body["participants"]] == [
        ("Ana", "ana")
    ]
    assert body["permissions"] == {
        "is_creator": True,
        "is_participant": True,
        "can_modify_receipt": True,
        "can_add_items": True,
        "can_close_receipt": True,
        "can_close_participation": True,
    }


def test_create_receipt_requires_user_header(client: TestClient) -> None:
    response = client.post(
        "/v1/receipts", json={"title": "Dinner", "creator_name": "Ana"}
    )

    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_REQUIRED"


def test_create_receipt_rejects_out_of_range_service_charge(
    client: TestClient,
) -> None:
    response = client.post(
        "/v1/receipts",
        json={
            "title": "Dinner",
            "creator_name": "Ana",
            "service_charge_percent": "120",
        },
        headers=as_user("ana"),
    )

    assert response.status_code == 400
    assert response.json() == {
        "code": "INVALID_REQUEST",
        "message": "service charge percent must be between 0 and 100",
        "details": {"service_charge_percent": "120"},
    }


def test_create_receipt_rejects_missing_title(client: TestClient) -> None:
    response = client.post(
        "/v1/receipts", json={"creator_name": "Ana"}, headers=as_user("ana")
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_REQUEST"


def test_create_receipt_rejects_sub_cent_cover(client: TestClient) -> None:
    response = client.post(
        "/v1/receipts",
        json={"title": "Dinner", "creator_name": "Ana", "cover": "10.005"},
        headers=as_user("ana"),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_REQUEST"


def test_get_receipt_is_limited_to_members(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
) -> None:
    receipt = create_receipt()

    own = client.get(f"/v1/receipts/{receipt['id']}", headers=as_user("ana"))
    foreign = client.get(f"/v1/receipts/{receipt['id']}", headers=as_user("zoe"))
    missing = client.get("/v1/receipts/does-not-exist", headers=as_user("ana"))

    assert own.status_code == 200
    assert own.json()["id"] == receipt["id"]
    assert foreign.status_code == 403
    assert foreign.json()["code"] == "ACCESS_DENIED"
    assert missing.status_code == 404
    assert missing.json()["code"] == "RECEIPT_NOT_FOUND"


def test_invite_lookup_is_case_insensitive(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
) -> None:
    receipt = create_receipt()

    response = client.get(
        f"/v1/receipts/invite/{receipt['invite_code'].lower()}",
        headers=as_user("bia"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["receipt_id"] == receipt["id"]
    assert body["creator_name"] == "Ana"
    assert body["participant_count"] == 1
    assert body["is_participant"] is False
    assert body["has_pending_request"] is False


def test_invite_lookup_unknown_code_returns_404(client: TestClient) -> None:
    response = client.get("/v1/receipts/invite/ZZZZZZ", headers=as_user("bia"))

    assert response.status_code == 404
    assert response.json()["code"] == "RECEIPT_NOT_FOUND"


def test_list_receipts_filters_by_membership_and_status(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
    join_receipt: Callable[..., dict[str, Any]],
) -> None:
    first = create_receipt(title="Lunch")
    second = create_receipt(title="Dinner")
    create_receipt(creator="carla", creator_name="Carla", title="Other")
    join_receipt(first, "bia", "Bia")
    closed = client.post(
        f"/v1/receipts/{second['id']}/close", headers=as_user("ana")
    )
    assert closed.status_code == 200

    mine = client.get("/v1/receipts", headers=as_user("ana")).json()
    open_only = client.get(
        "/v1/receipts", params={"status": "open"}, headers=as_user("ana")
    ).json()
    bia = client.get("/v1/receipts", headers=as_user("bia")).json()

    assert mine["total"] == 2
    assert {item["title"] for item in mine["items"]} == {"Lunch", "Dinner"}
    assert [item["title"] for item in open_only["items"]] == ["Lunch"]
    assert [item["title"] for item in bia["items"]] == ["Lunch"]
    assert bia["items"][0]["permissions"]["is_creator"] is False


def test_list_receipts_paginates(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
) -> None:
    for index in range(3):
        create_receipt(title=f"Receipt {index}")

    response = client.get(
        "/v1/receipts", params={"limit": 2, "offset": 2}, headers=as_user("ana")
    )

    body = response.json()
    assert response.status_code == 200
    assert body["total"] == 3
    assert body["limit"] == 2
    assert body["offset"] == 2
    assert len(body["items"]) == 1


def test_update_receipt_by_creator_only(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
    join_receipt: Callable[..., dict[str, Any]],
) -> None:
    receipt = create_receipt()
    join_receipt(receipt, "bia", "Bia")

    updated = client.patch(
        f"/v1/receipts/{receipt['id']}",
        json={"title": "Late dinner", "cover": "12"},
        headers=as_user("ana"),
    )
    denied = client.patch(
        f"/v1/receipts/{receipt['id']}",
        json={"title": "Hacked"},
        headers=as_user("bia"),
    )

    assert updated.status_code == 200
    assert updated.json()["title"] == "Late dinner"
    assert updated.json()["total"] == "12.00"
    assert denied.status_code == 403
    assert denied.json() == {
        "code": "CREATOR_ONLY",
        "message": "only the creator can modify the receipt",
    }


def test_closed_receipt_rejects_updates_and_close_is_idempotent(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
) -> None:
    receipt = create_receipt()

    first = client.post(f"/v1/receipts/{receipt['id']}/close", headers=as_user("ana"))
    second = client.post(
        f"/v1/receipts/{receipt['id']}/close", headers=as_user("ana")
    )
    update = client.patch(
        f"/v1/receipts/{receipt['id']}",
        json={"title": "Reopened?"},
        headers=as_user("ana"),
    )

    assert first.json()["is_closed"] is True
    assert first.json()["permissions"]["can_add_items"] is False
    assert second.status_code == 200
    assert second.json()["is_closed"] is True
    assert update.status_code == 409
    assert update.json()["code"] == "RECEIPT_CLOSED"


def test_delete_receipt(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
    join_receipt: Callable[..., dict[str, Any]],
) -> None:
    receipt = create_receipt()
    join_receipt(receipt, "bia", "Bia")
    client.post(
        f"/v1/receipts/{receipt['id']}/items",
        json={"name": "Soda", "price": "5"},
        headers=as_user("bia"),
    )

    denied = client.delete(f"/v1/receipts/{receipt['id']}", headers=as_user("bia"))
    deleted = client.delete(f"/v1/receipts/{receipt['id']}", headers=as_user("ana"))
    after = client.get(f"/v1/receipts/{receipt['id']}", headers=as_user("ana"))

    assert denied.status_code == 403
    assert deleted.status_code == 204
    assert after.status_code == 404


def test_transfer_creator(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
    join_receipt: Callable[..., dict[str, Any]],
) -> None:
    receipt = create_receipt()
    joined = join_receipt(receipt, "bia", "Bia")
    bia_id = next(p["id"] for p in joined["participants"] if p["user_id"] == "bia")
    ana_id = next(p["id"] for p in joined["participants"] if p["user_id"] == "ana")

    to_self = client.put(
        f"/v1/receipts/{receipt['id']}/transfer-creator",
        json={"participant_id": ana_id},
        headers=as_user("ana"),
    )
    response = client.put(
        f"/v1/receipts/{receipt['id']}/transfer-creator",
        json={"participant_id": bia_id},
        headers=as_user("ana"),
    )

    assert to_self.status_code == 409
    assert to_self.json()["code"] == "TRANSFER_TO_SELF"
    assert response.status_code == 200
    body = response.json()
    assert body["creator_id"] == "bia"
    assert body["permissions"]["is_creator"] is False
    assert body["permissions"]["is_participant"] is True


def test_summary_splits_service_charge_by_consumption(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
    join_receipt: Callable[..., dict[str, Any]],
) -> None:
    receipt = create_receipt(service_charge_percent="10", cover="20")
    join_receipt(receipt, "bia", "Bia")
    client.post(
        f"/v1/receipts/{receipt['id']}/items",
        json={"name": "Steak", "price": "100"},
        headers=as_user("ana"),
    )
    client.post(
        f"/v1/receipts/{receipt['id']}/items",
        json={"name": "Salad", "price": "25", "quantity": "2"},
        headers=as_user("bia"),
    )

    response = client.get(
        f"/v1/receipts/{receipt['id']}/summary", headers=as_user("bia")
    )

    assert response.status_code == 200
    body = response.json()
    assert body["items_total"] == "150.00"
    assert body["service_charge"] == "15.00"
    assert body["cover"] == "20.00"
    assert body["total"] == "185.00"
    assert [(p["name"], p["total"]) for p in body["participants"]] == [
        ("Ana", "120.00"),
        ("Bia", "65.00"),
    ]


def test_spending_stats_cover_closed_receipts_only(
    client: TestClient,
    create_receipt: Callable[..., dict[str, Any]],
    join_receipt: Callable[..., dict[str, Any]],
) -> None:
    dinner = create_receipt(
        date="2026-01-10T20:00:00Z", service_charge_percent="10", cover="20"
    )
    join_receipt(dinner, "bia", "Bia")
    lunch = create_receipt(date="2025-12-31T12:00:00Z")
    still_open = create_receipt(date="2026-02-01T12:00:00Z")
    for receipt, user_id, price in [
        (dinner, "ana", "100"),
        (dinner, "bia", "50"),
        (lunch, "ana", "40"),
        (still_open, "ana", "70"),
    ]:
        client.post(
            f"/v1/receipts/{receipt['id']}/items",
            json={"name": "Meal", "price": price},
            headers=as_user(user_id),
        )
    for receipt in (dinner, lunch):
        client.post(f"/v1/receipts/{receipt['id']}/close", headers=as_user("ana"))

    response = client.get(
        "/v1/receipts/stats", params={"year": 2026}, headers=as_user("ana")
    )
    bia_stats = client.get(
        "/v1/receipts/stats", params={"year": 2026}, headers=as_user("bia")
    ).json()

    assert response.status_code == 200
    body = response.json()
    assert body["year"] == 2026
    assert body["by_month"] == [
        {"period": "2025-12", "total": "40.00", "receipt_count": 1},
        {"period": "2026-01", "total": "120.00", "receipt_count": 1},
    ]
    assert body["by_day"] == [
        {"period": "2026-01-10", "total": "120.00", "receipt_count": 1},
    ]
    assert [(r["receipt_id"], r["total"]) for r in body["by_receipt"]] == [
        (dinner["id"], "120.00"),
        (lunch["id"], "40.00"),
    ]
    assert [(r["receipt_id"], r["total"]) for r in bia_stats["by_receipt"]] == [
        (dinner["id"], "65.00")
    ]


def test_spending_stats_requires_user_header(client: TestClient) -> None:
    response = client.get("/v1/receipts/stats")

    assert response.status_code == 401
