import pytest

from crm.database.config.db import utc_now
from crm.database.models.auth import UserRole
from crm.utils.codes import daily_prefix


@pytest.fixture
def manager(make_user, org):
    return make_user(UserRole.BRANCH_MANAGER, branch=org["north_1"])


@pytest.fixture
def event(client, manager, headers_for):
    response = client.post(
        "/api/v1/events",
        json={"name": "UK Education Fair", "type": "fair", "date": "2025-03-07", "venue": "Pearl Hall"},
        headers=headers_for(manager),
    )
    assert response.status_code == 201, response.text
    return response.json()


def _register(client, headers, event_id, **overrides):
    payload = {"event_id": event_id, "name": "Usman Tariq", "email": "usman@acme-edu.com", "number": "03001112222"}
    payload.update(overrides)
    return client.post("/api/v1/event-registrations", json=payload, headers=headers)


def test_event_takes_creator_branch(event, org):
    assert event["branch_id"] == str(org["north_1"].id)
    assert event["region_id"] == str(org["north"].id)
    assert event["date"] == "2025-03-07"


def test_registration_gets_code_and_event_attachment(client, event, manager, org, headers_for):
    response = _register(client, headers_for(manager), event["id"])

    assert response.status_code == 201, response.text
    registration = response.json()
    assert registration["registration_code"] == f"{daily_prefix('EVT', utc_now().date())}0001"
    assert registration["branch_id"] == str(org["north_1"].id)
    assert registration["region_id"] == str(org["north"].id)
    assert registration["status"] == "attending"


def test_registration_needs_email_or_number(client, event, manager, headers_for):
    response = _register(client, headers_for(manager), event["id"], email=None, number=None)
    assert response.status_code == 400


@pytest.mark.parametrize(
    "duplicate",
    [
        {"email": "USMAN@acme-edu.com", "number": "03009999999"},
        {"email": "other@acme-edu.com", "number": "03001112222"},
    ],
)
def test_duplicate_registration_conflicts(client, event, manager, headers_for, duplicate):
    headers = headers_for(manager)
    _register(client, headers, event["id"])

    response = _register(client, headers, event["id"], name="Someone Else", **duplicate)

    assert response.status_code == 409


def test_same_person_may_register_for_another_event(client, event, manager, headers_for):
    headers = headers_for(manager)
    other = client.post("/api/v1/events", json={"name": "Canada Webinar"}, headers=headers).json()

    _register(client, headers, event["id"])
    assert _register(client, headers, other["id"]).status_code == 201


def test_registration_for_hidden_event_is_rejected(client, event, make_user, org, headers_for):
    outsider = make_user(UserRole.BRANCH_MANAGER, branch=org["south_1"])

    response = _register(client, headers_for(outsider), event["id"])

    assert response.status_code == 400
    assert response.json()["detail"] == "Event not found"


def test_event_registrations_listing(client, event, manager, headers_for):
    headers = headers_for(manager)
    _register(client, headers, event["id"])
    _register(client, headers, event["id"], name="Maryam Ali", email="maryam@acme-edu.com", number=None)

    response = client.get(f"/api/v1/events/{event['id']}/registrations", headers=headers)
    searched = client.get("/api/v1/event-registrations", params={"q": "maryam"}, headers=headers)

    assert sorted(r["name"] for r in response.json()) == ["Maryam Ali", "Usman Tariq"]
    assert [r["name"] for r in searched.json()] == ["Maryam Ali"]


def test_convert_registration_to_lead(client, event, make_user, org, headers_for):
    counselor = make_user(UserRole.COUNSELOR, branch=org["north_1"])
    headers = headers_for(counselor)
    registration = _register(client, headers, event["id"], city="Lahore").json()

    response = client.post(
        f"/api/v1/event-registrations/{registration['id']}/convert-to-lead", headers=headers
    )

    assert response.status_code == 201, response.text
    lead = response.json()
    assert lead["name"] == "Usman Tariq"
    assert lead["email"] == "usman@acme-edu.com"
    assert lead["phone"] == "03001112222"
    assert lead["city"] == "Lahore"
    assert lead["counsellor_id"] == str(counselor.id)
    assert lead["branch_id"] == str(org["north_1"].id)

    refreshed = client.get(f"/api/v1/event-registrations/{registration['id']}", headers=headers).json()
    assert refreshed["lead_id"] == lead["id"]

    again = client.post(
        f"/api/v1/event-registrations/{registration['id']}/convert-to-lead", headers=headers
    )
    assert again.status_code == 409


def test_registration_without_email_cannot_become_lead(client, event, manager, headers_for):
    headers = headers_for(manager)
    registration = _register(client, headers, event["id"], email=None).json()

    response = client.post(
        f"/api/v1/event-registrations/{registration['id']}/convert-to-lead", headers=headers
    )

    assert response.status_code == 400


def test_moving_event_moves_registrations(client, event, manager, admin, org, headers_for):
    _register(client, headers_for(manager), event["id"])

    response = client.patch(
        f"/api/v1/events/{event['id']}",
        json={"branch_id": str(org["south_1"].id)},
        headers=headers_for(admin),
    )

    assert response.status_code == 200
    assert response.json()["region_id"] == str(org["south"].id)
    assert client.get("/api/v1/event-registrations", headers=headers_for(manager)).json() == []
    moved = client.get(f"/api/v1/events/{event['id']}/registrations", headers=headers_for(admin)).json()
    assert [r["branch_id"] for r in moved] == [str(org["south_1"].id)]


def test_delete_event_removes_registrations(client, event, manager, headers_for):
    headers = headers_for(manager)
    registration = _register(client, headers, event["id"]).json()

    assert client.delete(f"/api/v1/events/{event['id']}", headers=headers).status_code == 204
    assert client.get(
        f"/api/v1/event-registrations/{registration['id']}", headers=headers
    ).status_code == 404


def test_event_name_cannot_be_nulled(client, event, manager, headers_for):
    response = client.patch(f"/api/v1/events/{event['id']}", json={"name": None}, headers=headers_for(manager))
    assert response.status_code == 400


@pytest.mark.parametrize("field", ["name", "status"])
def test_registration_required_fields_cannot_be_nulled(client, event, manager, headers_for, field):
    headers = headers_for(manager)
    registration = _register(client, headers, event["id"]).json()

    response = client.patch(
        f"/api/v1/event-registrations/{registration['id']}", json={field: None}, headers=headers
    )

    assert response.status_code == 400


def test_update_cannot_remove_the_last_contact(client, event, manager, headers_for):
    headers = headers_for(manager)
    registration = _register(client, headers, event["id"], number=None).json()
    url = f"/api/v1/event-registrations/{registration['id']}"

    response = client.patch(url, json={"email": None}, headers=headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Either email or number is required"
    assert client.get(url, headers=headers).json()["email"] == "usman@acme-edu.com"


def test_update_may_swap_one_contact_for_another(client, event, manager, headers_for):
    headers = headers_for(manager)
    registration = _register(client, headers, event["id"], number=None).json()

    response = client.patch(
        f"/api/v1/event-registrations/{registration['id']}",
        json={"email": None, "number": "03214445555"},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["email"] is None
    assert response.json()["number"] == "03214445555"


def test_registrations_are_listed_newest_first(client, event, manager, headers_for):
    headers = headers_for(manager)
    for index in range(3):
        _register(
            client, headers, event["id"],
            name=f"Guest {index}", email=f"guest{index}@acme-edu.com", number=f"0300000000{index}",
        )

    listed = client.get(
        "/api/v1/event-registrations", params={"event_id": event["id"]}, headers=headers
    ).json()

    assert [r["name"] for r in listed] == ["Guest 2", "Guest 1", "Guest 0"]
    assert [r["registration_code"][-4:] for r in listed] == ["0003", "0002", "0001"]
