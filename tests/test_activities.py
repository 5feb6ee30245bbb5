from crm import settings
from crm.database.config.db import utc_now
from crm.database.models.auth import UserRole
from crm.database.models.student import Student
from crm.utils import codes
from crm.utils.activity import format_field_name
from crm.utils.codes import daily_prefix


def test_format_field_name():
    assert format_field_name("target_country") == "Target Country"
    assert format_field_name("targetCountry") == "Target Country"
    assert format_field_name("elt") == "Elt"


def test_timeline_is_newest_first(client, admin, headers_for):
    headers = headers_for(admin)
    lead = client.post(
        "/api/v1/leads", json={"name": "Kamran Butt", "email": "kamran@acme-edu.com"}, headers=headers
    ).json()
    client.patch(f"/api/v1/leads/{lead['id']}", json={"status": "contacted"}, headers=headers)
    client.patch(f"/api/v1/leads/{lead['id']}", json={"status": "qualified"}, headers=headers)

    timeline = client.get(f"/api/v1/activities/lead/{lead['id']}", headers=headers).json()

    assert [entry["new_value"] for entry in timeline] == ["qualified", "contacted", None]
    assert timeline[-1]["activity_type"] == "created"
    assert timeline[-1]["user_id"] == str(admin.id)


def test_timeline_of_hidden_record_is_not_found(client, make_user, org, headers_for):
    owner = make_user(UserRole.COUNSELOR, branch=org["north_1"])
    other = make_user(UserRole.COUNSELOR, branch=org["north_1"])
    lead = client.post(
        "/api/v1/leads", json={"name": "Kamran Butt", "email": "kamran@acme-edu.com"}, headers=headers_for(owner)
    ).json()

    response = client.get(f"/api/v1/activities/lead/{lead['id']}", headers=headers_for(other))

    assert response.status_code == 404
    assert response.json()["detail"] == "Lead not found"


def test_unknown_entity_type(client, admin, headers_for):
    response = client.get(
        "/api/v1/activities/invoice/00000000-0000-0000-0000-000000000001", headers=headers_for(admin)
    )
    assert response.status_code == 400


def test_code_exhaustion_is_a_server_error(client, admin, db_session, headers_for, monkeypatch):
    monkeypatch.setattr(codes, "latest_code", lambda *args, **kwargs: None)
    monkeypatch.setattr(settings, "CODE_EXISTENCE_CHECKS", 0)
    monkeypatch.setattr(settings, "CODE_INSERT_ATTEMPTS", 1)
    taken = f"{daily_prefix('STD', utc_now().date())}001"
    db_session.add(Student(student_code=taken, name="Existing", email="existing@acme-edu.com"))
    db_session.commit()

    response = client.post(
        "/api/v1/students",
        json={"name": "Imran Qureshi", "email": "imran@acme-edu.com"},
        headers=headers_for(admin),
    )

    assert response.status_code == 500
    assert "after 1 attempts" in response.json()["detail"]
