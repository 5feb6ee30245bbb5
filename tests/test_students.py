import pytest

from crm.database.config.db import utc_now
from crm.database.models.auth import UserRole
from crm.utils.codes import daily_prefix


@pytest.fixture
def counselor(make_user, org):
    return make_user(UserRole.COUNSELOR, branch=org["north_1"])


def _create_student(client, headers, **overrides):
    payload = {"name": "Imran Qureshi", "email": "imran@acme-edu.com", "target_country": "Australia"}
    payload.update(overrides)
    response = client.post("/api/v1/students", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def _create_lead(client, headers, **overrides):
    payload = {
        "name": "Sana Malik",
        "email": "sana@acme-edu.com",
        "phone": "+92 300 1234567",
        "country": "Canada",
        "program": "BSc Nursing",
        "elt": "IELTS 7.0",
    }
    payload.update(overrides)
    return client.post("/api/v1/leads", json=payload, headers=headers).json()


def test_students_get_daily_codes(client, counselor, headers_for):
    headers = headers_for(counselor)
    prefix = daily_prefix("STD", utc_now().date())

    first = _create_student(client, headers)
    second = _create_student(client, headers, email="second@acme-edu.com")

    assert first["student_code"] == f"{prefix}001"
    assert second["student_code"] == f"{prefix}002"
    assert first["counsellor_id"] == str(counselor.id)
    assert first["status"] == "active"


def test_search_students(client, admin, headers_for):
    headers = headers_for(admin)
    _create_student(client, headers)
    _create_student(client, headers, name="Hina Baig", email="hina@acme-edu.com", target_program="LLM")

    response = client.get("/api/v1/students", params={"q": "llm"}, headers=headers)

    assert [s["name"] for s in response.json()] == ["Hina Baig"]


def test_convert_lead_to_student(client, counselor, org, headers_for):
    headers = headers_for(counselor)
    lead = _create_lead(client, headers)

    response = client.post(f"/api/v1/students/convert/{lead['id']}", json={}, headers=headers)

    assert response.status_code == 201, response.text
    student = response.json()
    assert student["lead_id"] == lead["id"]
    assert student["name"] == "Sana Malik"
    assert student["email"] == "sana@acme-edu.com"
    assert student["phone"] == "+92 300 1234567"
    assert student["target_country"] == "Canada"
    assert student["target_program"] == "BSc Nursing"
    assert student["english_proficiency"] == "IELTS 7.0"
    assert student["counsellor_id"] == str(counselor.id)
    assert student["branch_id"] == str(org["north_1"].id)
    assert student["student_code"].startswith(daily_prefix("STD", utc_now().date()))


def test_converted_lead_leaves_lead_list(client, counselor, headers_for):
    headers = headers_for(counselor)
    lead = _create_lead(client, headers)
    _create_lead(client, headers, name="Other", email="other@acme-edu.com")

    client.post(f"/api/v1/students/convert/{lead['id']}", json={}, headers=headers)

    names = [entry["name"] for entry in client.get("/api/v1/leads", headers=headers).json()]
    assert names == ["Other"]


def test_conversion_moves_the_timeline(client, counselor, headers_for):
    headers = headers_for(counselor)
    lead = _create_lead(client, headers)
    client.patch(f"/api/v1/leads/{lead['id']}", json={"status": "contacted"}, headers=headers)

    student = client.post(f"/api/v1/students/convert/{lead['id']}", json={}, headers=headers).json()

    student_timeline = client.get(f"/api/v1/activities/student/{student['id']}", headers=headers).json()
    lead_timeline = client.get(f"/api/v1/activities/lead/{lead['id']}", headers=headers).json()
    assert {entry["title"] for entry in student_timeline} == {
        "Lead created",
        "Status updated",
        "Student record created",
    }
    assert [entry["activity_type"] for entry in lead_timeline] == ["converted"]


def test_lead_converts_only_once(client, counselor, headers_for):
    headers = headers_for(counselor)
    lead = _create_lead(client, headers)

    client.post(f"/api/v1/students/convert/{lead['id']}", json={}, headers=headers)
    again = client.post(f"/api/v1/students/convert/{lead['id']}", json={}, headers=headers)

    assert again.status_code == 409


def test_cannot_convert_hidden_lead(client, counselor, make_user, org, headers_for):
    lead = _create_lead(client, headers_for(counselor))
    outsider = make_user(UserRole.BRANCH_MANAGER, branch=org["south_1"])

    response = client.post(
        f"/api/v1/students/convert/{lead['id']}", json={}, headers=headers_for(outsider)
    )

    assert response.status_code == 404


def test_update_and_delete_student(client, counselor, headers_for):
    headers = headers_for(counselor)
    student = _create_student(client, headers)

    updated = client.patch(
        f"/api/v1/students/{student['id']}", json={"status": "enrolled"}, headers=headers
    )
    assert updated.json()["status"] == "enrolled"

    assert client.delete(f"/api/v1/students/{student['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/students/{student['id']}", headers=headers).status_code == 404


def test_regional_manager_sees_region_students(client, counselor, make_user, org, headers_for):
    _create_student(client, headers_for(counselor))
    north = make_user(UserRole.REGIONAL_MANAGER, region=org["north"])
    south = make_user(UserRole.REGIONAL_MANAGER, region=org["south"])

    assert len(client.get("/api/v1/students", headers=headers_for(north)).json()) == 1
    assert client.get("/api/v1/students", headers=headers_for(south)).json() == []


@pytest.mark.parametrize("field", ["name", "email", "status"])
def test_student_required_fields_cannot_be_nulled(client, counselor, headers_for, field):
    headers = headers_for(counselor)
    student = _create_student(client, headers)

    response = client.patch(f"/api/v1/students/{student['id']}", json={field: None}, headers=headers)

    assert response.status_code == 400
    assert client.get(f"/api/v1/students/{student['id']}", headers=headers).json()[field] == student[field]


def test_students_are_listed_newest_first(client, counselor, headers_for):
    headers = headers_for(counselor)
    for index, name in enumerate(("Aleena", "Bushra", "Chaudhry")):
        _create_student(client, headers, name=name, email=f"student{index}@acme-edu.com")

    listed = client.get("/api/v1/students", headers=headers).json()

    assert [student["name"] for student in listed] == ["Chaudhry", "Bushra", "Aleena"]
