import pytest

from crm.database.models.auth import UserRole


@pytest.fixture
def counselor(make_user, org):
    return make_user(UserRole.COUNSELOR, branch=org["north_1"])


def _create_lead(client, headers, **overrides):
    payload = {"name": "Zara Ahmed", "email": "zara@acme-edu.com", "country": "UK", "program": "MBA"}
    payload.update(overrides)
    response = client.post("/api/v1/leads", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_counselor_owns_the_leads_they_create(client, counselor, org, headers_for):
    lead = _create_lead(client, headers_for(counselor))

    assert lead["counsellor_id"] == str(counselor.id)
    assert lead["branch_id"] == str(org["north_1"].id)
    assert lead["region_id"] == str(org["north"].id)
    assert lead["status"] == "new"
    assert lead["created_by"] == str(counselor.id)


def test_explicit_attribution_is_kept(client, admin, org, headers_for):
    lead = _create_lead(client, headers_for(admin), branch_id=str(org["south_1"].id))

    assert lead["counsellor_id"] is None
    assert lead["branch_id"] == str(org["south_1"].id)
    assert lead["region_id"] == str(org["south"].id)


def test_multi_select_fields_keep_first_choice(client, admin, headers_for):
    lead = _create_lead(client, headers_for(admin), country=["Canada", "UK"], program=[])

    assert lead["country"] == "Canada"
    assert lead["program"] is None


def test_invalid_payload_is_a_bad_request(client, admin, headers_for):
    response = client.post("/api/v1/leads", json={"email": "zara@acme-edu.com"}, headers=headers_for(admin))

    assert response.status_code == 400
    assert any(error["loc"][-1] == "name" for error in response.json()["detail"])


def test_requires_authentication(client):
    assert client.get("/api/v1/leads").status_code == 401


def test_other_counselor_cannot_see_lead(client, counselor, make_user, org, headers_for):
    lead = _create_lead(client, headers_for(counselor))
    colleague = make_user(UserRole.COUNSELOR, branch=org["north_1"])
    headers = headers_for(colleague)

    assert client.get("/api/v1/leads", headers=headers).json() == []
    assert client.get(f"/api/v1/leads/{lead['id']}", headers=headers).status_code == 404
    assert client.patch(
        f"/api/v1/leads/{lead['id']}", json={"status": "lost"}, headers=headers
    ).status_code == 404
    assert client.delete(f"/api/v1/leads/{lead['id']}", headers=headers).status_code == 404


def test_branch_manager_sees_branch_leads(client, counselor, make_user, org, headers_for):
    _create_lead(client, headers_for(counselor))
    north_manager = make_user(UserRole.BRANCH_MANAGER, branch=org["north_1"])
    south_manager = make_user(UserRole.BRANCH_MANAGER, branch=org["south_1"])

    assert len(client.get("/api/v1/leads", headers=headers_for(north_manager)).json()) == 1
    assert client.get("/api/v1/leads", headers=headers_for(south_manager)).json() == []


def test_search_and_status_filter(client, admin, headers_for):
    headers = headers_for(admin)
    _create_lead(client, headers, name="Zara Ahmed", email="zara@acme-edu.com")
    _create_lead(client, headers, name="Bilal Hussain", email="bilal@acme-edu.com", country="Germany")

    by_name = client.get("/api/v1/leads", params={"q": "bilal"}, headers=headers).json()
    by_country = client.get("/api/v1/leads", params={"q": "germ"}, headers=headers).json()
    by_status = client.get("/api/v1/leads", params={"status": "contacted"}, headers=headers).json()

    assert [lead["name"] for lead in by_name] == ["Bilal Hussain"]
    assert [lead["name"] for lead in by_country] == ["Bilal Hussain"]
    assert by_status == []


def test_update_records_changed_fields(client, counselor, headers_for):
    headers = headers_for(counselor)
    lead = _create_lead(client, headers)

    response = client.patch(
        f"/api/v1/leads/{lead['id']}",
        json={"status": "contacted", "country": "UK", "study_level": "Masters"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "contacted"

    timeline = client.get(f"/api/v1/activities/lead/{lead['id']}", headers=headers).json()
    changed = {entry["field_name"]: entry for entry in timeline if entry["activity_type"] == "updated"}
    assert set(changed) == {"status", "study_level"}
    assert changed["status"]["old_value"] == "new"
    assert changed["status"]["new_value"] == "contacted"
    assert changed["study_level"]["title"] == "Study Level updated"
    assert changed["status"]["user_name"] == counselor.display_name


def test_assign_lead(client, admin, counselor, headers_for):
    lead = _create_lead(client, headers_for(admin))

    response = client.patch(
        f"/api/v1/leads/{lead['id']}/assign",
        json={"counsellor_id": str(counselor.id)},
        headers=headers_for(admin),
    )

    assert response.status_code == 200
    assert response.json()["counsellor_id"] == str(counselor.id)
    assert client.get(f"/api/v1/leads/{lead['id']}", headers=headers_for(counselor)).status_code == 200


def test_assign_to_unknown_counselor(client, admin, headers_for):
    lead = _create_lead(client, headers_for(admin))

    response = client.patch(
        f"/api/v1/leads/{lead['id']}/assign",
        json={"counsellor_id": "00000000-0000-0000-0000-000000000001"},
        headers=headers_for(admin),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Counselor not found"


def test_delete_lead(client, counselor, headers_for):
    headers = headers_for(counselor)
    lead = _create_lead(client, headers)

    assert client.delete(f"/api/v1/leads/{lead['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/leads/{lead['id']}", headers=headers).status_code == 404


def test_attached_admin_may_place_lead_in_another_region(client, make_user, org, headers_for):
    north_admin = make_user(UserRole.ADMIN, region=org["north"])

    lead = _create_lead(client, headers_for(north_admin), branch_id=str(org["south_1"].id))

    assert lead["branch_id"] == str(org["south_1"].id)
    assert lead["region_id"] == str(org["south"].id)


def test_attached_admin_defaults_to_own_attachment(client, make_user, org, headers_for):
    north_admin = make_user(UserRole.ADMIN, region=org["north"])

    lead = _create_lead(client, headers_for(north_admin))

    assert lead["region_id"] == str(org["north"].id)
    assert lead["branch_id"] is None


@pytest.mark.parametrize("field", ["status", "name", "email"])
def test_required_fields_cannot_be_nulled(client, counselor, headers_for, field):
    headers = headers_for(counselor)
    lead = _create_lead(client, headers)

    response = client.patch(f"/api/v1/leads/{lead['id']}", json={field: None}, headers=headers)

    assert response.status_code == 400
    assert any(error["loc"][-1] == field for error in response.json()["detail"])
    assert client.get(f"/api/v1/leads/{lead['id']}", headers=headers).json()[field] == lead[field]


def test_nullable_fields_can_be_cleared(client, counselor, headers_for):
    headers = headers_for(counselor)
    lead = _create_lead(client, headers, city="Lahore")

    response = client.patch(f"/api/v1/leads/{lead['id']}", json={"city": None}, headers=headers)

    assert response.status_code == 200
    assert response.json()["city"] is None


def test_leads_are_listed_newest_first(client, counselor, headers_for):
    headers = headers_for(counselor)
    for name in ("First Lead", "Second Lead", "Third Lead"):
        _create_lead(client, headers, name=name)

    listed = client.get("/api/v1/leads", headers=headers).json()

    assert [lead["name"] for lead in listed] == ["Third Lead", "Second Lead", "First Lead"]
    created = [lead["created_at"] for lead in listed]
    assert created == sorted(created, reverse=True)
