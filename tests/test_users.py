import uuid

import pytest

from crm.database.models.auth import User, UserRole


def _new_user(**overrides):
    payload = {
        "email": "farah@acme-edu.com",
        "first_name": "Farah",
        "last_name": "Khan",
        "role": "counselor",
    }
    payload.update(overrides)
    return payload


def test_admin_creates_user_and_mails_credentials(client, admin, headers_for, mail_transport, db_session):
    response = client.post("/api/v1/users", json=_new_user(), headers=headers_for(admin))

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "farah@acme-edu.com"

    user = db_session.get(User, uuid.UUID(body["user_id"]))
    assert user.is_temporary_password is True
    assert user.role == "counselor"

    assert len(mail_transport.outbox) == 1
    sent = mail_transport.outbox[0]
    assert sent["recipients"] == ["farah@acme-edu.com"]
    assert "farah@acme-edu.com" in sent["body"]


def test_duplicate_email_is_rejected(client, admin, headers_for):
    client.post("/api/v1/users", json=_new_user(), headers=headers_for(admin))
    response = client.post("/api/v1/users", json=_new_user(), headers=headers_for(admin))
    assert response.status_code == 409


def test_non_admin_cannot_manage_users(client, make_user, headers_for):
    counselor = make_user(UserRole.COUNSELOR)
    headers = headers_for(counselor)

    assert client.post("/api/v1/users", json=_new_user(), headers=headers).status_code == 403
    assert client.get("/api/v1/users", headers=headers).status_code == 403


def test_only_super_admin_grants_super_admin(client, admin, super_admin, headers_for):
    payload = _new_user(role="super_admin")

    assert client.post("/api/v1/users", json=payload, headers=headers_for(admin)).status_code == 403
    assert client.post("/api/v1/users", json=payload, headers=headers_for(super_admin)).status_code == 201


def test_branch_attachment_brings_region(client, admin, org, headers_for):
    response = client.post(
        "/api/v1/users",
        json=_new_user(branch_id=str(org["north_1"].id)),
        headers=headers_for(admin),
    )
    user_id = response.json()["user_id"]

    body = client.get(f"/api/v1/users/{user_id}", headers=headers_for(admin)).json()
    assert body["branch_id"] == str(org["north_1"].id)
    assert body["region_id"] == str(org["north"].id)


def test_branch_outside_region_is_rejected(client, admin, org, headers_for):
    response = client.post(
        "/api/v1/users",
        json=_new_user(region_id=str(org["south"].id), branch_id=str(org["north_1"].id)),
        headers=headers_for(admin),
    )
    assert response.status_code == 400


def test_unknown_branch_is_rejected(client, admin, headers_for):
    response = client.post(
        "/api/v1/users",
        json=_new_user(branch_id="00000000-0000-0000-0000-000000000001"),
        headers=headers_for(admin),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Branch not found"


def test_moving_user_to_other_region_detaches_branch(client, admin, make_user, org, headers_for):
    user = make_user(UserRole.COUNSELOR, branch=org["north_1"])

    response = client.patch(
        f"/api/v1/users/{user.id}",
        json={"region_id": str(org["south"].id)},
        headers=headers_for(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["region_id"] == str(org["south"].id)
    assert body["branch_id"] is None


def test_list_users_filters_by_role(client, admin, make_user, headers_for):
    make_user(UserRole.COUNSELOR)
    make_user(UserRole.PARTNER)

    response = client.get("/api/v1/users", params={"role": "partner"}, headers=headers_for(admin))

    assert response.status_code == 200
    assert [u["role"] for u in response.json()] == ["partner"]


def test_cannot_delete_self(client, admin, headers_for):
    response = client.delete(f"/api/v1/users/{admin.id}", headers=headers_for(admin))
    assert response.status_code == 400


def test_delete_user(client, admin, make_user, headers_for):
    user = make_user(UserRole.COUNSELOR)

    assert client.delete(f"/api/v1/users/{user.id}", headers=headers_for(admin)).status_code == 204
    assert client.get(f"/api/v1/users/{user.id}", headers=headers_for(admin)).status_code == 404


def test_role_and_active_flag_cannot_be_nulled(client, admin, make_user, headers_for):
    user = make_user(UserRole.COUNSELOR)

    for field in ("role", "is_active"):
        response = client.patch(f"/api/v1/users/{user.id}", json={field: None}, headers=headers_for(admin))
        assert response.status_code == 400


@pytest.mark.parametrize(
    "update",
    [{"role": "counselor"}, {"is_active": False}, {"first_name": "Renamed"}],
)
def test_admin_cannot_modify_a_super_admin(client, admin, super_admin, headers_for, db_session, update):
    response = client.patch(f"/api/v1/users/{super_admin.id}", json=update, headers=headers_for(admin))

    assert response.status_code == 403
    db_session.refresh(super_admin)
    assert super_admin.role == UserRole.SUPER_ADMIN.value
    assert super_admin.is_active is True


def test_admin_cannot_delete_a_super_admin(client, admin, super_admin, headers_for):
    response = client.delete(f"/api/v1/users/{super_admin.id}", headers=headers_for(admin))

    assert response.status_code == 403
    assert client.get(f"/api/v1/users/{super_admin.id}", headers=headers_for(admin)).status_code == 200


def test_super_admin_manages_other_super_admins(client, super_admin, make_user, headers_for):
    other = make_user(UserRole.SUPER_ADMIN)
    headers = headers_for(super_admin)

    demoted = client.patch(f"/api/v1/users/{other.id}", json={"role": "admin"}, headers=headers)
    assert demoted.status_code == 200
    assert demoted.json()["role"] == "admin"
    assert client.delete(f"/api/v1/users/{other.id}", headers=headers).status_code == 204
