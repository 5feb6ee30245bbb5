import pytest

from crm.database.models.auth import UserRole


def _university(**overrides):
    payload = {
        "name": "University of Glasgow",
        "country": "UK",
        "campus_city": "Glasgow",
        "total_fees": 24500,
        "initial_deposit_amount": 2000,
        "intakes": ["September", " January ", "", "September"],
        "accepted_elts": ["IELTS", "PTE"],
        "courses": [
            {"name": "MSc Data Analytics", "category": "Computing", "fees": 26000, "is_top_course": True},
            {"name": "MBA", "category": "Business", "fees": 31000},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def university(client, admin, headers_for):
    response = client.post("/api/v1/universities", json=_university(), headers=headers_for(admin))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def counselor(make_user, org):
    return make_user(UserRole.COUNSELOR, branch=org["north_1"])


def test_create_university_with_details(university):
    assert university["intakes"] == ["September", "January"]
    assert university["accepted_elts"] == ["IELTS", "PTE"]
    assert university["total_fees"] == 24500
    assert sorted(course["name"] for course in university["courses"]) == ["MBA", "MSc Data Analytics"]


def test_catalogue_is_readable_by_any_user(client, university, counselor, headers_for):
    headers = headers_for(counselor)

    listed = client.get("/api/v1/universities", headers=headers).json()
    detail = client.get(f"/api/v1/universities/{university['id']}", headers=headers).json()

    assert [u["name"] for u in listed] == ["University of Glasgow"]
    assert detail["campus_city"] == "Glasgow"
    assert detail["intakes"] == ["September", "January"]


def test_only_admins_maintain_the_catalogue(client, university, counselor, headers_for):
    headers = headers_for(counselor)

    assert client.post(
        "/api/v1/universities", json=_university(name="University of Otago"), headers=headers
    ).status_code == 403
    assert client.post(
        f"/api/v1/universities/{university['id']}/courses", json={"name": "LLM"}, headers=headers
    ).status_code == 403
    assert client.delete(f"/api/v1/universities/{university['id']}", headers=headers).status_code == 403


def test_duplicate_university_conflicts(client, university, admin, headers_for):
    response = client.post("/api/v1/universities", json=_university(), headers=headers_for(admin))
    assert response.status_code == 409


def test_unknown_university_is_not_found(client, counselor, headers_for):
    response = client.get(
        "/api/v1/universities/00000000-0000-0000-0000-000000000001", headers=headers_for(counselor)
    )
    assert response.status_code == 404


def test_search_universities(client, university, admin, headers_for):
    headers = headers_for(admin)
    client.post(
        "/api/v1/universities",
        json=_university(name="University of Sydney", country="Australia", campus_city="Sydney", courses=[]),
        headers=headers,
    )

    by_city = client.get("/api/v1/universities", params={"q": "sydn"}, headers=headers).json()
    by_country = client.get("/api/v1/universities", params={"country": "UK"}, headers=headers).json()

    assert [u["name"] for u in by_city] == ["University of Sydney"]
    assert [u["name"] for u in by_country] == ["University of Glasgow"]


def test_course_catalogue_filters(client, university, counselor, headers_for):
    headers = headers_for(counselor)

    top = client.get("/api/v1/university-courses", params={"top": "top"}, headers=headers).json()
    business = client.get(
        "/api/v1/university-courses", params={"category": "Business"}, headers=headers
    ).json()
    by_university = client.get(
        "/api/v1/university-courses", params={"q": "glasgow"}, headers=headers
    ).json()

    assert [c["name"] for c in top["data"]] == ["MSc Data Analytics"]
    assert top["data"][0]["university_name"] == "University of Glasgow"
    assert top["data"][0]["country"] == "UK"
    assert [c["name"] for c in business["data"]] == ["MBA"]
    assert by_university["pagination"]["total"] == 2


def test_course_catalogue_pages(client, university, admin, headers_for):
    headers = headers_for(admin)
    for index in range(3):
        client.post(
            f"/api/v1/universities/{university['id']}/courses",
            json={"name": f"Short Course {index}", "category": "Summer"},
            headers=headers,
        )

    first = client.get("/api/v1/university-courses", params={"limit": 2}, headers=headers).json()
    last = client.get("/api/v1/university-courses", params={"limit": 2, "page": 3}, headers=headers).json()

    assert first["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 5,
        "total_pages": 3,
        "has_next_page": True,
        "has_prev_page": False,
    }
    assert [c["name"] for c in first["data"]] == ["Short Course 2", "Short Course 1"]
    assert len(last["data"]) == 1
    assert last["pagination"]["has_next_page"] is False


def test_course_catalogue_rejects_bad_paging(client, counselor, headers_for):
    response = client.get("/api/v1/university-courses", params={"limit": 500}, headers=headers_for(counselor))
    assert response.status_code == 400


def test_delete_university_removes_courses(client, university, admin, headers_for):
    headers = headers_for(admin)

    assert client.delete(f"/api/v1/universities/{university['id']}", headers=headers).status_code == 204
    assert client.get("/api/v1/university-courses", headers=headers).json()["data"] == []
