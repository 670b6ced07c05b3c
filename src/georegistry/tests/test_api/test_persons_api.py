import pytest

from ..test_fixtures.api_fixtures import bearer


def person_body(**overrides) -> dict:
    body = {
        "firstName": "Lucia",
        "lastName": "Gomez",
        "email": "lucia@example.com",
        "password": "correct-horse",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
class TestPersonAccess:

    async def test_user_cannot_read_persons(self, client, user_headers):
        resp = await client.get("/persons", headers=user_headers)

        assert resp.status_code == 403
        assert resp.json()["detail"] == "Access denied. Required roles: ADMIN, MODERATOR"

    async def test_anonymous_cannot_read_persons(self, client):
        assert (await client.get("/persons")).status_code == 401

    async def test_moderator_reads_but_cannot_write(self, client, moderator_headers, user_person):
        resp = await client.get("/persons", headers=moderator_headers)
        assert resp.status_code == 200
        assert resp.json()["meta"]["totalItems"] == 2

        resp = await client.get(f"/persons/{user_person.id}", headers=moderator_headers)
        assert resp.status_code == 200

        resp = await client.post("/persons", json=person_body(), headers=moderator_headers)
        assert resp.status_code == 403

        resp = await client.delete(f"/persons/{user_person.id}", headers=moderator_headers)
        assert resp.status_code == 403


@pytest.mark.asyncio
class TestPersonWrites:

    async def test_admin_creates_person(self, client, admin_headers, rosario):
        """
        Behavior:
                - Admin creates a person in a city with an explicit role.
                - 201; the response carries no password material.
        """
        resp = await client.post(
            "/persons",
            json=person_body(cityId=rosario.id, role="MODERATOR", birthDate="1990-05-17"),
            headers=admin_headers,
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["email"] == "lucia@example.com"
        assert body["role"] == "MODERATOR"
        assert body["cityId"] == rosario.id
        assert body["birthDate"] == "1990-05-17"
        assert not {"password", "passwordHash", "password_hash"} & body.keys()

    async def test_created_person_can_log_in(self, client, admin_headers):
        await client.post("/persons", json=person_body(), headers=admin_headers)

        resp = await client.post("/auth/login", json={"email": "lucia@example.com", "password": "correct-horse"})
        assert resp.status_code == 200

    async def test_duplicate_email_is_409_with_existing_id(self, client, admin_headers, user_person):
        resp = await client.post("/persons", json=person_body(email="User@Example.com"), headers=admin_headers)

        assert resp.status_code == 409
        assert resp.json()["existingId"] == user_person.id

    async def test_unknown_city_is_404(self, client, admin_headers):
        resp = await client.post("/persons", json=person_body(cityId=999999), headers=admin_headers)
        assert resp.status_code == 404

    async def test_invalid_role_is_400(self, client, admin_headers):
        resp = await client.post("/persons", json=person_body(role="SUPERUSER"), headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["field"] == "role"

    async def test_promote_takes_effect_on_next_token(self, client, admin_headers, user_person):
        resp = await client.patch(f"/persons/{user_person.id}", json={"role": "MODERATOR"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["role"] == "MODERATOR"

        resp = await client.get("/persons", headers=bearer(user_person))
        assert resp.status_code == 200

    async def test_delete_person(self, client, admin_headers, user_person):
        person_id = user_person.id

        resp = await client.delete(f"/persons/{person_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == f"Person with ID {person_id} deleted successfully"

        resp = await client.get(f"/persons/{person_id}", headers=admin_headers)
        assert resp.status_code == 404

    async def test_city_with_residents_cannot_be_deleted(self, client, admin_headers, user_person):
        city_id = user_person.city_id

        resp = await client.delete(f"/cities/{city_id}", headers=admin_headers)

        assert resp.status_code == 409
        assert resp.json()["dependents"] == "persons"


@pytest.mark.asyncio
async def test_search_persons_by_name(client, admin_headers, create_person):
    ana = await create_person(first_name="Ana", last_name="Torres")
    await create_person(first_name="Carla", last_name="Diaz")

    resp = await client.get("/persons/search", params={"name": "torr"}, headers=admin_headers)

    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()["data"]] == [ana.id]
