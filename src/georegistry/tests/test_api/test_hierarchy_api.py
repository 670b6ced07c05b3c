import pytest

from georegistry.exceptions.base import RepositoryError
from georegistry.services.country_service import CountryService


@pytest.fixture
def headers(request):
    # Resolved at setup time, outside the test's running event loop,
    # so the async person fixtures behind the named headers fixture can run.
    return request.getfixturevalue(request.param)


@pytest.mark.asyncio
class TestHierarchyScenario:

    async def test_create_then_delete_bottom_up(self, client, admin_headers):
        """
        Behavior:
                - Country 201, same country again 409, province 201, city 201,
                  province delete 409 while the city exists, then city and province deletes 200.

        Importance:
                - The end-to-end path through resolver, guard and error mapping over HTTP.
        """
        resp = await client.post("/countries", json={"name": "Chile", "code": "CL"}, headers=admin_headers)
        assert resp.status_code == 201
        country_id = resp.json()["id"]
        assert isinstance(country_id, int)

        resp = await client.post("/countries", json={"name": "Chile", "code": "CL"}, headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == "duplicate"
        assert resp.json()["existingId"] == country_id

        resp = await client.post(
            "/provinces",
            json={"name": "Santa Fe", "countryId": country_id, "latitude": -32.94, "longitude": -60.64},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        province_id = resp.json()["id"]
        assert resp.json()["countryId"] == country_id

        resp = await client.post(
            "/cities",
            json={"name": "Rosario", "provinceId": province_id, "latitude": -32.95, "longitude": -60.66},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        city_id = resp.json()["id"]

        resp = await client.delete(f"/provinces/{province_id}", headers=admin_headers)
        assert resp.status_code == 409
        assert "has associated cities" in resp.json()["detail"]
        assert resp.json()["code"] == "has_dependents"

        resp = await client.delete(f"/cities/{city_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": f"City with ID {city_id} deleted successfully"}

        resp = await client.delete(f"/provinces/{province_id}", headers=admin_headers)
        assert resp.status_code == 200

        resp = await client.get(f"/provinces/{province_id}")
        assert resp.status_code == 404


@pytest.mark.asyncio
class TestCreateErrors:

    async def test_missing_parent_is_404(self, client, admin_headers):
        resp = await client.post(
            "/cities",
            json={"name": "Nowhere", "provinceId": 999999, "latitude": 1.0, "longitude": 1.0},
            headers=admin_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Province with ID 999999 not found"

    async def test_invalid_body_is_400_with_field_detail(self, client, admin_headers, chile):
        """
        Behavior:
                - Latitude outside [-90, 90] and a missing name.
                - 400 with one entry per offending field, named as on the wire.
        """
        resp = await client.post(
            "/provinces",
            json={"countryId": chile.id, "latitude": 123.0, "longitude": 0.0},
            headers=admin_headers,
        )

        assert resp.status_code == 400
        body = resp.json()
        assert body["detail"] == "Validation failed"
        assert body["code"] == "bad_request"
        assert {e["field"] for e in body["errors"]} == {"name", "latitude"}

    async def test_snake_case_body_is_accepted(self, client, admin_headers, chile):
        resp = await client.post(
            "/provinces",
            json={"name": "Valparaiso", "country_id": chile.id, "latitude": -33.05, "longitude": -71.62},
            headers=admin_headers,
        )
        assert resp.status_code == 201


@pytest.mark.asyncio
class TestAccessControl:

    async def test_write_without_token_is_401(self, client):
        resp = await client.post("/countries", json={"name": "Peru"})

        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"
        assert resp.json() == {"detail": "Authentication required", "code": "unauthorized"}

    async def test_write_with_bad_token_is_401(self, client):
        resp = await client.post("/countries", json={"name": "Peru"}, headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token"

    @pytest.mark.parametrize("headers", ["user_headers", "moderator_headers"], indirect=True)
    async def test_write_without_admin_role_is_403(self, client, headers):
        resp = await client.post("/countries", json={"name": "Peru"}, headers=headers)

        assert resp.status_code == 403
        assert resp.json()["detail"] == "Access denied. Required roles: ADMIN"

    async def test_reads_are_public(self, client, chile):
        assert (await client.get("/countries")).status_code == 200
        assert (await client.get(f"/countries/{chile.id}")).status_code == 200


@pytest.mark.asyncio
class TestReadsAndListing:

    async def test_get_by_id(self, client, rosario, santa_fe):
        resp = await client.get(f"/cities/{rosario.id}")

        assert resp.status_code == 200
        assert resp.json() == {
            "id": rosario.id,
            "name": "Rosario",
            "latitude": -32.94,
            "longitude": -60.64,
            "provinceId": santa_fe.id,
        }

    async def test_get_missing_is_404(self, client):
        resp = await client.get("/countries/999999")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Country with ID 999999 not found", "code": "not_found"}

    async def test_list_with_pagination_metadata(self, client, create_country):
        for name in ("Bolivia", "Argentina", "Chile"):
            await create_country(name=name)

        resp = await client.get("/countries", params={"page": 2, "limit": 2, "sortBy": "name", "sortOrder": "asc"})

        assert resp.status_code == 200
        body = resp.json()
        assert [c["name"] for c in body["data"]] == ["Chile"]
        assert body["meta"] == {
            "totalItems": 3,
            "itemCount": 1,
            "itemsPerPage": 2,
            "totalPages": 2,
            "currentPage": 2,
        }

    async def test_list_descending(self, client, create_country):
        for name in ("Bolivia", "Argentina", "Chile"):
            await create_country(name=name)

        resp = await client.get("/countries", params={"sortBy": "name", "sortOrder": "DESC"})
        assert [c["name"] for c in resp.json()["data"]] == ["Chile", "Bolivia", "Argentina"]

    @pytest.mark.parametrize(
        "params",
        [
            {"sortBy": "population"},
            {"sortOrder": "sideways"},
            {"page": 0},
            {"limit": 1000},
        ],
    )
    async def test_bad_pagination_is_400(self, client, params):
        resp = await client.get("/provinces", params=params)
        assert resp.status_code == 400
        assert resp.json()["code"] == "bad_request"

    async def test_non_numeric_page_is_400(self, client):
        resp = await client.get("/cities", params={"page": "first"})
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["field"] == "page"

    async def test_children_by_parent(self, client, santa_fe, rosario, chile):
        resp = await client.get(f"/provinces/by-country/{chile.id}")
        assert [p["id"] for p in resp.json()["data"]] == [santa_fe.id]

        resp = await client.get(f"/cities/by-province/{santa_fe.id}")
        assert [c["id"] for c in resp.json()["data"]] == [rosario.id]

        resp = await client.get("/cities/by-province/999999")
        assert resp.status_code == 200
        assert resp.json()["data"] == []


@pytest.mark.asyncio
class TestSearch:

    @pytest.mark.parametrize("name", ["", "   "])
    async def test_empty_term_is_400(self, client, name):
        resp = await client.get("/cities/search", params={"name": name})
        assert resp.status_code == 400
        assert resp.json()["fields"] == ["name"]

    async def test_missing_term_is_400(self, client):
        assert (await client.get("/countries/search")).status_code == 400

    async def test_substring_match(self, client, create_city, santa_fe):
        cordoba = await create_city(name="Córdoba", province_id=santa_fe.id)
        await create_city(name="Rosario", province_id=santa_fe.id)

        resp = await client.get("/cities/search", params={"name": "córdoba"})

        assert resp.status_code == 200
        assert [c["id"] for c in resp.json()["data"]] == [cordoba.id]

    @pytest.mark.parametrize("name", ["_", "%", "a_b"])
    async def test_wildcard_characters_match_literally(self, client, create_city, santa_fe, name):
        """
        Behavior:
                - Cities "Rosario" and "axb"; neither contains `_` or `%`.
                - Searching for `_`, `%` or `a_b` returns nothing.
        """
        await create_city(name="Rosario", province_id=santa_fe.id)
        await create_city(name="axb", province_id=santa_fe.id)

        resp = await client.get("/cities/search", params={"name": name})

        assert resp.status_code == 200
        assert resp.json()["data"] == []
        assert resp.json()["meta"]["totalItems"] == 0


@pytest.mark.asyncio
class TestUpdate:

    async def test_patch_changes_only_given_fields(self, client, admin_headers, chile):
        resp = await client.patch(f"/countries/{chile.id}", json={"code": "CHL"}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json() == {"id": chile.id, "name": "Chile", "code": "CHL"}

    async def test_put_onto_taken_coordinates_is_409(self, client, admin_headers, santa_fe, create_province, chile):
        """
        Behavior:
                - Replace province B with the coordinates of province A.
                - 409 pointing at A; B is unchanged afterwards.
        """
        other = await create_province(name="Buenos Aires", latitude=-34.60, longitude=-58.38, country_id=chile.id)

        resp = await client.put(
            f"/provinces/{other.id}",
            json={"name": "Buenos Aires", "countryId": chile.id, "latitude": -31.63, "longitude": -60.70},
            headers=admin_headers,
        )

        assert resp.status_code == 409
        assert resp.json()["existingId"] == santa_fe.id

        resp = await client.get(f"/provinces/{other.id}")
        assert resp.json()["latitude"] == -34.60

    async def test_patch_null_required_field_is_400(self, client, admin_headers, santa_fe):
        resp = await client.patch(f"/provinces/{santa_fe.id}", json={"name": None}, headers=admin_headers)
        assert resp.status_code == 400

    async def test_update_missing_is_404(self, client, admin_headers):
        resp = await client.patch("/cities/999999", json={"name": "X"}, headers=admin_headers)
        assert resp.status_code == 404


@pytest.mark.asyncio
class TestServerErrors:

    async def test_repository_failure_is_generic_500(self, client, chile, monkeypatch):
        """The client sees a generic message; the cause stays in the log."""
        async def broken_get(self, entity_id):
            raise RepositoryError("Failed to retrieve Country")

        monkeypatch.setattr(CountryService, "get", broken_get)

        resp = await client.get(f"/countries/{chile.id}")

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error", "code": "repository_error"}


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("X-Request-ID")
