"""
Tests for the cookie authenticated /admin endpoints.
"""

import logging
from datetime import date, timedelta

from pet_rescue_api.app.core.config import settings

from ..factories import PASSWORD, make_client, make_pet


# --- Sessions ---


def test_admin_routes_require_session(client):
    assert client.get("/admin/pets").status_code == 401


def test_register_sets_http_only_cookie(client):
    response = client.post(
        "/admin/register",
        json={"email": "boss@example.com", "password": PASSWORD, "confirmPassword": PASSWORD},
    )
    assert response.status_code == 201
    assert response.json()["role"] == "ADMIN"
    set_cookie = response.headers["set-cookie"]
    assert settings.session_cookie_name in set_cookie
    assert "httponly" in set_cookie.lower()
    assert client.get("/admin/me").json()["email"] == "boss@example.com"


def test_registration_can_be_disabled(client, monkeypatch):
    monkeypatch.setattr(settings, "allow_admin_registration", False)
    response = client.post(
        "/admin/register",
        json={"email": "boss@example.com", "password": PASSWORD, "confirmPassword": PASSWORD},
    )
    assert response.status_code == 403


def test_logout_and_login(admin_client):
    assert admin_client.post("/admin/logout").status_code == 200
    assert admin_client.get("/admin/pets").status_code == 401

    response = admin_client.post(
        "/admin/login",
        json={"email": "admin@example.com", "password": PASSWORD, "rememberMe": True},
    )
    assert response.status_code == 200
    assert "max-age" in response.headers["set-cookie"].lower()
    assert admin_client.get("/admin/pets").status_code == 200


def test_login_without_remember_me_sets_session_cookie(admin_client):
    admin_client.post("/admin/logout")
    response = admin_client.post(
        "/admin/login", json={"email": "admin@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200
    assert "max-age" not in response.headers["set-cookie"].lower()


def test_login_lockout(admin_client, monkeypatch):
    monkeypatch.setattr(settings, "max_failed_logins", 2)
    admin_client.post("/admin/logout")
    bad = {"email": "admin@example.com", "password": "Wr0ngPassword"}
    assert admin_client.post("/admin/login", json=bad).status_code == 401
    assert admin_client.post("/admin/login", json=bad).status_code == 401
    good = {"email": "admin@example.com", "password": PASSWORD}
    assert admin_client.post("/admin/login", json=good).status_code == 423


def test_non_admin_is_forbidden(client, api_token):
    client.post("/admin/login", json={"email": "jane@example.com", "password": PASSWORD})
    assert client.get("/admin/me").status_code == 200
    assert client.get("/admin/pets").status_code == 403


def test_api_token_is_not_a_session(client, auth_headers):
    assert client.get("/admin/pets", headers=auth_headers).status_code == 401


# --- Pets ---


def test_pet_crud(admin_client):
    created = admin_client.post(
        "/admin/pets", json={"name": "Rex", "species": "Dog", "gender": "M", "age": 4}
    )
    assert created.status_code == 201
    pet = created.json()

    edited = admin_client.put(
        f"/admin/pets/{pet['id']}",
        json={"name": "Rex", "species": "Dog", "gender": "M", "age": 5, "version": pet["version"]},
    )
    assert edited.status_code == 200
    assert edited.json()["age"] == 5

    stale = admin_client.put(
        f"/admin/pets/{pet['id']}",
        json={"name": "Rex", "species": "Dog", "gender": "M", "age": 6, "version": pet["version"]},
    )
    assert stale.status_code == 409

    assert admin_client.delete(f"/admin/pets/{pet['id']}").status_code == 204
    assert admin_client.get(f"/admin/pets/{pet['id']}").status_code == 404
    assert admin_client.put(
        f"/admin/pets/{pet['id']}", json={"name": "Rex", "species": "Dog", "gender": "M"}
    ).status_code == 404


def test_pet_validation(admin_client):
    too_old = {"name": "Old", "species": "Cat", "gender": "F", "age": 31}
    assert admin_client.post("/admin/pets", json=too_old).status_code == 422
    bad_species = {"name": "Nemo", "species": "Fish", "gender": "M"}
    assert admin_client.post("/admin/pets", json=bad_species).status_code == 422


def test_pet_listing_sort_hints(admin_client):
    make_pet("Bella")
    make_pet("Alfie")
    body = admin_client.get("/admin/pets", params={"sortOrder": "name_asc"}).json()
    assert [p["name"] for p in body["items"]] == ["Alfie", "Bella"]
    assert body["sortOrder"] == "name_asc"
    assert body["nextSort"] == {
        "id": "id_asc",
        "name": "name_desc",
        "species": "species_asc",
        "gender": "gender_asc",
        "age": "age_asc",
    }
    body = admin_client.get("/admin/pets", params={"sortOrder": "name_desc"}).json()
    assert [p["name"] for p in body["items"]] == ["Bella", "Alfie"]
    assert body["nextSort"]["name"] is None


def test_pet_details_include_active_foster(admin_client):
    pet = make_pet()
    client = make_client()
    start = date.today() - timedelta(days=3)
    admin_client.post(
        "/admin/foster",
        json={"clientId": client.id, "petId": pet.id, "startDate": start.isoformat()},
    )
    body = admin_client.get(f"/admin/pets/{pet.id}").json()
    assert body["pet"]["id"] == pet.id
    assert body["activeFoster"]["clientId"] == client.id


# --- Clients ---


def test_client_crud_and_filters(admin_client):
    created = admin_client.post(
        "/admin/clients", json={"name": "Anna Smith", "address": "1 Oak Road"}
    )
    assert created.status_code == 201
    client_id = created.json()["id"]

    assert admin_client.post("/admin/clients", json={"name": "Al"}).status_code == 422
    assert admin_client.post(
        "/admin/clients", json={"name": "Ghost Link", "userId": "missing"}
    ).status_code == 400

    listing = admin_client.get("/admin/clients", params={"hasUser": "false"}).json()
    assert [c["name"] for c in listing["items"]] == ["Anna Smith"]
    linked = admin_client.get("/admin/clients", params={"hasUser": "true"}).json()
    assert linked["totalCount"] == 0
    assert set(listing["nextSort"]) == {"id", "name", "addr", "user"}

    edited = admin_client.put(
        f"/admin/clients/{client_id}", json={"name": "Anna Jones", "address": "1 Oak Road"}
    )
    assert edited.json()["name"] == "Anna Jones"
    assert admin_client.get(f"/admin/clients/{client_id}").json()["address"] == "1 Oak Road"

    assert admin_client.delete(f"/admin/clients/{client_id}").status_code == 204
    assert admin_client.delete(f"/admin/clients/{client_id}").status_code == 404


# --- Fosters ---


def test_foster_crud(admin_client):
    pet = make_pet()
    client = make_client()
    payload = {
        "clientId": client.id,
        "petId": pet.id,
        "startDate": "2024-01-01",
        "endDate": "2024-01-20",
        "description": "Winter stay",
    }
    created = admin_client.post("/admin/foster", json=payload)
    assert created.status_code == 201
    foster = created.json()

    overlapping = dict(payload, startDate="2024-01-15", endDate="2024-02-01")
    response = admin_client.post("/admin/foster", json=overlapping)
    assert response.status_code == 400
    assert response.json()["detail"] == "Conflicting Foster interval for the same Pet."

    extended = dict(payload, endDate="2024-02-01", version=foster["version"])
    response = admin_client.put(f"/admin/foster/{foster['id']}", json=extended)
    assert response.status_code == 200
    assert response.json()["endDate"] == "2024-02-01"

    reversed_dates = dict(payload, startDate="2024-03-01", endDate="2024-02-01")
    response = admin_client.put(f"/admin/foster/{foster['id']}", json=reversed_dates)
    assert response.status_code == 400
    assert response.json()["detail"] == "End Date must be greater than Start Date."

    assert admin_client.put("/admin/foster/999", json=payload).status_code == 404
    assert admin_client.delete(f"/admin/foster/{foster['id']}").status_code == 204


def test_foster_listing_filters(admin_client):
    pet = make_pet()
    client = make_client()
    for start, end in [("2024-01-01", "2024-01-20"), ("2024-03-01", None)]:
        admin_client.post(
            "/admin/foster",
            json={"clientId": client.id, "petId": pet.id, "startDate": start, "endDate": end},
        )
    body = admin_client.get(
        "/admin/foster", params={"startDate_gte": "2024-02-01", "petId": pet.id}
    ).json()
    assert [f["startDate"] for f in body["items"]] == ["2024-03-01"]

    body = admin_client.get("/admin/foster", params={"sortOrder": "startDate_desc"}).json()
    assert [f["startDate"] for f in body["items"]] == ["2024-03-01", "2024-01-01"]
    assert body["nextSort"]["startDate"] is None
    assert body["nextSort"]["petId"] == "petId_asc"


# --- Users ---


def test_user_crud(admin_client):
    created = admin_client.post(
        "/admin/users", json={"email": "staff@example.com", "name": "Staff", "role": "USER"}
    )
    assert created.status_code == 201
    user = created.json()
    assert "password" not in user

    duplicate = admin_client.post("/admin/users", json={"email": "STAFF@example.com"})
    assert duplicate.status_code == 400

    listing = admin_client.get("/admin/users", params={"userRole": "ADMIN"}).json()
    assert [u["email"] for u in listing["items"]] == ["admin@example.com"]

    edited = admin_client.put(
        f"/admin/users/{user['id']}",
        json={"email": "staff@example.com", "name": "Staff", "role": "ADMIN", "version": 1},
    )
    assert edited.status_code == 200
    assert edited.json()["role"] == "ADMIN"

    assert admin_client.delete(f"/admin/users/{user['id']}").status_code == 204
    assert admin_client.get(f"/admin/users/{user['id']}").status_code == 404


def test_admin_password_reset(admin_client, caplog):
    with caplog.at_level(logging.INFO):
        response = admin_client.post(
            "/admin/forgot_password", json={"email": "admin@example.com"}
        )
    assert response.status_code == 200
    [record] = [r for r in caplog.records if "Password reset link" in r.getMessage()]
    code = record.getMessage().split("resetCode=")[1]

    response = admin_client.post(
        "/admin/reset_password",
        json={
            "email": "admin@example.com",
            "resetCode": code,
            "password": "N3wPassword",
            "confirmPassword": "N3wPassword",
        },
    )
    assert response.status_code == 200
    login = admin_client.post(
        "/admin/login", json={"email": "admin@example.com", "password": "N3wPassword"}
    )
    assert login.status_code == 200


def test_form_options(admin_client):
    make_pet("Zed")
    make_pet("Abby")
    make_client("Maria Popescu")
    body = admin_client.get("/admin/foster/options").json()
    assert [p["name"] for p in body["pets"]] == ["Abby", "Zed"]
    assert [c["name"] for c in body["clients"]] == ["Maria Popescu"]

    body = admin_client.get("/admin/clients/options").json()
    assert [u["email"] for u in body["users"]] == ["admin@example.com"]
