from bson import ObjectId
from fastapi.testclient import TestClient

from user_account_svc.app import create_app
from tests.conftest import register_user


def test_list_users_empty(client):
    response = client.get("/users")
    assert response.status_code == 200
    assert response.json() == []


def test_list_users(client):
    register_user(client, name="Ana", email="ana@example.com")
    register_user(client, name="Luis", email="luis@example.com")

    response = client.get("/users")
    assert response.status_code == 200
    assert sorted(u["name"] for u in response.json()) == ["Ana", "Luis"]


def test_get_user(client):
    user = register_user(client)

    response = client.get(f"/users/{user['id']}")
    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"id", "name", "email", "password", "profile", "description"}
    assert data["id"] == user["id"]
    assert data["email"] == "jhon@gmail.com"


def test_get_unknown_user(client):
    response = client.get(f"/users/{ObjectId()}")
    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


def test_get_malformed_id_is_not_found(client):
    response = client.get("/users/not-an-object-id")
    assert response.status_code == 404


def test_password_digest_hidden_when_disabled(settings, store):
    app = create_app(settings.model_copy(update={"expose_password_digest": False}), store=store)
    with TestClient(app) as client:
        user = register_user(client)
        assert "password" not in user
        assert "password" not in client.get(f"/users/{user['id']}").json()


def test_update_name_only(client):
    user = register_user(client)
    client.put(f"/users/{user['id']}", json={"description": "Hello", "profile": "aGVsbG8="})

    response = client.put(f"/users/{user['id']}", json={"name": "X"})
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "X"
    assert data["description"] == "Hello"
    assert data["profile"] == "aGVsbG8="

    stored = client.get(f"/users/{user['id']}").json()
    assert stored == data


def test_update_empty_values_leave_fields_unchanged(client):
    user = register_user(client, name="Jhon")
    client.put(f"/users/{user['id']}", json={"description": "Hello"})

    response = client.put(f"/users/{user['id']}", json={"name": "", "description": "", "profile": ""})
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Jhon"
    assert data["description"] == "Hello"
    assert data["profile"] == ""


def test_update_without_body(client):
    user = register_user(client)

    response = client.put(f"/users/{user['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == user["name"]


def test_update_does_not_touch_email_or_password(client):
    user = register_user(client)

    response = client.put(
        f"/users/{user['id']}",
        json={"name": "X", "email": "other@example.com", "password": "changed"},
    )
    assert response.status_code == 200
    assert response.json()["email"] == user["email"]
    assert response.json()["password"] == user["password"]


def test_update_unknown_user(client):
    response = client.put(f"/users/{ObjectId()}", json={"name": "X"})
    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


def test_list_store_failure_returns_500(client, store, monkeypatch):
    async def broken_all():
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(store, "all", broken_all)

    response = client.get("/users")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


def test_get_store_failure_returns_500(client, store, monkeypatch):
    async def broken_find_by_id(user_id):
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(store, "find_by_id", broken_find_by_id)

    assert client.get(f"/users/{ObjectId()}").status_code == 500
    assert client.put(f"/users/{ObjectId()}", json={"name": "X"}).status_code == 500


def test_update_with_form_body(client):
    user = register_user(client)

    response = client.put(f"/users/{user['id']}", data={"description": "From a form"})
    assert response.status_code == 200
    assert response.json()["description"] == "From a form"
    assert response.json()["name"] == user["name"]
