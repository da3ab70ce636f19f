from fastapi.testclient import TestClient

PASSWORD = "secret123"


def register(client: TestClient, username: str, email: str | None = None, password: str = PASSWORD):
    email = email or f"{username.lower()}@mail.com"
    return client.post("/user/create", json={
        "username": username,
        "email": email,
        "password": password,
        "confirmPassword": password,
        "location": "Paris",
        "interests": ["concert", "sport"],
    })


def login_headers(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    response = client.post("/user/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"x-auth-token": response.json()["token"]}


def signed_up(client: TestClient, username: str) -> tuple[int, dict]:
    """Register ``username`` and return its id with auth headers."""
    response = register(client, username)
    assert response.status_code == 201, response.text
    return response.json()["id"], login_headers(client, response.json()["email"])


def event_payload(**overrides) -> dict:
    payload = {
        "title": "Concert au parc",
        "description": "Open air concert",
        "category": "concert",
        "date": "2026-07-14T20:00:00",
        "time": "20:00",
        "location": "Lyon",
        "participantsNumber": 10,
    }
    payload.update(overrides)
    return payload
