"""API endpoint tests."""

from unittest.mock import patch

from conftest import register_and_login

from taskboard.data.users import UserStore


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_api_info(client):
    """Test the endpoint index."""
    response = client.get("/api")
    assert response.status_code == 200
    assert response.json()["endpoints"]["tasks"]["create"] == "POST /api/tasks"


def test_database_connectivity(client, auth_headers):
    """Test the database check reports the user count."""
    response = client.get("/api/test-db")
    assert response.status_code == 200
    assert response.json()["status"] == "connected"
    assert response.json()["user_count"] == 1


def test_register_user(client):
    """Test user registration."""
    response = client.post(
        "/api/auth/register", json={"username": "new_user", "password": "password123"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["user"]["username"] == "new_user"
    assert data["user"]["id"]
    assert "password_hash" not in data["user"]


def test_register_duplicate_username(client, auth_headers):
    """Test registration with duplicate username fails."""
    response = client.post(
        "/api/auth/register", json={"username": auth_headers.username, "password": "password123"}
    )
    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


def test_register_invalid_username(client):
    """Test usernames are restricted to letters, digits and underscores."""
    response = client.post("/api/auth/register", json={"username": "a b", "password": "password123"})
    assert response.status_code == 422


def test_register_short_password(client):
    """Test passwords need at least 6 characters."""
    response = client.post("/api/auth/register", json={"username": "shorty", "password": "123"})
    assert response.status_code == 422


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/api/auth/login", json={"username": auth_headers.username, "password": "testpass123"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"] == {"id": auth_headers.user_id, "username": auth_headers.username}


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password."""
    response = client.post(
        "/api/auth/login", json={"username": auth_headers.username, "password": "wrongpass"}
    )
    assert response.status_code == 401


def test_login_unknown_user(client):
    """Test login with an unknown username."""
    response = client.post("/api/auth/login", json={"username": "ghost", "password": "whatever"})
    assert response.status_code == 401


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["username"] == auth_headers.username


def test_requires_authentication(client):
    """Test endpoints reject missing and invalid tokens."""
    assert client.get("/api/tasks").status_code in (401, 403)
    response = client.get("/api/tasks", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_get_profile(client, auth_headers):
    """Test reading the profile."""
    response = client.get("/api/profile", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == auth_headers.user_id
    assert data["email"] is None
    assert "password_hash" not in data


def test_update_profile(client, auth_headers):
    """Test updating profile fields, including clearing one with an empty string."""
    response = client.put(
        "/api/profile",
        headers=auth_headers,
        json={"email": "test@example.com", "first_name": "Test", "bio": "Hello"},
    )
    assert response.status_code == 200
    assert response.json()["first_name"] == "Test"

    response = client.put("/api/profile", headers=auth_headers, json={"bio": ""})
    assert response.status_code == 200
    data = response.json()
    assert data["bio"] is None
    assert data["email"] == "test@example.com"
    assert data["first_name"] == "Test"


def test_change_password(client, auth_headers):
    """Test changing the password and logging in with the new one."""
    response = client.post(
        "/api/profile/change-password",
        headers=auth_headers,
        json={"current_password": "testpass123", "new_password": "newpass456"},
    )
    assert response.status_code == 200

    old = client.post(
        "/api/auth/login", json={"username": auth_headers.username, "password": "testpass123"}
    )
    new = client.post(
        "/api/auth/login", json={"username": auth_headers.username, "password": "newpass456"}
    )
    assert old.status_code == 401
    assert new.status_code == 200


def test_change_password_wrong_current(client, auth_headers):
    """Test the current password must match."""
    response = client.post(
        "/api/profile/change-password",
        headers=auth_headers,
        json={"current_password": "wrongpass", "new_password": "newpass456"},
    )
    assert response.status_code == 401


def test_change_password_user_removed(client, auth_headers):
    """Test a user deleted before the password write gets 404, not success."""
    with patch.object(UserStore, "update_password", return_value=False):
        response = client.post(
            "/api/profile/change-password",
            headers=auth_headers,
            json={"current_password": "testpass123", "new_password": "newpass456"},
        )

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_create_task(client, auth_headers):
    """Test creating a task."""
    response = client.post(
        "/api/tasks",
        headers=auth_headers,
        json={"title": "Write report", "description": "Quarterly numbers"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Write report"
    assert data["status"] == "pending"
    assert data["user_id"] == auth_headers.user_id


def test_create_task_requires_title(client, auth_headers):
    """Test a blank title is rejected."""
    response = client.post("/api/tasks", headers=auth_headers, json={"title": ""})
    assert response.status_code == 422


def test_create_task_rejects_unknown_status(client, auth_headers):
    """Test only pending and completed are accepted."""
    response = client.post(
        "/api/tasks", headers=auth_headers, json={"title": "Odd", "status": "archived"}
    )
    assert response.status_code == 422


def test_get_tasks(client, auth_headers):
    """Test listing tasks."""
    client.post("/api/tasks", headers=auth_headers, json={"title": "One"})
    client.post("/api/tasks", headers=auth_headers, json={"title": "Two", "status": "completed"})

    response = client.get("/api/tasks", headers=auth_headers)
    assert response.status_code == 200
    assert sorted(task["title"] for task in response.json()) == ["One", "Two"]


def test_get_task(client, auth_headers):
    """Test reading a single task."""
    task_id = client.post("/api/tasks", headers=auth_headers, json={"title": "Read me"}).json()["id"]

    response = client.get(f"/api/tasks/{task_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["title"] == "Read me"


def test_update_task(client, auth_headers):
    """Test updating a task."""
    task_id = client.post(
        "/api/tasks", headers=auth_headers, json={"title": "Draft", "description": "notes"}
    ).json()["id"]

    response = client.put(
        f"/api/tasks/{task_id}", headers=auth_headers, json={"status": "completed"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["title"] == "Draft"
    assert data["description"] == "notes"

    response = client.put(f"/api/tasks/{task_id}", headers=auth_headers, json={"description": ""})
    assert response.json()["description"] is None


def test_delete_task(client, auth_headers):
    """Test deleting a task."""
    task_id = client.post("/api/tasks", headers=auth_headers, json={"title": "Bye"}).json()["id"]

    response = client.delete(f"/api/tasks/{task_id}", headers=auth_headers)
    assert response.status_code == 200

    assert client.get(f"/api/tasks/{task_id}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/tasks/{task_id}", headers=auth_headers).status_code == 404


def test_task_not_found(client, auth_headers):
    """Test 404 for unknown and malformed task ids."""
    assert client.get("/api/tasks/not-a-uuid", headers=auth_headers).status_code == 404
    response = client.put(
        "/api/tasks/00000000-0000-0000-0000-000000000000",
        headers=auth_headers,
        json={"title": "Nope"},
    )
    assert response.status_code == 404


def test_tasks_are_private(client, auth_headers):
    """Test another user cannot read, change or delete someone else's task."""
    task_id = client.post("/api/tasks", headers=auth_headers, json={"title": "Mine"}).json()["id"]
    other_headers = register_and_login(client, "other_user")

    assert client.get(f"/api/tasks/{task_id}", headers=other_headers).status_code == 404
    response = client.put(f"/api/tasks/{task_id}", headers=other_headers, json={"title": "Theirs"})
    assert response.status_code == 404
    assert client.delete(f"/api/tasks/{task_id}", headers=other_headers).status_code == 404
    assert client.get("/api/tasks", headers=other_headers).json() == []

    response = client.get(f"/api/tasks/{task_id}", headers=auth_headers)
    assert response.json()["title"] == "Mine"
