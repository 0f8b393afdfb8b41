def signup(client, email="signup@example.com", username="signup_user", password="password123"):
    return client.post("/auth/signup", json={
        "email": email,
        "username": username,
        "password": password
    })


def test_signup_success(client):
    """Test : créer un utilisateur avec succès"""
    response = signup(client)
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "signup@example.com"
    assert data["username"] == "signup_user"
    assert "id" in data
    assert "password_hash" not in data  # Le password ne doit pas être retourné


def test_signup_duplicate_email(client):
    """Test : impossible de créer 2 users avec le même email"""
    signup(client, username="user1")
    response = signup(client, username="user2")
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_signup_duplicate_username(client):
    signup(client, email="a@example.com")
    response = signup(client, email="b@example.com")
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already taken"


def test_login_success(client):
    """Test : se connecter avec succès"""
    signup(client)
    response = client.post("/auth/login", json={
        "email": "signup@example.com",
        "password": "password123"
    })
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["token_type"] == "bearer"


def test_login_wrong_password(client):
    """Test : impossible de se connecter avec un mauvais password"""
    signup(client)
    response = client.post("/auth/login", json={
        "email": "signup@example.com",
        "password": "wrongpassword"
    })
    assert response.status_code == 401


def test_refresh_token(client):
    signup(client)
    tokens = client.post("/auth/login", json={"email": "signup@example.com", "password": "password123"}).json()

    response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["access_token"]

    # un access token n'est pas un refresh token
    response = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


def test_refresh_token_cannot_authenticate(client):
    signup(client)
    tokens = client.post("/auth/login", json={"email": "signup@example.com", "password": "password123"}).json()

    response = client.get("/today", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert response.status_code == 401


def test_health_z(client):
    """Test : l'endpoint health fonctionne"""
    response = client.get("/health/z")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
