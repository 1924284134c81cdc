from fastapi import status

def test_login_success(client, employee):
    response = client.post("/login", json={"email": employee.email, "password": "Password123!"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "ok"
    assert data["user"] == {"id": employee.id, "name": "Evan Employee", "role": "Employee"}

def test_login_invalid_credentials(client, employee):
    response = client.post("/login", json={"email": employee.email, "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["code"] == "AUTH_FAILED"

def test_login_unknown_email(client):
    response = client.post("/login", json={"email": "nobody@apascorp.com", "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_signup_then_login(client):
    payload = {
        "employee_name": "Sam Signup",
        "employee_email": "sam@apascorp.com",
        "password": "Signup123!",
        "role_id": 4,
        "department_id": 2,
    }
    response = client.post("/signup", json=payload)
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

    login = client.post("/login", json={"email": "sam@apascorp.com", "password": "Signup123!"})
    assert login.status_code == 200
    assert login.json()["user"]["name"] == "Sam Signup"

def test_signup_missing_fields(client):
    response = client.post("/signup", json={"employee_name": "Incomplete"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
