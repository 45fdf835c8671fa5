import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from adslip import create_app, db


@pytest.fixture
def client(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "UPLOAD_FOLDER": str(tmp_path),
        "LOG_LEVEL": "warning",
    })
    with app.test_client() as client:
        yield client
    with app.app_context():
        db.drop_all()


def test_register_login_logout(client):
    res = client.post("/auth/register", json={"email": "Ads@Example.com", "password": "pass"})
    assert res.status_code == 201
    org_id = res.get_json()["data"]["organization_id"]
    assert org_id

    me = client.get("/auth/me").get_json()["data"]
    assert me["email"] == "ads@example.com"
    assert me["organization_id"] == org_id

    assert client.post("/auth/logout").status_code == 200
    assert client.get("/auth/me").status_code == 401

    assert client.post("/auth/login", json={"email": "ads@example.com", "password": "bad"}).status_code == 401
    res = client.post("/auth/login", data={"email": "ads@example.com", "password": "pass"})
    assert res.get_json()["data"]["organization_id"] == org_id


def test_register_validation(client):
    assert client.post("/auth/register", json={"email": "x@example.com"}).status_code == 400
    assert client.post("/auth/register", json={"email": "x@example.com", "password": "p"}).status_code == 201
    assert client.post("/auth/register", json={"email": "x@example.com", "password": "p"}).status_code == 409
