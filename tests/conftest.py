from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

from stackit.config import auth, database
from stackit.main import app
from stackit.router import AnswerService, QuestionService, UserService, documents

# Every module that holds its own reference to the db handle
DB_MODULES = [database, auth, documents, UserService, QuestionService, AnswerService]


@pytest.fixture
def mongo_db(monkeypatch):
    test_db = mongomock.MongoClient()["stackit_test"]
    for module in DB_MODULES:
        monkeypatch.setattr(module, "db", test_db)
    database.ensure_indexes(test_db)
    return test_db


@pytest.fixture
def client(mongo_db):
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user and return (user_id, auth headers)."""
    def _register(username="alice", email=None, password="secret123"):
        response = client.post("/api/users/register", json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return body["id"], {"Authorization": f"Bearer {body['token']}"}
    return _register


@pytest.fixture
def insert_question(mongo_db):
    """Insert a question document directly, bypassing the API."""
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _insert(author_id, **overrides):
        counter["n"] += 1
        created = base_time + timedelta(minutes=counter["n"])
        doc = {
            "title": f"Question number {counter['n']} about things",
            "description": "A sufficiently long description for the question.",
            "tags": [],
            "author": documents.to_object_id(author_id),
            "answers": [],
            "acceptedAnswer": None,
            "votes": [],
            "views": 0,
            "isActive": True,
            "createdAt": created,
            "updatedAt": created,
        }
        doc.update(overrides)
        return mongo_db.questions.insert_one(doc).inserted_id
    return _insert
