import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from auth import auth_utils
from controllers import auth_controller, event_controller, user_controller
from controllers.auth_controller import hash_password, token_for_user
from main import app
from middleware.rate_limiter import limiter
from tests.fake_mongo import FakeCollection


def make_event(**overrides) -> dict:
    now = datetime.now(timezone.utc)
    event = {
        "_id": ObjectId(),
        "title": "Global AI Hackathon",
        "description": "Build something intelligent over one long weekend.",
        "short_description": "A weekend of AI building",
        "start_date": now + timedelta(days=10),
        "end_date": now + timedelta(days=12),
        "registration_deadline": now + timedelta(hours=1),
        "location": {"type": "online", "address": None, "city": None, "country": None, "coordinates": None},
        "max_participants": None,
        "current_participants": 0,
        "categories": ["ai-ml"],
        "difficulty": "intermediate",
        "status": "registration-open",
        "is_featured": False,
        "organizers": [],
        "statistics": {"views": 0, "registrations": 0, "submissions": 0},
        "tags": [],
        "rules": [],
        "cover_image": None,
        "registration_fee": 0,
        "currency": "USD",
        "created_at": now,
        "updated_at": now,
    }
    event.update(overrides)
    return event


def make_user(**overrides) -> dict:
    user = {
        "_id": ObjectId(),
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "password_hash": "not-a-real-hash",
        "bio": "Analyst",
        "avatar": None,
        "social_links": {
            "github": "https://github.com/ada",
            "linkedin": None,
            "twitter": None,
            "website": "https://ada.dev/",
        },
        "preferences": {"theme": "dark", "notifications": {"email": True, "push": False}},
        "role": "member",
        "is_active": True,
        "created_at": datetime.now(timezone.utc),
        "last_login": None,
    }
    user.update(overrides)
    return user


def auth_headers(user: dict) -> dict:
    return {"Authorization": f"Bearer {token_for_user(user)}"}


@pytest.fixture
def events_collection(monkeypatch):
    collection = FakeCollection()
    monkeypatch.setattr(event_controller, "events_collection", collection)
    return collection


@pytest.fixture
def users_collection(monkeypatch):
    collection = FakeCollection()
    monkeypatch.setattr(user_controller, "users_collection", collection)
    monkeypatch.setattr(auth_controller, "users_collection", collection)
    monkeypatch.setattr(auth_utils, "users_collection", collection)
    return collection


@pytest.fixture
def client(events_collection, users_collection):
    limiter.enabled = False
    # Not entered as a context manager, so the lifespan never touches MongoDB
    yield TestClient(app)
    limiter.enabled = True


@pytest.fixture
def member(users_collection):
    user = make_user()
    users_collection.documents.append(user)
    return user


@pytest.fixture
def admin(users_collection):
    user = make_user(first_name="Grace", last_name="Hopper", email="grace@example.com", role="admin")
    users_collection.documents.append(user)
    return user


@pytest.fixture
def moderator(users_collection):
    user = make_user(first_name="Alan", last_name="Turing", email="alan@example.com", role="moderator")
    users_collection.documents.append(user)
    return user


@pytest.fixture
def password_user(users_collection):
    user = make_user(email="linus@example.com", password_hash=hash_password("s3cret-pass"))
    users_collection.documents.append(user)
    return user
