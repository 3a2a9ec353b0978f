import os
import sys
import uuid
import pathlib
from datetime import datetime
from fastapi.testclient import TestClient

# Configure environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
base_dir = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(base_dir))

from sqlalchemy.exc import OperationalError

from article_publisher.main import app, database, get_store
from article_publisher.dates import format_date
from article_publisher.models import Article, DEFAULT_IMAGE

client = TestClient(app)


def setup_function():
    database.drop_schema()
    database.create_schema()


def create(**fields):
    r = client.post("/api/articles", json=fields)
    assert r.status_code == 201, r.text
    return r.json()


def test_create_applies_defaults():
    r = client.post("/api/articles", json={"title": "T", "description": "D"})
    assert r.status_code == 201
    data = r.json()
    assert data["title"] == "T"
    assert data["description"] == "D"
    assert data["category"] == "General"
    assert data["image"] == DEFAULT_IMAGE
    assert data["sites"] == ["rbiomeds"]
    assert data["date"] == format_date(datetime.now())
    assert isinstance(data["id"], str)
    uuid.UUID(data["id"])
    assert "createdAt" in data
    assert "version_id" not in data
    assert "_id" not in data


def test_create_keeps_given_fields():
    data = create(
        title="T",
        description="D",
        image="https://cdn.example.com/a.png",
        category="Research",
        sites=["abc-international", "abc-international"],
        date="2024-03-05",
    )
    assert data["image"] == "https://cdn.example.com/a.png"
    assert data["category"] == "Research"
    assert data["sites"] == ["abc-international", "abc-international"]
    assert data["date"] == "March 05, 2024"


def test_create_with_empty_sites_uses_default():
    data = create(title="T", description="D", sites=[])
    assert data["sites"] == ["rbiomeds"]


def test_create_missing_required_fields_fails():
    r = client.post("/api/articles", json={"title": "T"})
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to create article"

    r = client.post("/api/articles", json={"title": "", "description": "D"})
    assert r.status_code == 500

    assert client.get("/api/articles").json() == []


def test_create_with_impossible_date_fails():
    r = client.post(
        "/api/articles",
        json={"title": "T", "description": "D", "date": "2024-02-31"},
    )
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to create article"


def test_list_orders_by_date_then_creation():
    create(title="old", description="D", date="2024-01-01")
    create(title="first", description="D", date="2024-03-05")
    create(title="second", description="D", date="2024-03-05")

    r = client.get("/api/articles")
    assert r.status_code == 200
    assert [a["title"] for a in r.json()] == ["second", "first", "old"]


def test_list_filters_by_site():
    create(title="rb", description="D")
    create(title="abc", description="D", sites=["abc-international"])
    create(title="both", description="D", sites=["rbiomeds", "abc-international"])

    r = client.get("/api/articles?site=abc-international")
    assert r.status_code == 200
    data = r.json()
    assert {a["title"] for a in data} == {"abc", "both"}
    assert all("abc-international" in a["sites"] for a in data)

    r = client.get("/api/articles?site=both")
    assert [a["title"] for a in r.json()] == ["both"]

    r = client.get("/api/articles?site=unknown")
    assert r.status_code == 200
    assert r.json() == []


def test_list_rbiomeds_includes_legacy_records():
    create(title="rb", description="D")
    db = database.SessionLocal()
    try:
        db.add(Article(title="legacy", description="D"))
        db.commit()
    finally:
        db.close()

    r = client.get("/api/articles?site=rbiomeds")
    data = {a["title"]: a for a in r.json()}
    assert set(data) == {"rb", "legacy"}
    assert data["legacy"]["sites"] == []


def test_get_article_by_id():
    created = create(title="T", description="D")
    r = client.get(f"/api/articles/{created['id']}")
    assert r.status_code == 200
    assert r.json() == created

    r = client.get(f"/api/articles/{uuid.uuid4()}")
    assert r.status_code == 404
    r = client.get("/api/articles/not-an-id")
    assert r.status_code == 404


def test_update_replaces_fields_and_resets_sites():
    created = create(
        title="T",
        description="D",
        sites=["abc-international"],
        date="2024-03-05",
    )
    r = client.put(
        f"/api/articles/{created['id']}",
        json={"title": "New", "category": "News"},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["id"] == created["id"]
    assert data["title"] == "New"
    assert data["description"] == "D"
    assert data["category"] == "News"
    assert data["sites"] == ["rbiomeds"]
    assert data["date"] == "March 05, 2024"
    assert data["createdAt"] == created["createdAt"]


def test_update_sets_sites_and_date():
    created = create(title="T", description="D")
    r = client.put(
        f"/api/articles/{created['id']}",
        json={"sites": ["rbiomeds", "abc-international"], "date": "2023-12-31"},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["sites"] == ["rbiomeds", "abc-international"]
    assert data["date"] == "December 31, 2023"

    r = client.get("/api/articles?site=both")
    assert [a["id"] for a in r.json()] == [created["id"]]


def test_update_missing_article():
    r = client.put(f"/api/articles/{uuid.uuid4()}", json={"title": "X"})
    assert r.status_code == 404
    assert r.json()["detail"] == "Article not found"

    r = client.put("/api/articles/123", json={"title": "X"})
    assert r.status_code == 404


def test_delete_article():
    created = create(title="T", description="D")
    r = client.delete(f"/api/articles/{created['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Article deleted successfully"}
    assert client.get("/api/articles").json() == []

    r = client.delete(f"/api/articles/{created['id']}")
    assert r.status_code == 404
    assert r.json()["detail"] == "Article not found"


class BrokenStore:
    def get(self, article_id):
        raise OperationalError("SELECT", {}, Exception("database is locked"))


def test_get_article_storage_failure():
    app.dependency_overrides[get_store] = lambda: BrokenStore()
    try:
        r = client.get(f"/api/articles/{uuid.uuid4()}")
    finally:
        app.dependency_overrides.pop(get_store, None)
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to fetch article"
