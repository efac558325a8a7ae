import os

import pytest

from formcraft.config.settings import settings
from formcraft.utils.errors import InternalError


@pytest.fixture
def owner(register):
    _, headers = register(email="pages@example.com")
    return headers


@pytest.fixture
def form_id(client, owner, sample_form):
    themed = {**sample_form, "theme": {"primaryColor": "#123456", "companyName": "Acme Corp"}}
    response = client.post("/api/forms", headers=owner, json=themed)
    assert response.status_code == 201, response.text
    return response.json()["_id"]


def submissions(client, owner, form_id):
    return client.get(f"/api/forms/{form_id}/submissions", headers=owner).json()


def test_unknown_id_renders_demo_form(client):
    page = client.get("/f/does-not-exist")
    assert page.status_code == 200
    assert 'data-demo="true"' in page.text
    assert "Demo Company" in page.text
    assert "Submit Demo Form" in page.text

    assert client.get("/api/forms/does-not-exist").status_code == 404


def test_themed_page_renders_every_field(client, form_id):
    page = client.get(f"/f/{form_id}")
    assert page.status_code == 200
    assert "--primary-color: #123456" in page.text
    assert "Acme Corp" in page.text
    assert 'data-demo="true"' not in page.text
    for field_id in ("name", "email", "plan", "topics"):
        assert f'data-field-id="{field_id}"' in page.text


def test_invalid_post_shows_errors_and_keeps_values(client, owner, form_id):
    page = client.post(f"/f/{form_id}", data={"email": "nope", "topics": ["Y"]})
    assert page.status_code == 400
    assert "Name is required" in page.text
    assert "Please enter a valid email address" in page.text
    assert 'value="nope"' in page.text
    assert 'value="Y" checked' in page.text
    assert submissions(client, owner, form_id) == []


def test_valid_post_stores_submission(client, owner, form_id):
    page = client.post(
        f"/f/{form_id}",
        data={"name": "Alice", "email": "alice@example.com", "plan": "Pro", "topics": ["X", "Z"]},
        headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
    )
    assert page.status_code == 201
    assert "Thank you!" in page.text

    [stored] = submissions(client, owner, form_id)
    assert stored["responses"] == {"name": "Alice", "email": "alice@example.com", "plan": "Pro", "topics": ["X", "Z"]}
    assert stored["ipAddress"] == "203.0.113.9"


def test_choice_outside_options_is_rejected(client, owner, form_id):
    page = client.post(f"/f/{form_id}", data={"name": "Alice", "email": "a@b.co", "plan": "Enterprise"})
    assert page.status_code == 400
    assert "Plan has an invalid choice" in page.text
    assert submissions(client, owner, form_id) == []


def test_demo_post_is_never_stored(client, db):
    page = client.post("/f/nothing-here", data={"name": "A", "email": "a@b.co", "message": "hi"})
    assert page.status_code == 200
    assert "This is a demo form" in page.text
    assert db.stores.volatile.total() == 0
    assert db.stores.durable.total() == 0


def test_file_answer_is_saved_and_referenced(client, owner):
    form_id = client.post("/api/forms", headers=owner, json={
        "title": "Apply",
        "fields": [{"id": "cv", "type": "file", "label": "CV", "required": True}],
    }).json()["_id"]

    missing = client.post(f"/f/{form_id}", data={})
    assert missing.status_code == 400
    assert "CV is required" in missing.text

    page = client.post(f"/f/{form_id}", files={"cv": ("resume.pdf", b"%PDF-1.4", "application/pdf")})
    assert page.status_code == 201

    [stored] = submissions(client, owner, form_id)
    handle = stored["responses"]["cv"]
    assert handle.startswith("/uploads/") and handle.endswith(".pdf")
    with open(os.path.join(settings.UPLOAD_DIR, os.path.basename(handle)), "rb") as saved:
        assert saved.read() == b"%PDF-1.4"
    assert client.get(handle).content == b"%PDF-1.4"


def test_failed_store_removes_saved_upload(client, owner, db, monkeypatch):
    form_id = client.post("/api/forms", headers=owner, json={
        "title": "Apply",
        "fields": [{"id": "cv", "type": "file", "label": "CV", "required": True}],
    }).json()["_id"]
    before = set(os.listdir(settings.UPLOAD_DIR))

    async def failing_create(collection_name, document):
        raise InternalError()

    monkeypatch.setattr(db, "create", failing_create)
    page = client.post(f"/f/{form_id}", files={"cv": ("resume.pdf", b"%PDF-1.4", "application/pdf")})

    assert page.status_code == 500
    assert "could not be saved" in page.text
    assert set(os.listdir(settings.UPLOAD_DIR)) == before
