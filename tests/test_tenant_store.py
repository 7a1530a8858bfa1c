import pytest
from sqlalchemy import func, select

from agencyhub.core.exceptions import ConflictError, NotFound, ValidationError
from agencyhub.models import Agency, Client, Project, Task, User


def count(db, model, **criteria):
    query = select(func.count()).select_from(model)
    for name, value in criteria.items():
        query = query.where(getattr(model, name) == value)
    return db.scalar(query)


def test_create_and_get_client(store, make_agency):
    agency = make_agency()
    client = store.create("clients", agency.id, {"name": "Acme", "industry": "retail"})

    assert client.agency_id == agency.id
    assert client.status == "active"
    assert store.get("clients", agency.id, client.id).name == "Acme"


def test_record_of_other_agency_reads_as_missing(store, make_agency):
    own, other = make_agency(), make_agency()
    client = store.create("clients", other.id, {"name": "Hidden"})

    assert store.get("clients", own.id, client.id) is None
    assert store.get("clients", own.id, "does-not-exist") is None


def test_update_and_delete_outside_tenant_raise_not_found(db, store, make_agency):
    own, other = make_agency(), make_agency()
    client = store.create("clients", other.id, {"name": "Hidden"})

    with pytest.raises(NotFound):
        store.update("clients", own.id, client.id, {"name": "Renamed"})
    with pytest.raises(NotFound):
        store.delete("clients", own.id, client.id)

    db.expire_all()
    assert store.get("clients", other.id, client.id).name == "Hidden"


def test_project_with_client_of_other_agency_is_rejected(db, store, make_agency):
    own, other = make_agency(), make_agency()
    foreign_client = store.create("clients", other.id, {"name": "Foreign"})

    with pytest.raises(ValidationError):
        store.create("projects", own.id, {"name": "Website", "client_id": foreign_client.id})

    assert count(db, Project) == 0


def test_task_references_must_resolve_in_same_agency(db, store, make_agency, make_user):
    own, other = make_agency(), make_agency()
    outsider = make_user(other)
    project = store.create("projects", own.id, {"name": "App"})

    with pytest.raises(ValidationError):
        store.create("tasks", own.id, {"title": "Kickoff", "project_id": project.id, "assigned_to": outsider.id})
    with pytest.raises(ValidationError):
        store.create("tasks", own.id, {"title": "Kickoff", "lead_id": "missing"})

    assert count(db, Task) == 0


def test_missing_required_fields(store, make_agency):
    agency = make_agency()

    with pytest.raises(ValidationError) as exc_info:
        store.create("leads", agency.id, {"name": "Dana"})
    assert "source" in exc_info.value.detail

    with pytest.raises(ValidationError):
        store.create("clients", agency.id, {"name": "   "})


def test_create_for_unknown_agency_is_rejected(db, store):
    with pytest.raises(ValidationError):
        store.create("clients", "no-such-agency", {"name": "Orphan"})
    assert count(db, Client) == 0


def test_protected_and_unknown_fields_are_rejected(store, make_agency):
    agency, other = make_agency(), make_agency()

    with pytest.raises(ValidationError):
        store.create("clients", agency.id, {"name": "Acme", "agency_id": other.id})
    with pytest.raises(ValidationError):
        store.create("clients", agency.id, {"name": "Acme", "favourite_colour": "blue"})

    client = store.create("clients", agency.id, {"name": "Acme"})
    with pytest.raises(ValidationError):
        store.update("clients", agency.id, client.id, {"agency_id": other.id})


def test_unknown_entity_type(store, make_agency):
    with pytest.raises(ValidationError):
        store.list("invoices", make_agency().id)


def test_list_filters_and_pagination(store, make_agency):
    agency, other = make_agency(), make_agency()
    for n in range(5):
        store.create("clients", agency.id, {"name": f"Client {n}", "status": "active" if n % 2 else "pending"})
    store.create("clients", other.id, {"name": "Elsewhere"})

    records, total = store.list("clients", agency.id, limit=2, offset=0)
    assert total == 5
    assert len(records) == 2

    pending, total = store.list("clients", agency.id, filters={"status": "pending"})
    assert total == 3
    assert {c.status for c in pending} == {"pending"}

    with pytest.raises(ValidationError):
        store.list("clients", agency.id, filters={"nope": 1})


def test_deleting_referenced_client_is_a_conflict(db, store, make_agency):
    agency = make_agency()
    client = store.create("clients", agency.id, {"name": "Acme"})
    store.create("projects", agency.id, {"name": "Website", "client_id": client.id})

    with pytest.raises(ConflictError):
        store.delete("clients", agency.id, client.id)

    assert count(db, Client, id=client.id) == 1


def test_duplicate_email_and_slug_are_conflicts(store, make_agency, make_user):
    agency = make_agency(slug="acme")
    make_user(agency, email="dana@example.com")

    with pytest.raises(ConflictError):
        make_user(agency, email="Dana@Example.com")
    with pytest.raises(ConflictError):
        make_agency(slug="acme")


def test_agency_is_required_except_for_super_admin(db, make_agency, make_user):
    with pytest.raises(ValidationError):
        make_user(None, role="team_member")

    root = make_user(None, role="super_admin")
    assert root.agency_id is None
    assert count(db, User) == 1


def test_unknown_role_is_rejected(make_agency, make_user):
    with pytest.raises(ValidationError):
        make_user(make_agency(), role="owner")


def test_update_user_hashes_password_and_normalizes_email(store, make_agency, make_user):
    agency = make_agency()
    user = make_user(agency)

    updated = store.update_user(agency.id, user.id, {"email": "New@Example.com", "password": "s3cret-pass"})

    assert updated.email == "new@example.com"
    assert updated.hashed_password and updated.hashed_password != "s3cret-pass"


def test_update_agency(store, make_agency):
    agency = make_agency()
    updated = store.update_agency(agency.id, {"industry": "video"})
    assert updated.industry == "video"

    with pytest.raises(ValidationError):
        store.update_agency(agency.id, {"name": ""})
    with pytest.raises(NotFound):
        store.update_agency("missing", {"name": "x"})


def test_list_agencies(db, store, make_agency):
    for _ in range(3):
        make_agency()
    agencies, total = store.list_agencies(limit=2)
    assert total == 3 == count(db, Agency)
    assert len(agencies) == 2
