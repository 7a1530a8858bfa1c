from fastapi import status

from conftest import make_auth_headers

API = "/api/v1"


def _signup(client, slug="acme", email="owner@example.com"):
    payload = {
        "agency_name": slug.title(),
        "agency_slug": slug,
        "industry": "marketing",
        "email": email,
        "password": "securepassword123",
        "full_name": "Owner",
    }
    response = client.post(f"{API}/auth/signup", json=payload)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "healthy"


def test_signup_login_and_current_agency(client):
    headers = _signup(client)

    me = client.get(f"{API}/users/me", headers=headers).json()
    assert me["role"] == "agency_admin"
    assert me["email"] == "owner@example.com"

    agency = client.get(f"{API}/agencies/current", headers=headers).json()
    assert agency["slug"] == "acme"
    assert agency["id"] == me["agency_id"]

    login = client.post(f"{API}/auth/login", json={"email": "owner@example.com", "password": "securepassword123"})
    assert login.status_code == status.HTTP_200_OK
    assert login.json()["token_type"] == "bearer"

    bad = client.post(f"{API}/auth/login", json={"email": "owner@example.com", "password": "nope"})
    assert bad.status_code == status.HTTP_401_UNAUTHORIZED
    assert bad.json()["type"] == "authentication_error"


def test_duplicate_signup_is_a_conflict(client):
    _signup(client)

    response = client.post(f"{API}/auth/signup", json={
        "agency_name": "Other",
        "agency_slug": "other",
        "email": "owner@example.com",
        "password": "securepassword123",
        "full_name": "Copycat",
    })
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["type"] == "conflict"


def test_requests_without_token_are_rejected(client):
    response = client.get(f"{API}/clients")
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    response = client.get(f"{API}/clients", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_client_and_project_crud(client):
    headers = _signup(client)

    created = client.post(f"{API}/clients", json={"name": "Globex", "email": "info@globex.example.com"}, headers=headers)
    assert created.status_code == status.HTTP_201_CREATED
    client_id = created.json()["id"]

    project = client.post(f"{API}/projects", json={"name": "Website", "client_id": client_id}, headers=headers)
    assert project.status_code == status.HTTP_201_CREATED
    project_id = project.json()["id"]
    assert project.json()["status"] == "planning"
    assert project.json()["created_by"] is not None

    listing = client.get(f"{API}/projects", params={"client_id": client_id}, headers=headers).json()
    assert listing["total"] == 1
    assert listing["items"][0]["id"] == project_id

    patched = client.patch(f"{API}/projects/{project_id}", json={"status": "in_progress"}, headers=headers)
    assert patched.json()["status"] == "in_progress"

    blocked = client.delete(f"{API}/clients/{client_id}", headers=headers)
    assert blocked.status_code == status.HTTP_409_CONFLICT

    assert client.delete(f"{API}/projects/{project_id}", headers=headers).status_code == status.HTTP_204_NO_CONTENT
    assert client.delete(f"{API}/clients/{client_id}", headers=headers).status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"{API}/clients/{client_id}", headers=headers).status_code == status.HTTP_404_NOT_FOUND


def test_tenant_isolation_over_http(client):
    acme = _signup(client, slug="acme", email="a@example.com")
    globex = _signup(client, slug="globex", email="g@example.com")

    client_id = client.post(f"{API}/clients", json={"name": "Secret"}, headers=acme).json()["id"]

    response = client.get(f"{API}/clients/{client_id}", headers=globex)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["type"] == "not_found"
    assert client.get(f"{API}/clients", headers=globex).json()["total"] == 0

    project = client.post(f"{API}/projects", json={"name": "Steal", "client_id": client_id}, headers=globex)
    assert project.status_code == status.HTTP_400_BAD_REQUEST
    assert project.json()["type"] == "validation_error"


def test_client_role_is_read_only(client, db, make_agency, make_user):
    agency = make_agency()
    viewer = make_user(agency, role="client")

    response = client.post(f"{API}/clients", json={"name": "Nope"}, headers=make_auth_headers(viewer))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["type"] == "permission_denied"

    assert client.get(f"{API}/clients", headers=make_auth_headers(viewer)).status_code == status.HTTP_200_OK


def test_invalid_body_is_a_validation_error(client):
    headers = _signup(client)

    response = client.post(f"{API}/leads", json={"name": "No source"}, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["type"] == "validation_error"
    assert "source" in response.json()["detail"]


def test_super_admin_uses_agency_header(client, make_agency, make_user):
    agency = make_agency()
    root = make_user(None, role="super_admin")

    without = client.get(f"{API}/clients", headers=make_auth_headers(root))
    assert without.status_code == status.HTTP_403_FORBIDDEN

    created = client.post(f"{API}/clients", json={"name": "Managed"}, headers=make_auth_headers(root, agency.id))
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["agency_id"] == agency.id

    agencies = client.get(f"{API}/agencies", headers=make_auth_headers(root)).json()
    assert agencies["total"] == 1


def test_team_management_and_cascade(client):
    headers = _signup(client)

    member = client.post(
        f"{API}/users",
        json={"email": "member@example.com", "password": "memberpass123", "full_name": "Member"},
        headers=headers,
    )
    assert member.status_code == status.HTTP_201_CREATED
    assert member.json()["role"] == "team_member"

    client_id = client.post(f"{API}/clients", json={"name": "C1"}, headers=headers).json()["id"]
    client.post(f"{API}/projects", json={"name": "P1", "client_id": client_id}, headers=headers)

    report = client.delete(f"{API}/users/member@example.com", headers=headers)
    assert report.status_code == status.HTTP_200_OK
    assert report.json()["agency_deleted"] is False
    assert client.get(f"{API}/clients/{client_id}", headers=headers).status_code == status.HTTP_200_OK

    me = client.get(f"{API}/users/me", headers=headers).json()
    report = client.delete(f"{API}/users/{me['id']}", headers=headers)
    assert report.status_code == status.HTTP_200_OK
    body = report.json()
    assert body["agency_deleted"] is True
    assert body["deleted"]["clients"] == 1
    assert body["deleted"]["projects"] == 1

    # the token outlives its user but no longer works
    assert client.get(f"{API}/users/me", headers=headers).status_code == status.HTTP_401_UNAUTHORIZED


def test_member_updates_own_profile_but_not_role(client, make_agency, make_user):
    agency = make_agency()
    member = make_user(agency)
    headers = make_auth_headers(member)

    renamed = client.patch(f"{API}/users/{member.id}", json={"full_name": "New Name"}, headers=headers)
    assert renamed.status_code == status.HTTP_200_OK
    assert renamed.json()["full_name"] == "New Name"

    promoted = client.patch(f"{API}/users/{member.id}", json={"role": "agency_admin"}, headers=headers)
    assert promoted.status_code == status.HTTP_403_FORBIDDEN


def test_purge_agency_requires_super_admin(client, make_agency, make_user):
    agency = make_agency()
    admin = make_user(agency, role="agency_admin")
    root = make_user(None, role="super_admin")

    denied = client.delete(f"{API}/agencies/{agency.id}", headers=make_auth_headers(admin))
    assert denied.status_code == status.HTTP_403_FORBIDDEN

    purged = client.delete(f"{API}/agencies/{agency.id}", headers=make_auth_headers(root))
    assert purged.status_code == status.HTTP_200_OK
    assert purged.json()["deleted"]["users"] == 1
