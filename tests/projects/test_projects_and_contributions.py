"""Test module for the SDG project catalog, contributions and statistics."""

from app.modules.projects.models import Contribution, PaymentStatus, Project


def test_create_project_defaults(test_project, test_user):
    """Test case for a new project starting unfunded and active."""
    assert test_project.creator_id == test_user.id
    assert test_project.status == "active"
    assert test_project.current_amount == 0
    assert test_project.progress == 0
    assert test_project.creator["email"] == "learner@example.com"


def test_create_project_validates_sdg(client, user_headers):
    """Test case for SDG ids outside 1..17."""
    res = client.post(
        "/api/projects",
        json={"title": "X", "description": "Y", "sdg_id": 18, "target_amount": 10},
        headers=user_headers,
    )
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "validation_error"


def test_create_project_requires_login(client):
    """Test case for anonymous project creation."""
    res = client.post(
        "/api/projects",
        json={"title": "X", "description": "Y", "sdg_id": 1},
    )
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "invalid_token"


def test_owner_can_update_but_not_funding(client, session, test_project, user_headers):
    """Test case for edits never reaching the funding totals."""
    res = client.put(
        f"/api/projects/{test_project.id}",
        json={"title": "Solar Classrooms Phase 2", "status": "paused", "current_amount": 999, "progress": 80},
        headers=user_headers,
    )

    assert res.status_code == 200
    body = res.json()
    assert body["title"] == "Solar Classrooms Phase 2"
    assert body["status"] == "paused"
    assert body["current_amount"] == 0
    assert body["progress"] == 0


def test_non_owner_cannot_update_or_delete(client, test_project, user2_headers):
    """Test case for ownership checks on project edits."""
    update = client.put(
        f"/api/projects/{test_project.id}", json={"title": "Hijacked"}, headers=user2_headers
    )
    delete = client.delete(f"/api/projects/{test_project.id}", headers=user2_headers)

    assert update.status_code == 403
    assert delete.status_code == 403
    assert update.json()["error"]["code"] == "permission_denied"


def test_delete_project_cascades_contributions(
    client, session, test_project, user_headers, user2_headers
):
    """Test case for deleting a project removing its contributions."""
    client.post(
        "/api/contributions",
        json={"project_id": test_project.id, "amount": 50, "type": "monetary"},
        headers=user2_headers,
    )

    res = client.delete(f"/api/projects/{test_project.id}", headers=user_headers)

    assert res.status_code == 204
    assert client.get(f"/api/projects/{test_project.id}").status_code == 404
    assert session.query(Project).count() == 0
    assert session.query(Contribution).count() == 0


def test_list_projects_and_sdg_filter(client, test_project, user_headers):
    """Test case for catalog listings, newest first and per SDG."""
    other = client.post(
        "/api/projects",
        json={"title": "Clinic Fund", "description": "Maternal care", "sdg_id": 3, "target_amount": 5000},
        headers=user_headers,
    ).json()

    everything = client.get("/api/projects").json()
    education = client.get("/api/sdgs/4/projects").json()
    mine = client.get("/api/user/projects", headers=user_headers).json()

    assert [p["id"] for p in everything] == [other["id"], test_project.id]
    assert [p["id"] for p in education] == [test_project.id]
    assert len(mine) == 2
    assert client.get("/api/sdgs/0/projects").status_code == 422


def test_contribution_is_pending_and_listed(client, test_project, user2_headers):
    """Test case for contribution intake and the per-project listing."""
    res = client.post(
        "/api/contributions",
        json={
            "projectId": test_project.id,
            "amount": 120,
            "type": "monetary",
            "transactionCode": "QGH7XK29LM",
            "paymentMethod": "manual_mpesa",
        },
        headers=user2_headers,
    )

    assert res.status_code == 201
    assert res.json()["payment_status"] == "pending"

    listing = client.get(f"/api/projects/{test_project.id}/contributions").json()
    assert len(listing) == 1
    assert listing[0]["user"]["name"] == "Brian Donor"

    mine = client.get("/api/user/contributions", headers=user2_headers).json()
    assert mine[0]["project"]["title"] == "Solar Classrooms"


def test_contribution_validation(client, test_project, user2_headers):
    """Test case for negative amounts and unknown contribution types."""
    negative = client.post(
        "/api/contributions",
        json={"project_id": test_project.id, "amount": -1, "type": "monetary"},
        headers=user2_headers,
    )
    bad_type = client.post(
        "/api/contributions",
        json={"project_id": test_project.id, "amount": 1, "type": "crypto"},
        headers=user2_headers,
    )

    assert negative.status_code == 422
    assert bad_type.status_code == 422


def test_contribution_to_missing_project(client, session, user2_headers):
    """Test case for pledging to a project that does not exist."""
    res = client.post(
        "/api/contributions",
        json={"project_id": 31337, "amount": 10, "type": "monetary"},
        headers=user2_headers,
    )

    assert res.status_code == 404
    assert session.query(Contribution).count() == 0


def test_stats_count_only_completed_funding(
    client, session, test_project, user2_headers, admin_headers
):
    """Test case for platform statistics ignoring unapproved money."""
    approved = client.post(
        "/api/contributions",
        json={"project_id": test_project.id, "amount": 200, "type": "monetary"},
        headers=user2_headers,
    ).json()
    client.post(
        "/api/contributions",
        json={"project_id": test_project.id, "amount": 700, "type": "monetary"},
        headers=user2_headers,
    )
    client.post(
        "/api/admin/approve-payment",
        json={"type": "contribution", "id": approved["id"]},
        headers=admin_headers,
    )

    stats = client.get("/api/stats").json()

    assert stats["totalProjects"] == 1
    assert stats["activeProjects"] == 1
    assert stats["completedProjects"] == 0
    assert stats["totalUsers"] == 3
    assert stats["totalContributions"] == 2
    assert stats["totalFunding"] == 200
    assert stats["sdgDistribution"] == [{"sdg_id": 4, "count": 1}]
    session.expire_all()
    statuses = {c.payment_status for c in session.query(Contribution).all()}
    assert statuses == {PaymentStatus.PENDING, PaymentStatus.COMPLETED}


def test_changing_target_recomputes_progress(
    client, session, test_project, user_headers, user2_headers, admin_headers
):
    """Test case for progress following a new funding target."""
    contribution = client.post(
        "/api/contributions",
        json={"project_id": test_project.id, "amount": 500, "type": "monetary"},
        headers=user2_headers,
    ).json()
    client.post(
        "/api/admin/approve-payment",
        json={"type": "contribution", "id": contribution["id"]},
        headers=admin_headers,
    )

    raised = client.put(
        f"/api/projects/{test_project.id}", json={"target_amount": 2000}, headers=user_headers
    )
    lowered = client.put(
        f"/api/projects/{test_project.id}", json={"targetAmount": 250}, headers=user_headers
    )
    cleared = client.put(
        f"/api/projects/{test_project.id}", json={"target_amount": 0}, headers=user_headers
    )
    renamed = client.put(
        f"/api/projects/{test_project.id}", json={"title": "Solar Labs"}, headers=user_headers
    )

    assert raised.json()["progress"] == 25
    assert lowered.json()["progress"] == 100
    assert cleared.json()["progress"] == 100
    assert renamed.json()["progress"] == 100
    assert renamed.json()["current_amount"] == 500
