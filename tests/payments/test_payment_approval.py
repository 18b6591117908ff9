"""Test module for the admin payment approval flow."""

import threading

import pytest

from app.modules.courses.models import Course, Enrollment
from app.modules.notifications.models import Notification
from app.modules.notifications.service import NotificationService
from app.modules.payments import PaymentApprovalService, PaymentKind, compute_progress
from app.modules.projects.models import Contribution, ContributionType, Project
from app.core.exceptions import InvalidPaymentTypeException, ResourceNotFoundException


def _contribute(client, headers, project_id, amount, kind="monetary"):
    res = client.post(
        "/api/contributions",
        json={
            "project_id": project_id,
            "amount": amount,
            "type": kind,
            "description": "pledge",
            "transaction_code": "QGH7XK29LM",
            "payment_method": "manual_mpesa",
        },
        headers=headers,
    )
    assert res.status_code == 201, res.text
    return res.json()


def _approve(client, headers, kind, payment_id):
    return client.post(
        "/api/admin/approve-payment",
        json={"type": kind, "id": payment_id},
        headers=headers,
    )


def _project(session, project_id):
    session.expire_all()
    return session.query(Project).filter(Project.id == project_id).one()


def test_contribution_does_not_touch_project_before_approval(
    client, session, test_project, user2_headers
):
    """Test case for pending contributions leaving the project totals alone."""
    contribution = _contribute(client, user2_headers, test_project.id, 500)

    assert contribution["payment_status"] == "pending"
    project = _project(session, test_project.id)
    assert project.current_amount == 0
    assert project.progress == 0


def test_approving_contribution_applies_amount_and_progress(
    client, session, test_project, user2_headers, admin_headers
):
    """Test case for 500 of a 1000 target moving progress to 50."""
    contribution = _contribute(client, user2_headers, test_project.id, 500)

    res = _approve(client, admin_headers, "contribution", contribution["id"])

    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Contribution approved"
    assert body["applied"] is True
    assert body["data"]["payment_status"] == "completed"
    project = _project(session, test_project.id)
    assert project.current_amount == 500
    assert project.progress == 50


def test_progress_is_capped_at_one_hundred(
    client, session, user_headers, user2_headers, admin_headers
):
    """Test case for overfunded projects reporting 100 percent."""
    res = client.post(
        "/api/projects",
        json={"title": "Clean Water", "description": "Boreholes", "sdg_id": 6, "target_amount": 1000},
        headers=user_headers,
    )
    project_id = res.json()["id"]
    session.query(Project).filter(Project.id == project_id).update({"current_amount": 900, "progress": 90})
    session.commit()

    contribution = _contribute(client, user2_headers, project_id, 500)
    assert _approve(client, admin_headers, "contribution", contribution["id"]).status_code == 200

    project = _project(session, project_id)
    assert project.current_amount == 1400
    assert project.progress == 100


def test_zero_target_keeps_progress(client, session, user_headers, user2_headers, admin_headers):
    """Test case for projects without a funding target."""
    res = client.post(
        "/api/projects",
        json={"title": "Tree Planting", "description": "Volunteers", "sdg_id": 13, "target_amount": 0},
        headers=user_headers,
    )
    project_id = res.json()["id"]

    contribution = _contribute(client, user2_headers, project_id, 250)
    assert _approve(client, admin_headers, "contribution", contribution["id"]).status_code == 200

    project = _project(session, project_id)
    assert project.current_amount == 250
    assert project.progress == 0


def test_non_monetary_approval_leaves_amount(
    client, session, test_project, user2_headers, admin_headers
):
    """Test case for time pledges completing without moving money totals."""
    contribution = _contribute(client, user2_headers, test_project.id, 10, kind="time")

    res = _approve(client, admin_headers, "contribution", contribution["id"])

    assert res.status_code == 200
    assert res.json()["data"]["payment_status"] == "completed"
    project = _project(session, test_project.id)
    assert project.current_amount == 0
    assert project.progress == 0


def test_second_approval_is_a_no_op(
    client, session, test_project, user2_headers, admin_headers
):
    """Test case for retrying an approval not double-counting the amount."""
    contribution = _contribute(client, user2_headers, test_project.id, 300)

    first = _approve(client, admin_headers, "contribution", contribution["id"])
    second = _approve(client, admin_headers, "contribution", contribution["id"])

    assert first.json()["applied"] is True
    assert second.status_code == 200
    assert second.json()["applied"] is False
    assert second.json()["message"] == "Contribution already approved"
    project = _project(session, test_project.id)
    assert project.current_amount == 300
    assert project.progress == 30


def test_approving_enrollment_completes_it(
    client, session, paid_course, user_headers, admin_headers
):
    """Test case for enrollment approval activating the course purchase."""
    res = client.post(
        "/api/enrollments",
        json={"course_id": paid_course.id, "transaction_code": "RKT5PQ81ZA"},
        headers=user_headers,
    )
    enrollment_id = res.json()["id"]

    approved = _approve(client, admin_headers, "enrollment", enrollment_id)

    assert approved.status_code == 200
    assert approved.json()["message"] == "Enrollment approved"
    assert approved.json()["data"]["payment_status"] == "completed"
    assert approved.json()["data"]["status"] == "active"
    session.expire_all()
    course = session.query(Course).filter(Course.id == paid_course.id).one()
    assert course.students_count == 1


def test_pending_list_groups_and_orders(
    client, test_project, paid_course, user_headers, user2_headers, admin_headers
):
    """Test case for the pending list joining payer and target details."""
    first = _contribute(client, user2_headers, test_project.id, 100)
    second = _contribute(client, user2_headers, test_project.id, 200)
    _contribute(client, user2_headers, test_project.id, 5, kind="resource")
    client.post(
        "/api/enrollments",
        json={"course_id": paid_course.id, "transaction_code": "RKT5PQ81ZA"},
        headers=user_headers,
    )

    res = client.get("/api/admin/pending-payments", headers=admin_headers)

    assert res.status_code == 200
    body = res.json()
    assert [item["id"] for item in body["contributions"]] == [second["id"], first["id"]]
    assert all(item["kind"] == "contribution" for item in body["contributions"])
    assert body["contributions"][0]["user"]["email"] == "donor@example.com"
    assert body["contributions"][0]["project"]["title"] == "Solar Classrooms"
    assert len(body["enrollments"]) == 1
    assert body["enrollments"][0]["kind"] == "enrollment"
    assert body["enrollments"][0]["course"] == {
        "id": paid_course.id,
        "title": "Python for Data Science",
        "price": 1500.0,
    }


def test_approved_payment_leaves_pending_list(
    client, test_project, user2_headers, admin_headers
):
    """Test case for completed payments dropping out of the pending list."""
    contribution = _contribute(client, user2_headers, test_project.id, 100)
    _approve(client, admin_headers, "contribution", contribution["id"])

    body = client.get("/api/admin/pending-payments", headers=admin_headers).json()

    assert body["contributions"] == []


def test_unknown_payment_type_is_rejected(client, admin_headers):
    """Test case for an unsupported payment kind."""
    res = _approve(client, admin_headers, "refund", 1)

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "invalid_payment_type"


def test_unknown_payment_id_is_not_found(client, admin_headers):
    """Test case for approving a payment that does not exist."""
    res = _approve(client, admin_headers, "contribution", 9999)

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "resource_not_found"


def test_non_admin_cannot_approve(client, test_project, user2_headers, session):
    """Test case for the admin gate rejecting regular users before any update."""
    contribution = _contribute(client, user2_headers, test_project.id, 100)

    res = _approve(client, user2_headers, "contribution", contribution["id"])

    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Access denied. Admin only."
    session.expire_all()
    row = session.query(Contribution).filter(Contribution.id == contribution["id"]).one()
    assert row.payment_status.value == "pending"


def test_admin_routes_need_a_token(client):
    """Test case for anonymous access to the admin gate."""
    assert client.get("/api/admin/pending-payments").status_code == 401
    assert client.post("/api/admin/approve-payment", json={"type": "enrollment", "id": 1}).status_code == 401


def test_payer_is_notified_over_socket(
    client, session, test_project, test_user2, user2_headers, admin_headers, fake_socket_factory
):
    """Test case for the approval notice being stored and pushed to the payer."""
    from app.modules.notifications import registry
    import asyncio

    socket = fake_socket_factory()
    asyncio.run(registry.register(test_user2.id, socket))
    contribution = _contribute(client, user2_headers, test_project.id, 400)

    _approve(client, admin_headers, "contribution", contribution["id"])

    pushed = socket.events("notification")
    assert len(pushed) == 1
    assert "approved" in pushed[0]["data"]["message"]
    stored = session.query(Notification).filter(Notification.user_id == test_user2.id).all()
    assert len(stored) == 1


def test_compute_progress_rounds_half_up():
    """Test case for the rounding rule used by the progress field."""
    assert compute_progress(125, 1000, 0) == 13
    assert compute_progress(124, 1000, 0) == 12
    assert compute_progress(5, 1000, 0) == 1
    assert compute_progress(2000, 1000, 0) == 100
    assert compute_progress(10, 0, 7) == 7


def test_payment_kind_parse():
    """Test case for mapping request strings onto payment kinds."""
    assert PaymentKind.parse("Enrollment") is PaymentKind.ENROLLMENT
    assert PaymentKind.parse(" contribution ") is PaymentKind.CONTRIBUTION
    with pytest.raises(InvalidPaymentTypeException):
        PaymentKind.parse("donation")


class _FailingNotifier:
    async def notify(self, user_id, message):
        raise RuntimeError("push backend down")


@pytest.mark.asyncio
async def test_notification_failure_does_not_undo_approval(session, test_project, test_user2):
    """Test case for best-effort payer notification."""
    contribution = Contribution(
        user_id=test_user2.id,
        project_id=test_project.id,
        amount=250,
        type=ContributionType.MONETARY,
        description="",
    )
    session.add(contribution)
    session.commit()

    service = PaymentApprovalService(session, notifier=_FailingNotifier())
    result = await service.approve_and_notify("contribution", contribution.id)

    assert result.applied is True
    project = _project(session, test_project.id)
    assert project.current_amount == 250
    assert project.progress == 25


def test_service_raises_not_found_for_missing_enrollment(session):
    """Test case for the enrollment handler on an unknown id."""
    service = PaymentApprovalService(session, notifier=NotificationService(session))
    with pytest.raises(ResourceNotFoundException):
        service.approve_payment(PaymentKind.ENROLLMENT, 4242)
    assert session.query(Enrollment).count() == 0


def test_concurrent_approvals_for_one_project_both_count(
    client, session, session_factory, test_project, user2_headers, monkeypatch
):
    """Test case for two approvals racing on the same project total."""
    first = _contribute(client, user2_headers, test_project.id, 80)
    second = _contribute(client, user2_headers, test_project.id, 80)

    # Hold both approvals until each has loaded its contribution.
    barrier = threading.Barrier(2)
    original_flip = PaymentApprovalService._flip_to_completed

    def flip_together(self, model, payment_id, **values):
        if model is Contribution:
            barrier.wait(timeout=10)
        return original_flip(self, model, payment_id, **values)

    monkeypatch.setattr(PaymentApprovalService, "_flip_to_completed", flip_together)
    errors = []

    def approve(payment_id):
        db = session_factory()
        try:
            PaymentApprovalService(db, notifier=NotificationService(db)).approve_payment(
                PaymentKind.CONTRIBUTION, payment_id
            )
        except Exception as exc:
            errors.append(exc)
        finally:
            db.close()

    threads = [
        threading.Thread(target=approve, args=(payment["id"],)) for payment in (first, second)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    project = _project(session, test_project.id)
    assert project.current_amount == 160
    assert project.progress == 16
    statuses = {
        row.payment_status.value
        for row in session.query(Contribution).filter(Contribution.project_id == test_project.id)
    }
    assert statuses == {"completed"}
