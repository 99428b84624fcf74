from __future__ import annotations

from jobboard.dependencies.notifications import get_status_notifier
from jobboard.services import notifications as notifications_service


def _apply(client, job_id: int, **extra):
    return client.post("/applications/apply", json={"job_id": job_id, **extra})


def test_employee_applies_and_sees_application_with_stats(users, make_job, client_for):
    job = make_job(users.employer)

    with client_for(users.employee) as c:
        res = _apply(
            c,
            job.id,
            resume={"filename": "resume-abc.pdf", "original_name": "cv.pdf", "size": 1234},
            cover_letter="I would love to join.",
            phone="555-0100",
            location="Remote",
        )
        assert res.status_code == 201
        body = res.json()
        assert body["status"] == "applied"
        assert body["employee_id"] == users.employee.id
        assert body["resume_url"] == "/uploads/resumes/resume-abc.pdf"

        mine = c.get("/employee/applications")
        assert mine.status_code == 200
        data = mine.json()
        assert [a["id"] for a in data["applications"]] == [body["id"]]
        assert data["applications"][0]["job_title"] == job.title
        assert data["applications"][0]["employer_name"] == "Tech Solutions Inc."
        assert data["stats"] == {
            "total": 1,
            "applied": 1,
            "viewed": 0,
            "shortlisted": 0,
            "rejected": 0,
            "accepted": 0,
        }


def test_duplicate_apply_returns_409(users, make_job, client_for):
    job = make_job(users.employer)

    with client_for(users.employee) as c:
        assert _apply(c, job.id).status_code == 201
        res = _apply(c, job.id)
        assert res.status_code == 409
        assert res.json()["error"] == "CONFLICT"
        assert res.json()["message"] == "You have already applied for this job"


def test_apply_to_inactive_job_returns_404(users, make_job, client_for):
    job = make_job(users.employer, is_active=False)

    with client_for(users.employee) as c:
        res = _apply(c, job.id)
        assert res.status_code == 404
        assert res.json()["error"] == "NOT_FOUND"


def test_employer_cannot_apply(users, make_job, client_for):
    job = make_job(users.other_employer)

    with client_for(users.employer) as c:
        res = _apply(c, job.id)
        assert res.status_code == 403
        assert res.json()["error"] == "FORBIDDEN"


def test_employer_shortlists_and_notification_is_recorded(users, make_job, client_for, notifier):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]

    with client_for(users.employer) as c:
        res = c.patch(f"/applications/{app_id}/status", json={"status": "shortlisted"})
        assert res.status_code == 200
        assert res.json() == {"message": "Application status updated successfully"}

    assert [(e.application_id, e.status) for e in notifier.events] == [(app_id, "shortlisted")]

    with client_for(users.employee) as c:
        stats = c.get("/employee/applications").json()["stats"]
        assert stats["shortlisted"] == 1
        assert stats["applied"] == 0


def test_foreign_employer_status_update_is_404_and_changes_nothing(users, make_job, client_for, notifier):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]

    with client_for(users.other_employer) as c:
        res = c.patch(f"/applications/{app_id}/status", json={"status": "accepted"})
        assert res.status_code == 404
        assert res.json()["message"] == "Application not found or access denied"

    with client_for(users.employee) as c:
        assert c.get(f"/applications/{app_id}").json()["status"] == "applied"
    assert notifier.events == []


def test_unknown_status_value_is_rejected(users, make_job, client_for):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]

    with client_for(users.employer) as c:
        res = c.patch(f"/applications/{app_id}/status", json={"status": "hired"})
        assert res.status_code == 422
        assert res.json()["error"] == "VALIDATION_ERROR"


def test_status_update_succeeds_when_notification_sink_fails(users, make_job, client_for, notifier):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]

    notifier.fail = True
    with client_for(users.employer) as c:
        res = c.patch(f"/applications/{app_id}/status", json={"status": "rejected"})
        assert res.status_code == 200
        assert c.get(f"/applications/{app_id}").json()["status"] == "rejected"


def test_default_notifier_emails_applicant(app, users, make_job, client_for, monkeypatch):
    """
    Default wiring: the status email goes out through the task queue (inline without a broker).
    """
    app.dependency_overrides.pop(get_status_notifier, None)
    sent: list[dict] = []

    def fake_send_email(**kwargs):
        sent.append(kwargs)
        return "msg-1"

    monkeypatch.setattr(notifications_service, "send_email", fake_send_email)

    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]

    with client_for(users.employer) as c:
        res = c.patch(f"/applications/{app_id}/status", json={"status": "accepted"})
        assert res.status_code == 200

    assert len(sent) == 1
    assert sent[0]["to_email"] == "e1@example.com"
    assert job.title in sent[0]["subject"]
    assert "ACCEPTED" in sent[0]["body"]


def test_default_notifier_failure_does_not_fail_request(app, users, make_job, client_for, monkeypatch):
    app.dependency_overrides.pop(get_status_notifier, None)

    def broken_send_email(**kwargs):
        raise notifications_service.EmailDeliveryError("provider down")

    monkeypatch.setattr(notifications_service, "send_email", broken_send_email)

    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]

    with client_for(users.employer) as c:
        res = c.patch(f"/applications/{app_id}/status", json={"status": "shortlisted"})
        assert res.status_code == 200
        assert c.get(f"/applications/{app_id}").json()["status"] == "shortlisted"


def test_employee_may_update_own_application_without_notification(users, make_job, client_for, notifier):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]
        res = c.patch(f"/applications/{app_id}/status", json={"status": "viewed"})
        assert res.status_code == 200

    assert notifier.events == []


def test_employer_listing_contains_only_own_jobs_applications(users, make_job, client_for):
    j1 = make_job(users.employer, title="Frontend Developer")
    j2 = make_job(users.other_employer, title="UX Designer")

    with client_for(users.employee) as c:
        a1 = _apply(c, j1.id).json()["id"]
        _apply(c, j2.id)
    with client_for(users.other_employee) as c:
        a3 = _apply(c, j1.id).json()["id"]

    with client_for(users.employer) as c:
        res = c.get("/employer/applications")
        assert res.status_code == 200
        rows = res.json()
        assert {r["id"] for r in rows} == {a1, a3}
        assert all(r["employer_id"] == users.employer.id for r in rows)
        assert {r["employee_name"] for r in rows} == {"John Doe", "Sarah Smith"}


def test_employee_cannot_list_employer_applications(users, client_for):
    with client_for(users.employee) as c:
        assert c.get("/employer/applications").status_code == 403


def test_get_application_visible_to_applicant_and_owner_only(users, make_job, client_for):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]
        own = c.get(f"/applications/{app_id}")
        assert own.status_code == 200
        assert own.json()["employer_id"] == users.employer.id

    with client_for(users.employer) as c:
        assert c.get(f"/applications/{app_id}").status_code == 200

    for outsider in (users.other_employer, users.other_employee):
        with client_for(outsider) as c:
            assert c.get(f"/applications/{app_id}").status_code == 404


def test_delete_application_by_owner_only(users, make_job, client_for):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        app_id = _apply(c, job.id).json()["id"]

    with client_for(users.other_employer) as c:
        assert c.delete(f"/applications/{app_id}").status_code == 404

    with client_for(users.employer) as c:
        res = c.delete(f"/applications/{app_id}")
        assert res.status_code == 200
        assert res.json() == {"message": "Application deleted successfully"}
        assert c.get(f"/applications/{app_id}").status_code == 404


def test_applications_require_authentication(anon_client):
    res = anon_client.get("/employee/applications")
    assert res.status_code == 401
    assert res.json()["error"] == "UNAUTHORIZED"
