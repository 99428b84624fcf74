from __future__ import annotations


def _assert_error_shape(res, *, error: str | None = None):
    data = res.json()
    assert isinstance(data, dict)
    assert isinstance(data.get("error"), str) and data["error"]
    assert isinstance(data.get("message"), str) and data["message"]
    if error is not None:
        assert data["error"] == error


def test_error_shape_401_missing_token(anon_client):
    res = anon_client.get("/employer/jobs")
    assert res.status_code == 401
    _assert_error_shape(res, error="UNAUTHORIZED")


def test_error_shape_403_wrong_role(users, client_for):
    with client_for(users.employee) as c:
        res = c.get("/employer/jobs")
        assert res.status_code == 403
        _assert_error_shape(res, error="FORBIDDEN")


def test_error_shape_404_job_not_found(anon_client):
    res = anon_client.get("/jobs/999999")
    assert res.status_code == 404
    _assert_error_shape(res, error="NOT_FOUND")


def test_error_shape_404_unknown_route(anon_client):
    res = anon_client.get("/definitely-not-a-route")
    assert res.status_code == 404
    _assert_error_shape(res, error="NOT_FOUND")


def test_error_shape_409_duplicate_application(users, make_job, client_for):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        assert c.post("/applications/apply", json={"job_id": job.id}).status_code == 201
        res = c.post("/applications/apply", json={"job_id": job.id})
        assert res.status_code == 409
        _assert_error_shape(res, error="CONFLICT")


def test_error_shape_422_request_validation_error(users, client_for):
    with client_for(users.employee) as c:
        res = c.post("/applications/apply", json={"job_id": "not-a-number"})
        assert res.status_code == 422
        _assert_error_shape(res, error="VALIDATION_ERROR")
        body = res.json()
        assert isinstance(body.get("details"), dict)
        assert isinstance(body["details"].get("errors"), list)


def test_error_shape_carries_details_when_provided(users, make_job, client_for):
    job = make_job(users.employer)
    with client_for(users.employee) as c:
        c.post("/applications/apply", json={"job_id": job.id})

    with client_for(users.employer) as c:
        res = c.delete(f"/jobs/{job.id}")
        assert res.status_code == 409
        _assert_error_shape(res, error="CONFLICT")
        assert res.json()["details"]["application_count"] == 1


def test_health_is_public(anon_client):
    res = anon_client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
