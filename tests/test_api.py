import asyncio

from fastapi.testclient import TestClient

from careerai.jobs.models import JobType
from careerai.main import create_app


def _create_job(services, user_id="user-1", job_type=JobType.RESUME_PARSE):
    return asyncio.run(services.processor.create_job(user_id, job_type, {"content": "x"}))


def _seed_generation(services, user_id="user-1"):
    resources = services.resources
    resources.add_resume(user_id="user-1", parsed_data={"name": "John Doe", "title": "Engineer"})
    return resources.add_job_description(
        user_id=user_id,
        company_name="Acme",
        job_title="Backend Engineer",
        parsed_data={"title": "Backend Engineer", "requirements": ["Python"]},
    )


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["jobProcessor"] == "enabled"
    assert body["poller"] == "stopped"
    assert client.get("/api/v1/health").status_code == 200


def test_requests_without_token_are_rejected(settings, services):
    client = TestClient(create_app(settings=settings, services=services))

    resp = client.get("/api/v1/jobs/active")

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Authentication required"


def test_parse_resume_async_runs_job_after_response(client, services):
    resp = client.post(
        "/api/v1/resumes/parse-async",
        json={
            "content": "John Doe\nSoftware Engineer",
            "filename": "john.pdf",
            "fileType": "application/pdf",
            "fileSize": 2048,
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["status"] == "processing"

    job = client.get(f"/api/v1/jobs/{body['jobId']}").json()
    assert job["status"] == "completed"
    assert job["type"] == "resume_parse"
    assert job["result"]["name"] == "John Doe"
    assert job["result"]["title"] == "Software Engineer"
    assert job["result"]["resumeId"] in services.resources.resumes
    assert job["metadata"]["originalFileName"] == "john.pdf"
    assert job["error"] is None

    notifications = client.get("/api/v1/notifications").json()["notifications"]
    assert len(notifications) == 1
    assert notifications[0]["type"] == "job_completed"
    assert notifications[0]["metadata"]["jobId"] == body["jobId"]


def test_parse_resume_async_records_ai_failure(client, fake_ai):
    fake_ai.fail_with = "rate limit exceeded"

    job_id = client.post("/api/v1/resumes/parse-async", json={"content": "resume"}).json()["jobId"]

    job = client.get(f"/api/v1/jobs/{job_id}").json()
    assert job["status"] == "failed"
    assert job["error"] == "rate limit exceeded"
    assert job["result"] is None
    [notification] = client.get("/api/v1/notifications").json()["notifications"]
    assert notification["type"] == "job_failed"
    assert notification["title"] == "Resume Parsing Failed"


def test_parse_resume_async_validates_content(client, services):
    assert client.post("/api/v1/resumes/parse-async", json={"content": "   "}).status_code == 400

    resp = client.post("/api/v1/resumes/parse-async", json={"content": "x" * 1001})
    assert resp.status_code == 400
    assert "exceeds" in resp.json()["detail"]

    assert asyncio.run(services.job_store.list_for_user("user-1")) == []


def test_get_job_not_found(client):
    resp = client.get("/api/v1/jobs/missing-job")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Job not found"


def test_get_job_of_another_user_is_forbidden(client, services):
    job_id = _create_job(services, user_id="user-2")

    assert client.get(f"/api/v1/jobs/{job_id}").status_code == 403


def test_active_jobs_and_polling_hint(client, services):
    idle = client.get("/api/v1/jobs/active").json()
    assert idle == {"jobs": [], "hasActiveJobs": False, "pollAfterSeconds": 60.0}

    job_id = _create_job(services)
    _create_job(services, user_id="user-2")

    active = client.get("/api/v1/jobs/active").json()
    assert active["hasActiveJobs"] is True
    assert active["pollAfterSeconds"] == 5.0
    assert [j["id"] for j in active["jobs"]] == [job_id]
    assert active["jobs"][0]["status"] == "pending"


def test_generate_resume_async(client, services):
    job_description = _seed_generation(services)

    resp = client.post(
        "/api/v1/generate-resume-async", json={"jobDescriptionId": job_description["id"]}
    )

    assert resp.status_code == 200
    job = client.get(f"/api/v1/jobs/{resp.json()['jobId']}").json()
    assert job["status"] == "completed"
    assert job["type"] == "resume_generate"
    assert job["result"]["companyName"] == "Acme"
    assert job["result"]["documentId"] in services.resources.documents
    assert job["metadata"] == {"jobTitle": "Backend Engineer", "companyName": "Acme"}

    [application] = services.resources.applications.values()
    assert application["resume_id"] == job["result"]["documentId"]


def test_generate_cover_letter_async(client, services, fake_ai):
    job_description = _seed_generation(services)

    resp = client.post(
        "/api/v1/generate-cover-letter-async",
        json={"jobDescriptionId": job_description["id"]},
    )

    job = client.get(f"/api/v1/jobs/{resp.json()['jobId']}").json()
    assert job["status"] == "completed"
    assert "Cover_Letter" in job["result"]["fileName"]
    [notification] = client.get("/api/v1/notifications").json()["notifications"]
    assert notification["message"] == "Your cover letter for Acme is ready to download."


def test_generation_checks_ownership_and_resume(client, services):
    foreign = _seed_generation(services, user_id="user-2")
    resp = client.post("/api/v1/generate-resume-async", json={"jobDescriptionId": foreign["id"]})
    assert resp.status_code == 403

    resp = client.post("/api/v1/generate-resume-async", json={"jobDescriptionId": "missing"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Job description not found"

    assert asyncio.run(services.job_store.list_for_user("user-1")) == []


def test_generation_rejects_unknown_or_foreign_resume(client, services):
    own = _seed_generation(services)
    foreign_resume = services.resources.add_resume(
        user_id="user-2", parsed_data={"name": "Jane Roe"}
    )

    for resume_id in ("missing", foreign_resume["id"]):
        resp = client.post(
            "/api/v1/generate-resume-async",
            json={"jobDescriptionId": own["id"], "resumeId": resume_id},
        )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Resume not found"

    assert asyncio.run(services.job_store.list_for_user("user-1")) == []
    assert services.resources.documents == {}


def test_generation_without_resume(client, services):
    job_description = services.resources.add_job_description(user_id="user-1", company_name="Acme")

    resp = client.post(
        "/api/v1/generate-cover-letter-async",
        json={"jobDescriptionId": job_description["id"]},
    )

    assert resp.status_code == 404
    assert resp.json()["detail"] == "No resume found. Please upload a resume first."


def test_mark_notifications_read(client):
    client.post("/api/v1/resumes/parse-async", json={"content": "resume"})
    [notification] = client.get("/api/v1/notifications").json()["notifications"]
    assert notification["read"] is False

    resp = client.put("/api/v1/notifications", json={"notificationIds": [notification["id"]]})

    assert resp.json() == {
        "success": True,
        "updated": 1,
        "message": "1 notifications marked as read",
    }
    assert client.get("/api/v1/notifications", params={"unread": "true"}).json() == {
        "notifications": []
    }


def test_mark_notifications_requires_ids(client):
    resp = client.put("/api/v1/notifications", json={"notificationIds": []})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Notification IDs are required"
