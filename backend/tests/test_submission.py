from __future__ import annotations

import json

import pytest
from fastapi import HTTPException

from app.auth.identity import Identity
from app.core import config as app_config
from app.models.action_log import ActionLog
from app.models.application import Application
from app.services import applications as applications_service
from app.services.applications import ResumeUpload, submit_application


def _submit(client, headers, job_id, *, answers=None, resume=None):
    data = {"job_id": str(job_id)}
    if answers is not None:
        data["answers"] = answers if isinstance(answers, str) else json.dumps(answers)
    files = {"resume": resume} if resume is not None else None
    return client.post("/applications/", data=data, files=files, headers=headers)


def test_submit_creates_pending_application_with_applied_log(
    client, as_applicant, db_session, applicant, job, fake_s3, pdf_bytes
):
    res = _submit(
        client,
        as_applicant,
        job.id,
        answers={"q1": "I like platforms"},
        resume=("cv.pdf", pdf_bytes, "application/pdf"),
    )

    assert res.status_code == 201, res.text
    body = res.json()
    assert body["message"] == "Application submitted successfully"
    assert body["application"]["status"] == "pending"
    assert body["application"]["job_id"] == job.id

    application = db_session.query(Application).one()
    assert application.user_id == applicant.id
    assert application.answers == {"q1": "I like platforms"}
    assert application.resume_key in fake_s3.objects
    assert application.resume_key.startswith(f"resumes/users/{applicant.id}/resume/")

    logs = db_session.query(ActionLog).filter(ActionLog.application_id == application.id).all()
    assert [(log.action, log.performed_by) for log in logs] == [("APPLIED", applicant.id)]


def test_submit_without_resume(client, as_applicant, db_session, job, fake_s3):
    res = _submit(client, as_applicant, job.id)

    assert res.status_code == 201
    application = db_session.query(Application).one()
    assert application.resume_key is None
    assert fake_s3.objects == {}


def test_empty_file_counts_as_no_resume(client, as_applicant, db_session, job, fake_s3):
    res = _submit(client, as_applicant, job.id, resume=("empty.pdf", b"", "application/pdf"))

    assert res.status_code == 201
    assert db_session.query(Application).one().resume_key is None


def test_duplicate_submission_is_409(client, as_applicant, db_session, job):
    assert _submit(client, as_applicant, job.id).status_code == 201

    res = _submit(client, as_applicant, job.id)

    assert res.status_code == 409
    assert res.json() == {"error": "CONFLICT", "message": "You have already applied to this job"}
    assert db_session.query(Application).count() == 1


def test_race_past_precheck_is_decided_by_unique_constraint(
    client, as_applicant, db_session, applicant, job, make_application, fake_s3, monkeypatch, pdf_bytes
):
    # The other request already committed; this one saw no row during its pre-check.
    make_application(job, applicant)
    monkeypatch.setattr(applications_service, "find_application", lambda db, user_id, job_id: None)

    res = _submit(client, as_applicant, job.id, resume=("cv.pdf", pdf_bytes, "application/pdf"))

    assert res.status_code == 409
    assert res.json()["error"] == "CONFLICT"
    assert db_session.query(Application).count() == 1
    # The uploaded resume for the losing request is cleaned up.
    assert fake_s3.objects == {}
    assert len(fake_s3.deleted) == 1


def test_non_pdf_resume_is_400(client, as_applicant, db_session, job, fake_s3):
    res = _submit(client, as_applicant, job.id, resume=("cv.docx", b"PK\x03\x04", "application/msword"))

    assert res.status_code == 400
    assert res.json()["message"] == "Only PDF files are allowed"
    assert db_session.query(Application).count() == 0
    assert fake_s3.objects == {}


def test_oversized_resume_is_413(client, as_applicant, db_session, job, pdf_bytes):
    app_config.settings.MAX_RESUME_BYTES = 10

    res = _submit(client, as_applicant, job.id, resume=("cv.pdf", pdf_bytes, "application/pdf"))

    assert res.status_code == 413
    assert res.json()["error"] == "PAYLOAD_TOO_LARGE"
    assert db_session.query(Application).count() == 0


def test_storage_failure_is_502_and_creates_nothing(client, as_applicant, db_session, job, fake_s3, pdf_bytes):
    fake_s3.fail_put_content_types.add("application/pdf")

    res = _submit(client, as_applicant, job.id, resume=("cv.pdf", pdf_bytes, "application/pdf"))

    assert res.status_code == 502
    assert res.json()["error"] == "DEPENDENCY_FAILURE"
    assert db_session.query(Application).count() == 0
    assert db_session.query(ActionLog).count() == 0


def test_closed_job_is_404(client, as_applicant, db_session, make_job):
    closed = make_job(status="CLOSED")

    res = _submit(client, as_applicant, closed.id)

    assert res.status_code == 404
    assert db_session.query(Application).count() == 0


def test_unknown_job_is_404(client, as_applicant):
    assert _submit(client, as_applicant, 9999).status_code == 404


def test_admin_cannot_apply(client, as_admin, db_session, job):
    res = _submit(client, as_admin, job.id)

    assert res.status_code == 403
    assert db_session.query(Application).count() == 0


def test_unauthenticated_submit_is_401(client, job):
    res = _submit(client, {}, job.id)
    assert res.status_code == 401
    assert res.json()["error"] == "UNAUTHORIZED"


@pytest.mark.parametrize("answers", ["not json", "[1, 2]"])
def test_malformed_answers_is_400(client, as_applicant, db_session, job, answers):
    res = _submit(client, as_applicant, job.id, answers=answers)

    assert res.status_code == 400
    assert db_session.query(Application).count() == 0


def test_service_rejects_admin_identity(db_session, admin, job):
    with pytest.raises(HTTPException) as exc:
        submit_application(
            db_session,
            job_id=job.id,
            applicant=Identity.from_user(admin),
            answers={},
            resume=None,
        )
    assert exc.value.status_code == 403


def test_db_failure_after_upload_removes_stored_resume(db_session, applicant, job, fake_s3, monkeypatch, pdf_bytes):
    def boom(*args, **kwargs):
        raise RuntimeError("db went away")

    monkeypatch.setattr(applications_service, "log_application_action", boom)

    with pytest.raises(RuntimeError):
        submit_application(
            db_session,
            job_id=job.id,
            applicant=Identity.from_user(applicant),
            answers=None,
            resume=ResumeUpload(filename="cv.pdf", content_type="application/pdf", content=pdf_bytes),
        )

    assert fake_s3.objects == {}
    assert db_session.query(Application).count() == 0


def test_check_endpoint(client, as_applicant, job):
    before = client.get(f"/applications/check/{job.id}", headers=as_applicant)
    assert before.status_code == 200
    assert before.json() == {"application": None}

    _submit(client, as_applicant, job.id)

    after = client.get(f"/applications/check/{job.id}", headers=as_applicant)
    assert after.json()["application"]["status"] == "pending"


def test_my_applications_lists_job_summary(client, as_applicant, job):
    _submit(client, as_applicant, job.id)

    res = client.get("/users/me/applications", headers=as_applicant)

    assert res.status_code == 200
    (item,) = res.json()
    assert item["job"]["title"] == "Platform Engineer"
    assert item["job"]["status"] == "active"
    assert item["status"] == "pending"
