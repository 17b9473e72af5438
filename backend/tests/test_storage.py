from __future__ import annotations

import pytest

from app.core import config as app_config
from app.services import storage


def test_store_resume_without_preview(fake_s3, pdf_bytes):
    stored = storage.store_resume(3, pdf_bytes)

    assert stored.preview_key is None
    assert stored.key.startswith("resumes/users/3/resume/")
    assert stored.key.endswith(".pdf")
    assert fake_s3.objects[stored.key]["ContentType"] == "application/pdf"


def test_store_resume_with_preview(fake_s3, monkeypatch, pdf_bytes):
    app_config.settings.RESUME_PREVIEW_ENABLED = True
    monkeypatch.setattr(storage, "render_preview", lambda content: b"\x89PNG fake")

    stored = storage.store_resume(3, pdf_bytes)

    assert stored.preview_key.startswith("resumes/users/3/preview/")
    assert fake_s3.objects[stored.preview_key]["ContentType"] == "image/png"


def test_preview_upload_failure_removes_resume(fake_s3, monkeypatch, pdf_bytes):
    monkeypatch.setattr(storage, "render_preview", lambda content: b"\x89PNG fake")
    fake_s3.fail_put_content_types.add("image/png")

    with pytest.raises(storage.StorageError):
        storage.store_resume(3, pdf_bytes)

    assert fake_s3.objects == {}
    assert len(fake_s3.deleted) == 1


def test_render_preview_unreadable_pdf_returns_none():
    app_config.settings.RESUME_PREVIEW_ENABLED = True
    assert storage.render_preview(b"definitely not a pdf") is None


def test_render_preview_disabled():
    app_config.settings.RESUME_PREVIEW_ENABLED = False
    assert storage.render_preview(b"%PDF-1.4") is None


def test_key_prefix_is_optional():
    app_config.settings.S3_PREFIX = ""
    key = storage.build_resume_key(5, "resume", "pdf")
    assert key.startswith("users/5/resume/")


def test_presign_failure_raises_storage_error(fake_s3):
    fake_s3.fail_presign = True
    with pytest.raises(storage.StorageError):
        storage.presign_download("resumes/a.pdf")


def test_delete_quietly_ignores_missing_key(fake_s3):
    storage.delete_quietly(None)
    storage.delete_quietly("")
    assert fake_s3.deleted == []
