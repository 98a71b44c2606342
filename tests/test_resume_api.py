import os

from fastapi import status

from resume_matcher.models.resume import Resume

MIME_PDF = "application/pdf"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def test_upload_docx(upload_resume, blob_store, db_session):
    response = upload_resume()
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["message"] == "Resume uploaded and processed successfully"
    assert data["resume"]["originalName"] == "jane_doe.docx"
    assert data["resume"]["fileSize"] > 0
    assert "processingTime" in data["resume"]
    assert "uploadDate" in data["resume"]

    resume = db_session.get(Resume, data["resume"]["id"])
    assert resume.extracted_text.startswith("Jane Doe")
    assert os.listdir(blob_store.root) == [os.path.basename(resume.blob_locator)]


def test_upload_pdf(upload_resume, resume_pdf):
    response = upload_resume(data=resume_pdf, filename="jane.pdf", content_type=MIME_PDF)
    assert response.status_code == status.HTTP_201_CREATED


def test_upload_requires_auth(upload_resume, blob_store):
    response = upload_resume(headers={})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert os.listdir(blob_store.root) == []


def test_upload_without_file(client, auth_headers):
    response = client.post("/api/resume/upload", headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False


def test_upload_wrong_type(upload_resume, blob_store):
    response = upload_resume(data=b"just text", filename="notes.txt", content_type="text/plain")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Only PDF, DOC, and DOCX files are allowed"
    assert os.listdir(blob_store.root) == []


def test_upload_too_large(upload_resume, blob_store):
    response = upload_resume(data=b"x" * (10 * 1024 * 1024 + 1), filename="big.pdf", content_type=MIME_PDF)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "File too large. Maximum size is 10MB."
    assert os.listdir(blob_store.root) == []


def test_upload_unparseable_pdf(upload_resume, blob_store, db_session):
    response = upload_resume(data=b"%PDF-1.4 broken", filename="broken.pdf", content_type=MIME_PDF)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Unable to parse resume content" in response.json()["message"]
    assert os.listdir(blob_store.root) == []
    assert db_session.query(Resume).count() == 0


def test_upload_job_posting_is_rejected(upload_resume, make_docx, blob_store, db_session):
    posting = make_docx([
        "Backend Developer",
        "We are looking for a backend developer to join our team.",
        "The ideal candidate has 5 years of experience. Apply now at jobs@example.com.",
    ])
    response = upload_resume(data=posting, filename="posting.docx")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "looks like a job description" in response.json()["message"]
    assert os.listdir(blob_store.root) == []
    assert db_session.query(Resume).count() == 0


def test_list_and_detail(client, upload_resume, auth_headers):
    first = upload_resume().json()["resume"]["id"]
    second = upload_resume(filename="second.docx").json()["resume"]["id"]

    response = client.get("/api/resume", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert [r["id"] for r in response.json()["resumes"]] == [second, first]

    detail = client.get(f"/api/resume/{first}", headers=auth_headers).json()
    assert detail["contentType"] == MIME_DOCX
    assert detail["textLength"] > 200
    assert len(detail["preview"]) == 203
    assert detail["preview"].endswith("...")


def test_resume_text(client, upload_resume, auth_headers, resume_text):
    resume_id = upload_resume().json()["resume"]["id"]
    response = client.get(f"/api/resume/{resume_id}/text", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["extractedText"] == resume_text


def test_download_returns_original_bytes(client, upload_resume, auth_headers, resume_docx):
    resume_id = upload_resume(filename="Jane Doe CV.docx").json()["resume"]["id"]
    response = client.get(f"/api/resume/{resume_id}/download", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.content == resume_docx
    assert response.headers["content-type"].startswith(MIME_DOCX)
    assert 'filename="Jane_Doe_CV.docx"' in response.headers["content-disposition"]
    assert "Jane%20Doe%20CV.docx" in response.headers["content-disposition"]


def test_download_missing_blob(client, upload_resume, auth_headers, blob_store, db_session):
    resume_id = upload_resume().json()["resume"]["id"]
    os.remove(db_session.get(Resume, resume_id).blob_locator)

    response = client.get(f"/api/resume/{resume_id}/download", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Resume file not found"


def test_other_users_resume_is_not_found(client, upload_resume, other_auth_headers):
    resume_id = upload_resume().json()["resume"]["id"]
    for path in (f"/api/resume/{resume_id}", f"/api/resume/{resume_id}/text", f"/api/resume/{resume_id}/download"):
        response = client.get(path, headers=other_auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Resume not found"

    assert client.delete(f"/api/resume/{resume_id}", headers=other_auth_headers).status_code == 404


def test_soft_delete_is_idempotent(client, upload_resume, auth_headers, db_session, blob_store):
    resume_id = upload_resume().json()["resume"]["id"]

    for _ in range(2):
        response = client.delete(f"/api/resume/{resume_id}", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Resume deleted successfully"

    assert client.get(f"/api/resume/{resume_id}", headers=auth_headers).status_code == 404
    assert client.get("/api/resume", headers=auth_headers).json()["resumes"] == []
    # Soft delete keeps both the row and the file
    assert db_session.get(Resume, resume_id) is not None
    assert len(os.listdir(blob_store.root)) == 1


def test_unknown_resume_id(client, auth_headers):
    assert client.get("/api/resume/9999", headers=auth_headers).status_code == 404
    assert client.get("/api/resume/not-a-number", headers=auth_headers).status_code == 400
