from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from docextract.api.app import create_app
from docextract.database.models import FileType
from docextract.storage.exceptions import BlobStoreError


@pytest.fixture()
def client(container) -> TestClient:
    return TestClient(create_app(container))


def _auth(container, user_id: str = "user-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {container.identity.issue_token(user_id)}"}


def _upload(client, container, filename: str, content: bytes, user_id: str = "user-1", **data):
    return client.post(
        "/documents",
        files={"file": (filename, content, "application/octet-stream")},
        data=data,
        headers=_auth(container, user_id),
    )


class TestAuthentication:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("post", "/documents"),
            ("get", "/documents"),
            ("get", "/documents/doc-1"),
            ("get", "/documents/doc-1/data"),
            ("post", "/documents/doc-1/process"),
            ("delete", "/documents/doc-1"),
        ],
    )
    def test_requires_bearer_token(self, client, method: str, path: str) -> None:
        response = getattr(client, method)(path)

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_rejects_invalid_token(self, client) -> None:
        response = client.get("/documents", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_health_is_public(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestUpload:
    def test_pdf_upload_returns_pending_record(self, client, container) -> None:
        response = _upload(client, container, "report.pdf", b"%PDF-1.4", name="Q3 report")

        assert response.status_code == 201
        document = response.json()["document"]
        assert document["name"] == "Q3 report"
        assert document["original_filename"] == "report.pdf"
        assert document["file_type"] == "pdf"
        assert document["extraction_state"] == "pending"
        assert document["file_size_bytes"] == 8
        assert "blob_key" not in document

    def test_rejects_other_file_types(self, client, container) -> None:
        response = _upload(client, container, "notes.txt", b"hello")

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidFileType"

    def test_rejects_missing_file(self, client, container) -> None:
        response = client.post("/documents", data={"name": "x"}, headers=_auth(container))

        assert response.status_code == 400
        assert response.json()["error"] == "MissingFile"

    def test_storage_failure_is_500(self, client, container) -> None:
        with patch.object(container.blob_store, "store", side_effect=BlobStoreError("disk full")):
            response = _upload(client, container, "report.pdf", b"%PDF-1.4")

        assert response.status_code == 500
        assert response.json()["error"] == "StorageError"
        assert "disk full" not in response.json()["message"]


class TestReadEndpoints:
    def test_list_returns_only_callers_documents(self, client, container, make_record) -> None:
        mine = make_record(owner_id="user-1")
        make_record(owner_id="user-2")

        response = client.get("/documents", headers=_auth(container))

        body = response.json()
        assert response.status_code == 200
        assert body["count"] == 1
        assert [d["id"] for d in body["documents"]] == [mine.id]

    def test_get_document_detail(self, client, container, make_record) -> None:
        record = make_record()

        response = client.get(f"/documents/{record.id}", headers=_auth(container))

        document = response.json()["document"]
        assert response.status_code == 200
        assert document["id"] == record.id
        assert document["extraction_attempt"] == 0
        assert document["last_error"] is None
        assert "extracted_data" not in document

    def test_other_users_document_is_not_found(self, client, container, make_record) -> None:
        record = make_record(owner_id="user-1")
        headers = _auth(container, "user-2")

        assert client.get(f"/documents/{record.id}", headers=headers).status_code == 404
        assert client.get(f"/documents/{record.id}/data", headers=headers).status_code == 404
        assert client.post(f"/documents/{record.id}/process", headers=headers).status_code == 404
        assert client.delete(f"/documents/{record.id}", headers=headers).status_code == 404

    def test_unknown_document_is_not_found(self, client, container) -> None:
        response = client.get("/documents/missing", headers=_auth(container))

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"


class TestExtractionFlow:
    def test_data_is_202_until_completed(self, client, container, stub_extractor) -> None:
        gate = stub_extractor.hold()
        document_id = _upload(client, container, "report.pdf", b"%PDF-1.4").json()["document"]["id"]

        pending = client.get(f"/documents/{document_id}/data", headers=_auth(container))
        gate.set()
        assert container.scheduler.wait_for_idle(timeout=5)
        completed = client.get(f"/documents/{document_id}/data", headers=_auth(container))

        assert pending.status_code == 202
        assert pending.json() == {"status": "processing"}
        assert completed.status_code == 200
        assert completed.json() == {"data": {"pages": 3}}

    def test_docx_stays_pending_and_cannot_be_processed(self, client, container) -> None:
        document_id = _upload(client, container, "contract.docx", b"PK\x03\x04").json()["document"]["id"]

        data = client.get(f"/documents/{document_id}/data", headers=_auth(container))
        process = client.post(f"/documents/{document_id}/process", headers=_auth(container))

        assert data.status_code == 202
        assert data.json() == {"status": "pending"}
        assert process.status_code == 400
        assert process.json()["error"] == "UnsupportedExtraction"

    def test_failed_extraction_is_400_with_error(self, client, container, stub_extractor) -> None:
        stub_extractor.error = RuntimeError("No /Root object! - Is this really a PDF?")
        document_id = _upload(client, container, "bad.pdf", b"garbage").json()["document"]["id"]
        assert container.scheduler.wait_for_idle(timeout=5)

        response = client.get(f"/documents/{document_id}/data", headers=_auth(container))

        assert response.status_code == 400
        assert response.json() == {
            "status": "failed",
            "error": "No /Root object! - Is this really a PDF?",
        }

    def test_process_while_processing_is_409(
        self, client, container, stub_extractor, make_record
    ) -> None:
        gate = stub_extractor.hold()
        record = make_record()

        first = client.post(f"/documents/{record.id}/process", headers=_auth(container))
        second = client.post(f"/documents/{record.id}/process", headers=_auth(container))
        gate.set()

        assert first.status_code == 202
        assert first.json() == {"documentId": record.id}
        assert second.status_code == 409
        assert second.json() == {"error": "AlreadyProcessing", "message": "already processing"}

    def test_reprocess_completed_document(self, client, container, make_record) -> None:
        record = make_record()
        client.post(f"/documents/{record.id}/process", headers=_auth(container))
        assert container.scheduler.wait_for_idle(timeout=5)

        response = client.post(f"/documents/{record.id}/process", headers=_auth(container))
        assert container.scheduler.wait_for_idle(timeout=5)
        detail = client.get(f"/documents/{record.id}", headers=_auth(container)).json()

        assert response.status_code == 202
        assert detail["document"]["extraction_state"] == "completed"
        assert detail["document"]["extraction_attempt"] == 2


class TestDelete:
    def test_delete_then_not_found(self, client, container, make_record) -> None:
        record = make_record(file_type=FileType.DOCX)

        deleted = client.delete(f"/documents/{record.id}", headers=_auth(container))
        after = client.get(f"/documents/{record.id}", headers=_auth(container))

        assert deleted.status_code == 200
        assert deleted.json() == {"deleted": True, "id": record.id}
        assert after.status_code == 404
