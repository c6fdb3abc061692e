"""Tests for the file feature.
Covers: storage helpers, upload validation, listing, download, deletion, upload notifications.
"""

import re
from pathlib import Path

from fastapi import status

from src.config.settings import settings
from src.features.file.service import FileService
from src.features.file.storage import generate_unique_filename, remove_stored_file, validate_file
from src.features.realtime.hub import Connection, user_channel

FILES_URL = f"{settings.api_prefix}/files"


class RecordingSocket:
    def __init__(self):
        self.sent: list[dict] = []

    async def send_json(self, data, mode="text"):
        self.sent.append(data)


async def _upload(client, headers, name="hello.txt", content=b"hello world", mimetype="text/plain"):
    return await client.post(f"{FILES_URL}/upload", files={"file": (name, content, mimetype)}, headers=headers)


# Storage helpers


class TestStorageHelpers:
    def test_unique_filename_keeps_extension(self):
        name = generate_unique_filename("report.final.pdf")
        assert re.fullmatch(r"\d{13}_[0-9a-f]{6}\.pdf", name)

    def test_unique_filename_without_extension(self):
        assert "." not in generate_unique_filename("README")

    def test_unique_filenames_differ(self):
        assert generate_unique_filename("a.txt") != generate_unique_filename("a.txt")

    def test_validate_accepts_allowed_types(self):
        for mimetype in ("image/png", "application/pdf", "application/json", "text/csv", "text/plain"):
            assert validate_file(1024, mimetype) == []

    def test_validate_rejects_large_and_unsupported(self):
        errors = validate_file(10 * 1024 * 1024 + 1, "application/x-msdownload")
        assert errors == [
            "File size must be less than 10MB",
            "File type not supported. Allowed types: images, PDF, JSON, CSV, Excel",
        ]

    async def test_remove_stored_file(self, tmp_path):
        stored = tmp_path / "x.txt"
        stored.write_text("x")

        assert await remove_stored_file(str(stored)) is True
        assert not stored.exists()
        assert await remove_stored_file(str(stored)) is False


# File API Endpoint Tests (HTTP Layer)


class TestFileUpload:
    async def test_upload(self, client, alice, auth_headers, upload_dir):
        response = await _upload(client, auth_headers(alice))

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["original_name"] == "hello.txt"
        assert body["mimetype"] == "text/plain"
        assert body["size"] == len(b"hello world")
        assert body["uploader"] == {"id": alice.id, "name": "Alice Johnson", "email": "alice@example.com"}
        assert (upload_dir / body["filename"]).read_bytes() == b"hello world"

    async def test_upload_requires_auth(self, client, upload_dir):
        response = await _upload(client, {})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_upload_without_file(self, client, alice, auth_headers, upload_dir):
        response = await client.post(f"{FILES_URL}/upload", data={"note": "nothing"}, headers=auth_headers(alice))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "No file provided"}

    async def test_upload_unsupported_type(self, client, alice, auth_headers, upload_dir):
        response = await _upload(
            client, auth_headers(alice), name="tool.exe", content=b"MZ", mimetype="application/x-msdownload"
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {
            "error": "Validation failed",
            "errors": ["File type not supported. Allowed types: images, PDF, JSON, CSV, Excel"],
        }
        assert not upload_dir.exists() or not any(upload_dir.iterdir())

    async def test_upload_too_large(self, client, alice, auth_headers, upload_dir):
        response = await _upload(client, auth_headers(alice), content=b"0" * (10 * 1024 * 1024 + 1))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"] == ["File size must be less than 10MB"]

    async def test_oversized_upload_never_reaches_storage(self, client, alice, auth_headers, upload_dir, monkeypatch):
        async def store_file(*args, **kwargs):
            raise AssertionError("oversized upload reached storage")

        monkeypatch.setattr(FileService, "store_file", store_file)

        response = await _upload(client, auth_headers(alice), content=b"0" * (10 * 1024 * 1024 + 1))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"] == ["File size must be less than 10MB"]

    async def test_upload_notifies_uploader(self, client, alice, auth_headers, upload_dir, hub):
        own = Connection(websocket=RecordingSocket(), user_id=alice.id)
        hub.subscribe(own, user_channel(alice.id))
        other = Connection(websocket=RecordingSocket(), user_id=alice.id + 100)
        hub.subscribe(other, user_channel(alice.id + 100))

        response = await _upload(client, auth_headers(alice))

        assert [event["type"] for event in own.websocket.sent] == ["file_uploaded"]
        assert own.websocket.sent[0]["file"]["id"] == response.json()["id"]
        assert other.websocket.sent == []


class TestFileRead:
    async def test_list_files(self, client, alice, bob, auth_headers, upload_dir):
        await _upload(client, auth_headers(alice), name="first.txt")
        second = await _upload(client, auth_headers(bob), name="second.txt")

        response = await client.get(FILES_URL)
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["pagination"]["total"] == 2
        assert body["items"][0]["id"] == second.json()["id"]

    async def test_get_file(self, client, alice, auth_headers, upload_dir):
        uploaded = await _upload(client, auth_headers(alice))
        file_id = uploaded.json()["id"]

        response = await client.get(f"{FILES_URL}/{file_id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == uploaded.json()

    async def test_get_file_not_found(self, client):
        response = await client.get(f"{FILES_URL}/9999")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "File not found"}

    async def test_download(self, client, alice, auth_headers, upload_dir):
        uploaded = await _upload(client, auth_headers(alice), name="notes.txt", content=b"line one\n")
        file_id = uploaded.json()["id"]

        response = await client.get(f"{FILES_URL}/{file_id}/download")
        assert response.status_code == status.HTTP_200_OK
        assert response.content == b"line one\n"
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["content-disposition"] == 'attachment; filename="notes.txt"'

    async def test_download_missing_on_disk(self, client, alice, auth_headers, upload_dir):
        uploaded = await _upload(client, auth_headers(alice))
        (upload_dir / uploaded.json()["filename"]).unlink()

        response = await client.get(f"{FILES_URL}/{uploaded.json()['id']}/download")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "File not found on disk"}

    async def test_download_unknown_file(self, client):
        response = await client.get(f"{FILES_URL}/9999/download")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "File not found"}


class TestFileDelete:
    async def test_delete_file(self, client, alice, auth_headers, upload_dir):
        uploaded = await _upload(client, auth_headers(alice))
        stored = Path(upload_dir / uploaded.json()["filename"])

        response = await client.delete(f"{FILES_URL}/{uploaded.json()['id']}", headers=auth_headers(alice))
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "File deleted successfully"}
        assert not stored.exists()

        follow_up = await client.get(f"{FILES_URL}/{uploaded.json()['id']}")
        assert follow_up.status_code == status.HTTP_404_NOT_FOUND

    async def test_delete_file_already_gone_from_disk(self, client, alice, auth_headers, upload_dir):
        uploaded = await _upload(client, auth_headers(alice))
        (upload_dir / uploaded.json()["filename"]).unlink()

        response = await client.delete(f"{FILES_URL}/{uploaded.json()['id']}", headers=auth_headers(alice))
        assert response.status_code == status.HTTP_200_OK

    async def test_delete_requires_auth(self, client):
        response = await client.delete(f"{FILES_URL}/1")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_delete_not_found(self, client, alice, auth_headers):
        response = await client.delete(f"{FILES_URL}/9999", headers=auth_headers(alice))
        assert response.status_code == status.HTTP_404_NOT_FOUND
