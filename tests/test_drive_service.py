import httplib2
from googleapiclient.errors import HttpError

from services.drive_service import MAX_IMAGE_BYTES, image_mimetype, public_url, unique_name, upload_image


class FakeRequest:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error

    def execute(self):
        if self.error is not None:
            raise self.error
        return self.result


class FakeDrive:
    def __init__(self, error=None):
        self.error = error
        self.created = []
        self.permissions_granted = []

    def files(self):
        drive = self

        class Files:
            def create(self, body, media_body, fields):
                drive.created.append(body)
                return FakeRequest({"id": "file123"}, drive.error)

        return Files()

    def permissions(self):
        drive = self

        class Permissions:
            def create(self, fileId, body, fields):
                drive.permissions_granted.append((fileId, body))
                return FakeRequest({"id": "perm"})

        return Permissions()


def test_image_mimetype():
    assert image_mimetype("photo.JPG") == "image/jpeg"
    assert image_mimetype("logo.png") == "image/png"
    assert image_mimetype("notes.pdf") is None


def test_unique_name_keeps_extension():
    name = unique_name("Floor Cleaner.PNG")
    assert name.startswith("Floor Cleaner-")
    assert name.endswith(".png")
    assert unique_name("a.png") != unique_name("a.png")


def test_upload_image_success():
    drive = FakeDrive()
    ok, _, url = upload_image(drive, b"\x89PNG...", "mop.png", folder_id="folder1")
    assert ok
    assert url == public_url("file123")
    assert drive.created[0]["parents"] == ["folder1"]
    assert drive.permissions_granted == [("file123", {"type": "anyone", "role": "reader"})]


def test_upload_rejects_bad_input():
    drive = FakeDrive()
    assert upload_image(drive, b"data", "doc.pdf", folder_id="f")[0] is False
    assert upload_image(drive, b"", "a.png", folder_id="f")[0] is False
    assert upload_image(drive, b"x" * (MAX_IMAGE_BYTES + 1), "a.png", folder_id="f")[0] is False
    assert drive.created == []


def test_upload_requires_folder(monkeypatch):
    monkeypatch.setenv("IMAGE_FOLDER_ID", "")
    ok, msg, _ = upload_image(FakeDrive(), b"data", "a.png")
    assert not ok
    assert msg == "IMAGE_FOLDER_ID is not configured"


def test_upload_http_error():
    error = HttpError(httplib2.Response({"status": 403, "reason": "Forbidden"}), b"{}")
    drive = FakeDrive(error=error)
    ok, msg, url = upload_image(drive, b"data", "a.png", folder_id="f")
    assert not ok
    assert url is None
    assert drive.permissions_granted == []
