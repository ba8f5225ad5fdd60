import pytest
from botocore.exceptions import ClientError

from themeshot.config import Settings
from themeshot.errors import UploadError
from themeshot.uploader import S3Uploader


class FakeS3Client:
    def __init__(self, fail=False):
        self.fail = fail
        self.objects = {}

    def put_object(self, Bucket, Key, Body, ContentType):
        if self.fail:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        self.objects[(Bucket, Key)] = (Body, ContentType)

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?expires={ExpiresIn}"


def settings(**overrides):
    values = {"s3_bucket_name": "shots", "s3_folder": "captures", "presigned_url_expiry": 60}
    values.update(overrides)
    return Settings(**values)


def test_upload_puts_object_and_presigns():
    client = FakeS3Client()
    url = S3Uploader(settings(), client=client).upload_screenshot(b"\x89PNG", "image/png")

    (bucket, key), (body, content_type) = next(iter(client.objects.items()))
    assert bucket == "shots"
    assert key.startswith("captures/") and key.endswith(".png")
    assert body == b"\x89PNG" and content_type == "image/png"
    assert url == f"https://shots.s3.amazonaws.com/{key}?expires=60"


def test_jpeg_keys_get_jpg_extension():
    assert S3Uploader(settings(), client=FakeS3Client()).screenshot_key("image/jpeg").endswith(".jpg")


def test_missing_bucket_is_an_upload_error():
    with pytest.raises(UploadError):
        S3Uploader(settings(s3_bucket_name=None), client=FakeS3Client()).upload_screenshot(b"x")


def test_client_error_is_an_upload_error():
    with pytest.raises(UploadError):
        S3Uploader(settings(), client=FakeS3Client(fail=True)).upload_screenshot(b"x")


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("THEMESHOT_NAVIGATION_TIMEOUT_MS", "5000")
    monkeypatch.setenv("THEMESHOT_S3_BUCKET_NAME", "from-env")
    loaded = Settings()
    assert loaded.navigation_timeout_ms == 5000
    assert loaded.s3_bucket_name == "from-env"
    assert loaded.viewport_width == 1280
