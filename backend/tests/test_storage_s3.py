"""Tests for the boto3 backed object storage gateway."""

from __future__ import annotations

import uuid
from datetime import timedelta

import boto3
import pytest
from botocore.config import Config
from botocore.stub import Stubber

from linkhub.config import Settings
from linkhub.core.storage import S3ObjectStorage, build_s3_client, object_key
from linkhub.errors import NotFoundError, StorageGatewayError
from linkhub.schemas import CompletedPart

BUCKET = "linkhub-test"


@pytest.fixture()
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
        config=Config(signature_version="s3v4"),
    )


@pytest.fixture()
def storage(s3_client) -> S3ObjectStorage:
    return S3ObjectStorage(s3_client, BUCKET)


@pytest.fixture()
def file_uuid() -> str:
    return str(uuid.uuid4())


def test_object_key_requires_v4_uuid(file_uuid):
    assert object_key(file_uuid) == f"files/{file_uuid}"
    with pytest.raises(StorageGatewayError):
        object_key("../etc/passwd")


def test_presigned_put_carries_key_and_lifetime(storage, file_uuid):
    url = storage.presign_put(file_uuid, "text/plain", timedelta(minutes=30))

    assert f"files/{file_uuid}" in url
    assert "X-Amz-Expires=1800" in url


def test_presigned_upload_part_carries_part_number(storage, file_uuid):
    url = storage.presign_upload_part(file_uuid, "upload-1", 2, timedelta(minutes=30))

    assert f"files/{file_uuid}" in url
    assert "partNumber=2" in url
    assert "uploadId=upload-1" in url


def test_presigned_get(storage, file_uuid):
    url = storage.presign_get(file_uuid, timedelta(minutes=5))

    assert f"files/{file_uuid}" in url
    assert "X-Amz-Expires=300" in url


def test_create_multipart_upload(storage, s3_client, file_uuid):
    key = f"files/{file_uuid}"
    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "create_multipart_upload",
            {"Bucket": BUCKET, "Key": key, "UploadId": "upload-1"},
            {"Bucket": BUCKET, "Key": key, "ContentType": "video/mp4"},
        )
        assert storage.create_multipart_upload(file_uuid, "video/mp4") == "upload-1"
        stubber.assert_no_pending_responses()


def test_create_multipart_upload_error(storage, s3_client, file_uuid):
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("create_multipart_upload", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(StorageGatewayError):
            storage.create_multipart_upload(file_uuid, "video/mp4")


def test_complete_multipart_upload(storage, s3_client, file_uuid):
    key = f"files/{file_uuid}"
    parts = [CompletedPart(part_number=1, etag='"a"'), CompletedPart(part_number=2, etag='"b"')]
    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "complete_multipart_upload",
            {"Bucket": BUCKET, "Key": key},
            {
                "Bucket": BUCKET,
                "Key": key,
                "UploadId": "upload-1",
                "MultipartUpload": {
                    "Parts": [{"PartNumber": 1, "ETag": '"a"'}, {"PartNumber": 2, "ETag": '"b"'}]
                },
            },
        )
        storage.complete_multipart_upload(file_uuid, "upload-1", parts)
        stubber.assert_no_pending_responses()


def test_abort_multipart_upload(storage, s3_client, file_uuid):
    params = {"Bucket": BUCKET, "Key": f"files/{file_uuid}", "UploadId": "upload-1"}
    with Stubber(s3_client) as stubber:
        stubber.add_response("abort_multipart_upload", {}, params)
        storage.abort_multipart_upload(file_uuid, "upload-1")
        stubber.add_client_error("abort_multipart_upload", service_error_code="NoSuchUpload", http_status_code=404)
        with pytest.raises(StorageGatewayError):
            storage.abort_multipart_upload(file_uuid, "upload-1")
        stubber.assert_no_pending_responses()


def test_head_object(storage, s3_client, file_uuid):
    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "head_object",
            {"ContentLength": 42, "ContentType": "text/plain", "ETag": '"abc"'},
            {"Bucket": BUCKET, "Key": f"files/{file_uuid}"},
        )
        head = storage.head_object(file_uuid)

    assert head.size == 42
    assert head.mime_type == "text/plain"
    assert head.etag == '"abc"'


def test_head_missing_object_is_not_found(storage, s3_client, file_uuid):
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
        with pytest.raises(NotFoundError):
            storage.head_object(file_uuid)


def test_head_object_other_error(storage, s3_client, file_uuid):
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("head_object", service_error_code="403", http_status_code=403)
        with pytest.raises(StorageGatewayError):
            storage.head_object(file_uuid)


def test_delete_object(storage, s3_client, file_uuid):
    with Stubber(s3_client) as stubber:
        stubber.add_response("delete_object", {}, {"Bucket": BUCKET, "Key": f"files/{file_uuid}"})
        storage.delete_object(file_uuid)
        stubber.add_client_error("delete_object", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(StorageGatewayError):
            storage.delete_object(file_uuid)


def test_build_s3_client_uses_settings():
    settings = Settings(
        _env_file=None,
        s3_endpoint_url="http://localhost:9000",
        s3_region="eu-central-1",
        s3_access_key_id="key",
        s3_secret_access_key="secret",
        s3_connect_timeout_seconds=2,
        s3_read_timeout_seconds=7,
    )
    client = build_s3_client(settings)

    assert client.meta.endpoint_url == "http://localhost:9000"
    assert client.meta.region_name == "eu-central-1"
    assert client.meta.config.connect_timeout == 2
    assert client.meta.config.read_timeout == 7
