"""
Where: services/common/tests/test_storage.py
What: ObjectStore and HTTP-date helpers against a stubbed S3 client.
Why: Header values of image responses are derived from this metadata.
"""

import io
from datetime import datetime, timedelta, timezone

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from botocore.stub import Stubber

from services.common.core.storage import ObjectStore, format_http_date, init_storage

LAST_MODIFIED = datetime(2021, 5, 21, 17, 4, 52, tzinfo=timezone.utc)


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def _body(data: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(data), len(data))


def test_get_object_returns_body_and_metadata(s3_client):
    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "get_object",
            {
                "Body": _body(b"\xff\xd8\xffimage"),
                "ContentType": "image/jpeg",
                "LastModified": LAST_MODIFIED,
                "CacheControl": "max-age=60",
                "Metadata": {"origin": "upload"},
            },
            {"Bucket": "images", "Key": "cat.jpg"},
        )

        stored = ObjectStore(s3_client).get_object("images", "cat.jpg")

    assert stored.body == b"\xff\xd8\xffimage"
    assert stored.content_type == "image/jpeg"
    assert stored.last_modified == LAST_MODIFIED
    assert stored.cache_control == "max-age=60"
    assert stored.metadata == {"origin": "upload"}
    assert stored.expires is None


def test_get_object_propagates_client_error(s3_client):
    with Stubber(s3_client) as stubber:
        stubber.add_client_error(
            "get_object",
            service_error_code="NoSuchKey",
            service_message="The specified key does not exist.",
            http_status_code=404,
        )

        with pytest.raises(ClientError) as exc_info:
            ObjectStore(s3_client).get_object("images", "missing.jpg")

    assert exc_info.value.response["Error"]["Code"] == "NoSuchKey"


def test_init_storage_uses_path_addressing_for_custom_endpoint():
    client = init_storage("ap-northeast-1", "http://localhost:9000")

    assert client.meta.endpoint_url == "http://localhost:9000"
    assert client.meta.region_name == "ap-northeast-1"
    assert client.meta.config.s3 == {"addressing_style": "path"}


class TestFormatHttpDate:
    def test_formats_utc_datetime(self):
        assert format_http_date(LAST_MODIFIED) == "Fri, 21 May 2021 17:04:52 GMT"

    def test_converts_other_timezones_to_gmt(self):
        jst = timezone(timedelta(hours=9))
        value = datetime(2021, 5, 22, 2, 4, 52, tzinfo=jst)
        assert format_http_date(value) == "Fri, 21 May 2021 17:04:52 GMT"

    def test_naive_datetime_is_treated_as_utc(self):
        assert format_http_date(datetime(2021, 5, 21, 17, 4, 52)) == "Fri, 21 May 2021 17:04:52 GMT"

    def test_passthrough(self):
        assert format_http_date(None) is None
        assert format_http_date("Fri, 21 May 2021 17:04:52 GMT") == "Fri, 21 May 2021 17:04:52 GMT"
