import pytest

from services.common.core.storage import StoredObject
from services.image_handler.config import ImageHandlerConfig
from services.image_handler.tests.fakes import (
    FALLBACK_BYTES,
    JPEG_BYTES,
    LAST_MODIFIED,
    FakeObjectStore,
    encode_descriptor,
)


@pytest.fixture
def make_config():
    def _make(**overrides) -> ImageHandlerConfig:
        values = {
            "CORS_ENABLED": "No",
            "CORS_ORIGIN": "*",
            "ENABLE_DEFAULT_FALLBACK_IMAGE": "No",
            "DEFAULT_FALLBACK_IMAGE_BUCKET": "",
            "DEFAULT_FALLBACK_IMAGE_KEY": "",
            "SOURCE_BUCKETS": "images,archive",
        }
        values.update(overrides)
        return ImageHandlerConfig(_env_file=None, **values)

    return _make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def original_image():
    return StoredObject(
        body=JPEG_BYTES,
        content_type="image/jpeg",
        last_modified=LAST_MODIFIED,
        cache_control="max-age=86400",
    )


@pytest.fixture
def fallback_image():
    return StoredObject(body=FALLBACK_BYTES, content_type="image/png", last_modified=LAST_MODIFIED)


@pytest.fixture
def store(original_image, fallback_image):
    return FakeObjectStore(
        {
            ("images", "photos/cat.jpg"): original_image,
            ("fallback", "default.png"): fallback_image,
        }
    )


@pytest.fixture
def api_gateway_event():
    """API Gateway REST proxy event requesting images/photos/cat.jpg."""

    def _make(descriptor: dict = None) -> dict:
        descriptor = descriptor or {"bucket": "images", "key": "photos/cat.jpg"}
        proxy = encode_descriptor(descriptor)
        return {
            "resource": "/{proxy+}",
            "path": f"/{proxy}",
            "httpMethod": "GET",
            "headers": {"Host": "images.example.com", "Accept": "image/webp,*/*"},
            "multiValueHeaders": {"Host": ["images.example.com"]},
            "queryStringParameters": None,
            "multiValueQueryStringParameters": None,
            "pathParameters": {"proxy": proxy},
            "stageVariables": None,
            "requestContext": {
                "resourcePath": "/{proxy+}",
                "httpMethod": "GET",
                "path": f"/image/{proxy}",
                "stage": "image",
                "requestId": "c6af9ac6-7b61-11e6-9a41-93e8deadbeef",
                "identity": {"sourceIp": "203.0.113.10", "userAgent": "pytest"},
            },
            "body": None,
            "isBase64Encoded": False,
        }

    return _make


@pytest.fixture
def load_balancer_event():
    """ALB target event requesting images/photos/cat.jpg."""

    def _make(descriptor: dict = None) -> dict:
        descriptor = descriptor or {"bucket": "images", "key": "photos/cat.jpg"}
        return {
            "requestContext": {
                "elb": {
                    "targetGroupArn": "arn:aws:elasticloadbalancing:us-east-1:123456789012:"
                    "targetgroup/image-handler/6d0ecf831eec9f09"
                }
            },
            "httpMethod": "GET",
            "path": f"/{encode_descriptor(descriptor)}",
            "queryStringParameters": {},
            "headers": {"host": "images.example.com"},
            "body": "",
            "isBase64Encoded": False,
        }

    return _make
