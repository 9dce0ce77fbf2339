# Utils module
from .auth import hash_password, verify_password, generate_token, verify_token
from .storage import MinioClient, with_media_url
from .helpers import (
    success_response, error_response, validate_email, serialize_document,
    to_object_id, parse_flag, paginate
)

__all__ = [
    'hash_password', 'verify_password', 'generate_token', 'verify_token',
    'MinioClient', 'with_media_url',
    'success_response', 'error_response', 'validate_email', 'serialize_document',
    'to_object_id', 'parse_flag', 'paginate'
]
