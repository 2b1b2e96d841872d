from nacl.utils import encoding, random

from kms_cli.constants import TOKEN_SIZE


def safe_base64(raw: bytes) -> str:
    """URL-safe base64 without padding"""
    return encoding.URLSafeBase64Encoder.encode(raw).decode().rstrip("=")


def random_token(size: int = TOKEN_SIZE) -> str:
    return safe_base64(random(size))
