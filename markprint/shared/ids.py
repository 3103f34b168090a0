"""ID generation helpers."""

import uuid


def generate_id(prefix: str) -> str:
    """Generate a short prefixed identifier, e.g. ``req_3f9a1c2b7d4e``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def generate_request_id() -> str:
    return generate_id("req")


def generate_job_id() -> str:
    return generate_id("job")
