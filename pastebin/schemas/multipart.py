"""Wire shape of the part list a client sends to complete a multipart upload.

The client accumulates the {partNumber, etag} receipts returned by each
resume call and sends them back, JSON encoded, as the content of the
completing create/update request.
"""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from pastebin.domain.exceptions import ValidationException
from pastebin.infrastructure.blob.protocol import UploadedPart


class UploadedPartIn(BaseModel):
    """One part receipt as sent by the client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    part_number: int = Field(ge=1, le=10_000)
    etag: str = Field(min_length=1)


_PART_LIST = TypeAdapter(list[UploadedPartIn])


def parse_uploaded_parts(raw: bytes | str) -> list[UploadedPart]:
    """Decode a JSON part list.

    Raises:
        ValidationException: not a JSON list of {partNumber, etag}, or empty.
    """
    try:
        parts = _PART_LIST.validate_json(raw)
    except ValidationError as e:
        raise ValidationException(f"malformed multipart part list: {e}", field="parts") from e
    if not parts:
        raise ValidationException("multipart part list is empty", field="parts")
    return [UploadedPart(part_number=p.part_number, etag=p.etag) for p in parts]
