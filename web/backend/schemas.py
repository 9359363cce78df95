from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UploadResponse(BaseModel):
    """Stored object location, serialized as {path, publicUrl}."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    path: str
    public_url: str


class SignUrlRequest(BaseModel):
    url: Optional[str] = None
    path: Optional[str] = None


class SignUrlResponse(BaseModel):
    url: str


class IncrementPlayRequest(BaseModel):
    id: Optional[Union[int, str]] = None


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None
