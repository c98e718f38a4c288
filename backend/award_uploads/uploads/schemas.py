"""Pydantic schemas for award image uploads.

This module defines the data models shared by the upload pipeline:
- StagedFile: a file sitting in temporary storage, before persistence
- LocalReference / RemoteReference: where a persisted file ended up
- FileRegistryEntry: the staged file plus its reference, kept per entity id
- UploadResponse and friends: API payloads

Exactly one reference variant exists per staged file.  The variant is chosen
when the file is persisted and never changes afterwards.
"""
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class StorageKind(str, Enum):
    """Where a persisted award image lives."""
    LOCAL = "local"
    REMOTE = "remote"


class StagedFile(BaseModel):
    """A file written to the staging directory by the multipart parser."""
    original_filename: str = Field(..., description="Filename sent by the client")
    filename: str = Field(..., description="Generated award-<uuid><ext> filename")
    extension: str = Field("", description="Original extension, including the dot")
    mime_type: str = Field("application/octet-stream", description="MIME type")
    size_bytes: int = Field(0, description="File size in bytes")
    destination: str = Field(..., description="Staging directory")
    path: str = Field(..., description="Temporary path of the staged bytes")


class LocalReference(BaseModel):
    """A file copied into the permanent upload directory."""
    kind: Literal["local"] = "local"
    filename: str
    path: str

    @property
    def value(self) -> str:
        return self.filename


class RemoteReference(BaseModel):
    """A file handed to the remote image capability.

    Any extra fields returned by the capability are kept alongside
    ``name`` and ``url``.
    """
    model_config = ConfigDict(extra="allow")

    kind: Literal["remote"] = "remote"
    name: str
    url: str

    @property
    def value(self) -> str:
        return self.url


PersistedReference = Annotated[
    Union[LocalReference, RemoteReference],
    Field(discriminator="kind"),
]


class FileRegistryEntry(BaseModel):
    """The most recent upload associated with an entity id."""
    staged: StagedFile
    reference: PersistedReference

    @property
    def storage(self) -> StorageKind:
        if isinstance(self.reference, LocalReference):
            return StorageKind.LOCAL
        return StorageKind.REMOTE

    def descriptor(self) -> Dict[str, Any]:
        """Merge staged fields with whatever persistence produced.

        Fields supplied by the reference win; anything it does not supply
        keeps its staged value.
        """
        merged: Dict[str, Any] = self.staged.model_dump()
        merged["name"] = self.staged.original_filename
        if isinstance(self.reference, LocalReference):
            merged["local_path"] = self.reference.path
        else:
            merged.update(self.reference.model_dump(exclude={"kind"}))
        return merged


class UploadResponse(BaseModel):
    """Response body for a successful upload."""
    model_config = ConfigDict(populate_by_name=True)

    entity_id: str = Field(..., alias="entityId")
    file: Dict[str, Any]
    storage: StorageKind


class ReplaceRequest(BaseModel):
    """Request body for replacing the image of an entity.

    Attributes:
        previous_image: The stored value of the image being replaced, either
                        a local filename or a remote URL.
    """
    previous_image: Optional[str] = None


class ReplaceResponse(BaseModel):
    entity_id: str
    destination: str


class ImageUrlResponse(BaseModel):
    url: str


class DeleteImageResponse(BaseModel):
    image: str
    deleted: bool
