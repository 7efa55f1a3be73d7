from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from pubshare.services.domains.publications.drafts import DEFAULT_FILE_VERSION

FileType = Literal["Main file", "supplementary material", "dataset"]
FileVisibility = Literal["Public", "private", "both"]
ResearcherType = Literal["academic", "corporate", "medical", "non_researcher"]


class ApiMeta(BaseModel):
    request_id: str | None = None


class ApiEnvelope(BaseModel):
    data: dict[str, Any]
    meta: ApiMeta


class MessageData(BaseModel):
    message: str


class MessageEnvelope(BaseModel):
    data: MessageData
    meta: ApiMeta


class PublicationListData(BaseModel):
    items: list[dict[str, Any]]
    page: int
    per_page: int
    has_more: bool


class PublicationListEnvelope(BaseModel):
    data: PublicationListData
    meta: ApiMeta


class CommentListData(BaseModel):
    comments: list[dict[str, Any]]


class CommentListEnvelope(BaseModel):
    data: CommentListData
    meta: ApiMeta


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=512)


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=512)
    password_confirm: str = Field(alias="passwordConfirm", min_length=1, max_length=512)
    name: str = ""
    bio: str = ""
    institution: str = ""
    department: str = ""
    company: str = ""
    position: str = ""
    website: str = ""
    orcid_id: str = ""
    researcher_type: ResearcherType | None = None
    is_scientific: bool = False

    def to_record(self) -> dict[str, object]:
        record = self.model_dump(exclude={"password_confirm"}, exclude_none=True)
        record["passwordConfirm"] = self.password_confirm
        return record


class CommentCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=10000)


class CoAuthorDraftIn(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1, max_length=300)
    email: str = ""
    institution: str = ""
    order: int | None = None
    is_corresponding: bool = False


class FileMetaIn(BaseModel):
    file_type: FileType = "Main file"
    visibility: FileVisibility = "Public"
    version: str = DEFAULT_FILE_VERSION
    description: str = ""
