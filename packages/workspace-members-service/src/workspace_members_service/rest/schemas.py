"""Pydantic request/response models for REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class WorkspaceMemberSchema(BaseModel):
    email: str | None = None
    role: str | None = None


class ReconcileMembersRequest(BaseModel):
    members: list[WorkspaceMemberSchema] = Field(default_factory=list)


class MemberErrorSchema(BaseModel):
    index: int | None = None
    email: str | None = None
    field: str
    message: str


class ReconcileMembersResponse(BaseModel):
    success: bool
    invited_count: int = 0
    updated_count: int = 0
    total_processed: int | None = None
    errors: list[MemberErrorSchema] | None = None


class InviteMemberRequest(BaseModel):
    email: str | None = None
    role: str | None = None


class InviteMemberResponse(BaseModel):
    success: bool
    message: str | None = None
    field: str | None = None
    error: str | None = None


class MemberSchema(BaseModel):
    external_id: str
    user_id: str
    email: str
    role: str
    invitation_accepted: bool


class MemberListResponse(BaseModel):
    members: list[MemberSchema]
    total: int
