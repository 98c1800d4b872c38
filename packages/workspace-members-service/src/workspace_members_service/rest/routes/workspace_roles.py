"""Single member invite endpoint."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from workspace_members_service.auth.deps import CompanyAdminDep
from workspace_members_service.db.deps import MemberInviterDep
from workspace_members_service.rest.schemas import InviteMemberRequest, InviteMemberResponse

router = APIRouter()


@router.post(
    "/companies/{company_id}/workspace_roles",
    response_model=InviteMemberResponse,
    response_model_exclude_none=True,
    status_code=201,
)
async def invite_workspace_member(
    company_id: UUID,
    request: InviteMemberRequest,
    current_user: CompanyAdminDep,
    inviter: MemberInviterDep,
):
    result = await inviter.invite(
        company_id, request.email, request.role, current_user.as_acting_user()
    )
    if not result.success:
        return JSONResponse(status_code=422, content=result.to_dict())
    return result.to_dict()
