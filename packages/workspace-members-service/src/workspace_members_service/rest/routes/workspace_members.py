"""Company workspace member endpoints: list and bulk reconcile."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from workspace_members.config import MANAGEABLE_ROLES
from workspace_members.errors import MemberError
from workspace_members.service import ReconcileResult
from workspace_members.validation import normalize
from workspace_members_service.auth.deps import CompanyAdminDep
from workspace_members_service.db.deps import AccountsRepoDep, ReconcilerDep
from workspace_members_service.rest.schemas import (
    MemberListResponse,
    MemberSchema,
    ReconcileMembersRequest,
    ReconcileMembersResponse,
)
from workspace_members_service.settings import settings

router = APIRouter()


def _unmanageable_roles(request: ReconcileMembersRequest) -> list[str]:
    """Non-blank requested roles outside the manageable set, first-seen order.

    Blank roles are left to row validation, which reports them as
    "Role is required" with their index instead of a blanket 403.
    """
    roles = dict.fromkeys(normalize(m.role) for m in request.members)
    return [r for r in roles if r and r not in MANAGEABLE_ROLES]


@router.get("/companies/{company_id}/workspace_members", response_model=MemberListResponse)
async def list_workspace_members(
    company_id: UUID,
    current_user: CompanyAdminDep,
    repo: AccountsRepoDep,
) -> MemberListResponse:
    rows = await repo.list_members(company_id)
    members = [
        MemberSchema(
            external_id=row.external_id,
            user_id=str(user.id),
            email=user.email,
            role=role,
            invitation_accepted=user.invitation_accepted_at is not None,
        )
        for role, row, user in rows
    ]
    return MemberListResponse(members=members, total=len(members))


@router.post(
    "/companies/{company_id}/workspace_members",
    response_model=ReconcileMembersResponse,
    response_model_exclude_none=True,
    status_code=201,
)
async def reconcile_workspace_members(
    company_id: UUID,
    request: ReconcileMembersRequest,
    current_user: CompanyAdminDep,
    reconciler: ReconcilerDep,
):
    """Bring the company's admins and lawyers in line with the submitted list."""
    forbidden = _unmanageable_roles(request)
    if forbidden:
        return JSONResponse(
            status_code=403,
            content={"success": False, "error": f"Cannot manage roles: {', '.join(forbidden)}"},
        )

    if len(request.members) > settings.max_members_per_request:
        too_many = ReconcileResult(
            success=False,
            errors=[
                MemberError(
                    field="workspace_members",
                    message=f"Too many workspace members (maximum {settings.max_members_per_request})",
                )
            ],
        )
        return JSONResponse(status_code=422, content=too_many.to_dict())

    result = await reconciler.perform(
        company_id,
        [m.model_dump() for m in request.members],
        current_user.as_acting_user(),
    )
    if not result.success:
        return JSONResponse(status_code=422, content=result.to_dict())
    return result.to_dict()
