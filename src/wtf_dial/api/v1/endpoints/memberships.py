"""Membership listing and invite endpoints for the WTF Dial API."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from wtf_dial.schemas.dial import DialMembershipFilter, DialMembershipList, DialOut

from ..dependencies import CurrentUserIdDep, DialServiceDep

router = APIRouter(tags=["memberships"])


@router.get("/memberships", response_model=DialMembershipList)
def list_memberships(
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
    dial_id: int | None = None,
    user_id: int | None = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int | None, Query(ge=0)] = None,
) -> DialMembershipList:
    """List memberships of dials the current user belongs to."""
    return dial_service.find_dial_memberships(
        current_user_id,
        DialMembershipFilter(dial_id=dial_id, user_id=user_id, offset=offset, limit=limit),
    )


@router.post("/invite/{invite_code}", response_model=DialOut, status_code=status.HTTP_200_OK)
def join_dial(
    invite_code: str,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> DialOut:
    """Join the dial behind an invite code."""
    return dial_service.join_dial(current_user_id, invite_code)
