"""Dial-related endpoints for the WTF Dial API."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query, status

from wtf_dial.schemas.dial import (
    DialCreate,
    DialFilter,
    DialList,
    DialOut,
    DialUpdate,
    DialValueOut,
    MembershipValueUpdate,
)

from ..dependencies import CurrentUserIdDep, DialServiceDep

router = APIRouter(prefix="/dials", tags=["dials"])


@router.get("/", response_model=DialList)
def list_dials(
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int | None, Query(ge=0)] = None,
) -> DialList:
    """List the dials the current user is a member of."""
    return dial_service.find_dials(current_user_id, DialFilter(offset=offset, limit=limit))


@router.post("/", response_model=DialOut, status_code=status.HTTP_201_CREATED)
def create_dial(
    dial_data: DialCreate,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> DialOut:
    """Create a new dial owned by the current user."""
    return dial_service.create_dial(current_user_id, dial_data)


@router.get("/{dial_id}", response_model=DialOut)
def get_dial(
    dial_id: int,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> DialOut:
    """Get a dial along with its memberships."""
    return dial_service.find_dial_by_id(current_user_id, dial_id)


@router.patch("/{dial_id}", response_model=DialOut)
def update_dial(
    dial_id: int,
    dial_data: DialUpdate,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> DialOut:
    """Rename a dial."""
    return dial_service.update_dial(current_user_id, dial_id, dial_data)


@router.delete("/{dial_id}")
def delete_dial(
    dial_id: int,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> dict[str, str]:
    """Permanently delete a dial and all of its memberships."""
    dial_service.delete_dial(current_user_id, dial_id)
    return {}


@router.get("/{dial_id}/history", response_model=list[DialValueOut])
def get_dial_history(
    dial_id: int,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
    since: datetime | None = None,
) -> list[DialValueOut]:
    """Return the per-minute value history of a dial."""
    return dial_service.dial_history(current_user_id, dial_id, since)


@router.post("/{dial_id}/recompute")
def recompute_dial(
    dial_id: int,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> dict[str, str]:
    """Re-sync a dial's value with its memberships."""
    dial_service.find_dial_by_id(current_user_id, dial_id)
    outcome = dial_service.recompute_dial_value(dial_id)
    return {"outcome": outcome.value}


@router.put("/{dial_id}/membership")
def set_membership_value(
    dial_id: int,
    body: MembershipValueUpdate,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> dict[str, str]:
    """Set the current user's value on a dial."""
    dial_service.set_membership_value(current_user_id, dial_id, body.value)
    return {}


@router.delete("/{dial_id}/membership")
def leave_dial(
    dial_id: int,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> dict[str, str]:
    """Remove the current user's membership from a dial."""
    dial_service.delete_membership(current_user_id, dial_id)
    return {}


@router.delete("/{dial_id}/memberships/{member_user_id}")
def remove_member(
    dial_id: int,
    member_user_id: int,
    current_user_id: CurrentUserIdDep,
    dial_service: DialServiceDep,
) -> dict[str, str]:
    """Remove another member from a dial the current user owns."""
    dial_service.delete_membership(current_user_id, dial_id, member_user_id)
    return {}
