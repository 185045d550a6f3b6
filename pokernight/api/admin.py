"""
Admin routes - login and retroactive game corrections

Every route except login requires a live bearer token. Corrections always
end in a full statistics recompute.
"""

from fastapi import APIRouter, Depends

from pokernight.api.dependencies import get_server, require_admin
from pokernight.api.schemas import LoginRequest, GameUpdateRequest
from pokernight.operations.admin_operations import UNCHANGED
from pokernight.utils.exceptions import AuthenticationError
router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login")
async def login(body: LoginRequest, server=Depends(get_server)):
    token = server.admin_sessions.login(body.password)
    if token is None:
        raise AuthenticationError("Invalid password")
    return {"token": token}


@router.post("/logout")
async def logout(token: str = Depends(require_admin), server=Depends(get_server)):
    server.admin_sessions.revoke(token)
    return {"success": True}


@router.get("/verify")
async def verify(_: str = Depends(require_admin)):
    return {"valid": True}


@router.delete("/game/{game_id}")
async def delete_game(game_id: int, _: str = Depends(require_admin), server=Depends(get_server)):
    await server.admin_ops.delete_game(game_id)
    return {"success": True}


@router.patch("/game/{game_id}")
async def update_game(
    game_id: int,
    body: GameUpdateRequest,
    _: str = Depends(require_admin),
    server=Depends(get_server)
):
    fields = body.model_fields_set
    # "winner" is the field name used by the original single-winner clients
    if "first" in fields:
        first = body.first
    elif "winner" in fields:
        first = body.winner
    else:
        first = UNCHANGED

    result = await server.admin_ops.update_game(
        game_id,
        first=first,
        second=body.second if "second" in fields else UNCHANGED,
        third=body.third if "third" in fields else UNCHANGED,
    )
    return {"success": True, "placements": result["placements"]}


@router.post("/recompute")
async def recompute(_: str = Depends(require_admin), server=Depends(get_server)):
    player_count = await server.admin_ops.recompute_statistics()
    return {"success": True, "players": player_count}
