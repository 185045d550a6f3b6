"""
Game routes - seating generation, active game lookup and result recording
"""

from fastapi import APIRouter, Depends

from pokernight.api.dependencies import get_server
from pokernight.api.schemas import GenerateRequest, ResultsRequest, WinnerRequest
router = APIRouter(prefix="/api", tags=["games"])


@router.post("/generate")
async def generate(body: GenerateRequest, server=Depends(get_server)):
    result = await server.seating_ops.generate_seating(body.players, body.buy_in)
    return {"seating": result.seating, "gameId": result.game_id}


@router.get("/active-game")
async def active_game(server=Depends(get_server)):
    game = await server.seating_ops.get_active_game()
    if game is None:
        return None
    return {"id": game.game_id, "seating": game.seating, "buyIn": game.buy_in}


@router.post("/results")
async def record_results(body: ResultsRequest, server=Depends(get_server)):
    await server.seating_ops.record_results(body.game_id, body.first, body.second, body.third)
    return {"success": True}


@router.post("/winner")
async def record_winner(body: WinnerRequest, server=Depends(get_server)):
    await server.seating_ops.record_results(body.game_id, body.winner)
    return {"success": True}
