"""
Read-only routes - player statistics, recent history and payout previews
"""

from fastapi import APIRouter, Depends, Query

from pokernight.api.dependencies import get_server
from pokernight.utils.payouts import compute_payouts

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats")
async def stats(server=Depends(get_server)):
    entries = await server.leaderboard.get_stats()
    return [
        {
            "player": entry.player,
            "gamesPlayed": entry.games_played,
            "wins": entry.wins,
            "top3": entry.top3,
            "buyins": entry.buy_ins,
            "winnings": entry.winnings,
            "netProfit": entry.net_profit,
            "winRate": entry.win_rate,
            "top3Rate": entry.top3_rate,
        }
        for entry in entries
    ]


@router.get("/history")
async def history(server=Depends(get_server)):
    entries = await server.history.get_recent_games()
    return [
        {
            "id": entry.id,
            "createdAt": entry.created_at.isoformat() if entry.created_at else None,
            "seating": entry.seating,
            "placements": entry.placements,
            "buyIn": entry.buy_in,
            "payouts": entry.payouts.to_dict(),
        }
        for entry in entries
    ]


@router.get("/payouts")
async def payouts(players: int = Query(ge=0), buy_in: float = Query(default=0.0, ge=0, alias="buyIn")):
    return compute_payouts(players, buy_in).to_dict()
