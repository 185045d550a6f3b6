"""Tests for incremental statistics and full reconciliation."""

import asyncio

from pokernight.database.models import Game
from pokernight.services.player_stats_sync import PlayerStatsSyncService
from pokernight.utils.fingerprint import fingerprint_seating


def run(coro):
    return asyncio.run(coro)


def make_game(game_id, seating, buy_in=0.0, first=None, second=None, third=None):
    game = Game(id=game_id, seating_hash=fingerprint_seating(seating), buy_in=buy_in,
                winner=first, second_place=second, third_place=third)
    game.seating = seating
    return game


async def play_history(stack):
    """Build a mixed history through the public operations"""
    ops = stack.seating_ops
    plan = [
        (["Ann", "Bob", "Cat"], 0.1, ("Bob", None, None)),
        (["Ann", "Bob", "Cat", "Dan"], 0.2, ("Dan", "Ann", "Cat")),
        (["Bob", "Dan"], 33.33, ("Dan", "Bob", None)),
        (["Ann", "Cat", "Eve"], 0, ("Eve", "Ann", None)),
        (["Ann", "Bob", "Cat", "Dan", "Eve"], 12.7, ("Ann", None, "Eve")),
        (["Ann", "Bob", "Cat"], 0.3, None),
    ]
    for roster, buy_in, placements in plan:
        result = await ops.generate_seating(roster, buy_in)
        if placements:
            await ops.record_results(result.game_id, *placements)


class TestReplay:
    def test_counts_games_wins_and_top3(self):
        games = [
            make_game(1, ["A", "B", "C"], first="B", second="A"),
            make_game(2, ["A", "B", "C"], first="C", second="B", third="A"),
            make_game(3, ["A", "B"]),
        ]
        stats = PlayerStatsSyncService.replay(games)

        assert stats["A"].games_played == 3
        assert stats["A"].wins == 0
        assert stats["A"].top3_count == 2
        assert stats["B"].wins == 1
        assert stats["B"].top3_count == 2
        assert stats["C"].games_played == 2
        assert stats["C"].wins == 1
        assert stats["C"].top3_count == 1

    def test_winnings_and_net_profit(self):
        games = [
            make_game(1, ["A", "B", "C", "D"], buy_in=100, first="A"),
            make_game(2, ["A", "B"], buy_in=50, first="B"),
        ]
        stats = PlayerStatsSyncService.replay(games)

        assert stats["A"].total_buy_ins == 150
        assert stats["A"].total_winnings == 400
        assert stats["A"].net_profit == 250
        assert stats["B"].total_winnings == 100
        assert stats["B"].net_profit == -50
        assert stats["C"].net_profit == -100

    def test_active_game_counts_buy_in_but_no_placements(self):
        stats = PlayerStatsSyncService.replay([make_game(1, ["A", "B"], buy_in=20)])

        assert stats["A"].games_played == 1
        assert stats["A"].total_buy_ins == 20
        assert stats["A"].wins == 0
        assert stats["A"].net_profit == -20

    def test_unseated_placement_is_skipped(self):
        stats = PlayerStatsSyncService.replay([make_game(1, ["A", "B"], buy_in=10, first="A", second="Ghost")])

        assert "Ghost" not in stats
        assert stats["A"].wins == 1

    def test_empty_history(self):
        assert PlayerStatsSyncService.replay([]) == {}


class TestIncrementalMatchesRecompute:
    def test_all_aggregates_bit_identical(self, make_stack):
        async def scenario():
            async with make_stack() as stack:
                await play_history(stack)
                incremental = await stack.stats()
                await stack.admin_ops.recompute_statistics()
                return incremental, await stack.stats()

        incremental, recomputed = run(scenario())

        assert set(incremental) == {"Ann", "Bob", "Cat", "Dan", "Eve"}
        assert incremental == recomputed

    def test_expected_totals(self, make_stack):
        async def scenario():
            async with make_stack() as stack:
                await play_history(stack)
                return await stack.stats()

        stats = run(scenario())

        games_played, wins, top3, *_ = stats["Dan"]
        assert (games_played, wins, top3) == (3, 2, 2)
        games_played, wins, top3, *_ = stats["Ann"]
        assert (games_played, wins, top3) == (5, 1, 3)


class TestRecomputeAll:
    def test_idempotent(self, make_stack):
        async def scenario():
            async with make_stack() as stack:
                await play_history(stack)
                await stack.admin_ops.recompute_statistics()
                once = await stack.stats()
                await stack.admin_ops.recompute_statistics()
                return once, await stack.stats()

        once, twice = run(scenario())
        assert once == twice

    def test_repairs_drifted_rows(self, make_stack):
        async def scenario():
            async with make_stack() as stack:
                await play_history(stack)
                expected = await stack.stats()

                async with stack.db.transaction() as session:
                    rows = await stack.db.get_player_statistics(session, ["Ann", "Bob"])
                    rows["Ann"].wins = 99
                    rows["Bob"].total_winnings = -1.0
                    session.add(rows["Ann"])

                await stack.admin_ops.recompute_statistics()
                return expected, await stack.stats()

        expected, repaired = run(scenario())
        assert repaired == expected

    def test_returns_player_count(self, make_stack):
        async def scenario():
            async with make_stack() as stack:
                await play_history(stack)
                return await stack.admin_ops.recompute_statistics()

        assert run(scenario()) == 5

    def test_recompute_inside_caller_transaction(self, make_stack):
        async def scenario():
            async with make_stack() as stack:
                await stack.seating_ops.generate_seating(["A", "B"], 5)
                async with stack.db.transaction() as session:
                    count = await stack.stats_sync.recompute_all(session)
                return count, await stack.stats()

        count, stats = run(scenario())
        assert count == 2
        assert stats["A"] == (1, 0, 0, 5.0, 0.0, -5.0)


class TestReopenedGame:
    def test_rerecording_an_older_game_matches_recompute(self, make_stack):
        async def scenario():
            async with make_stack() as stack:
                game_ids = []
                for buy_in in (0.05, 0.10, 0.15):
                    result = await stack.seating_ops.generate_seating(["A", "B", "C"], buy_in)
                    await stack.seating_ops.record_results(result.game_id, "A")
                    game_ids.append(result.game_id)

                await stack.admin_ops.update_game(game_ids[0], first=None)
                await stack.seating_ops.record_results(game_ids[0], "A")
                recorded = await stack.stats()

                await stack.admin_ops.recompute_statistics()
                return recorded, await stack.stats()

        recorded, recomputed = run(scenario())

        assert recorded["A"][:3] == (3, 3, 3)
        assert recorded == recomputed

    def test_rerecording_the_newest_game_matches_recompute(self, make_stack):
        async def scenario():
            async with make_stack() as stack:
                for buy_in in (0.05, 0.10):
                    result = await stack.seating_ops.generate_seating(["A", "B", "C"], buy_in)
                    await stack.seating_ops.record_results(result.game_id, "A")

                await stack.admin_ops.update_game(result.game_id, first=None)
                await stack.seating_ops.record_results(result.game_id, "B", "A")
                recorded = await stack.stats()

                await stack.admin_ops.recompute_statistics()
                return recorded, await stack.stats()

        recorded, recomputed = run(scenario())

        assert recorded["B"][:3] == (2, 1, 1)
        assert recorded == recomputed
