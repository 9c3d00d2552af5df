"""Tests for the match-3 puzzle engine."""

import pytest

from civcascade.core.config import SimulationConfig
from civcascade.core.metrics import MetricKey
from civcascade.puzzle.board import PuzzleEngine
from civcascade.puzzle.types import EMPTY, Coord, PuzzleMove, TileKind

# 5x5 board with no match; swapping (2,3)<->(2,4) completes EEE on row 2.
QUIET = ["KHCIK", "HCIKH", "CEEKE", "IKCHI", "KHCIK"]

# 5x3 board with no match; swapping (2,0)<->(2,1) clears EEE down column 0,
# which drops the C from (1,0) onto row 4 to complete CCC.
CHAIN = ["KHI", "CKH", "HEI", "EIK", "ECC"]


def _c(row, col):
    return Coord(row, col)


class TestConstruction:
    def test_board_is_fully_populated(self):
        engine = PuzzleEngine(8, 8, "fill")
        state = engine.get_state()
        assert state.rows == 8 and state.cols == 8
        assert all(not cell.is_empty for row in state.grid for cell in row)

    def test_tile_ids_are_unique(self):
        state = PuzzleEngine(8, 8, "ids").get_state()
        ids = [cell.id for row in state.grid for cell in row]
        assert len(ids) == len(set(ids))

    def test_opening_state_has_no_rewards(self):
        state = PuzzleEngine(6, 7, 3).get_state()
        assert state.pending_rewards == ()
        assert state.cascades == 0
        assert state.cols == 7

    def test_non_positive_dimensions_raise(self):
        with pytest.raises(ValueError):
            PuzzleEngine(0, 8, 1)
        with pytest.raises(ValueError):
            PuzzleEngine(8, -1, 1)

    def test_no_wildcards_when_chance_is_zero(self):
        config = SimulationConfig(wild_tile_chance=0.0)
        engine = PuzzleEngine(8, 8, "plain", config)
        kinds = {k for row in engine.get_state().kinds() for k in row}
        assert TileKind.WILD.value not in kinds

    def test_unresolvable_opening_is_accepted(self):
        # Every draw is wild, so re-rolling can never clear the matches.
        config = SimulationConfig(wild_tile_chance=1.0)
        engine = PuzzleEngine(4, 4, "wild", config)
        kinds = {k for row in engine.get_state().kinds() for k in row}
        assert kinds == {TileKind.WILD.value}
        assert engine.find_matches()


class TestMatchDetection:
    def test_quiet_board_has_no_matches(self, set_grid):
        engine = PuzzleEngine(5, 5, 1)
        set_grid(engine, QUIET)
        assert engine.find_matches() == set()

    def test_horizontal_run(self, set_grid):
        engine = PuzzleEngine(3, 3, 1)
        set_grid(engine, ["EEE", "CKH", "KHC"])
        assert engine.find_matches() == {_c(0, 0), _c(0, 1), _c(0, 2)}

    def test_wildcard_bridges_a_run(self, set_grid):
        engine = PuzzleEngine(3, 3, 1)
        set_grid(engine, ["EWE", "CKH", "KHC"])
        assert engine.find_matches() == {_c(0, 0), _c(0, 1), _c(0, 2)}

    def test_wildcard_between_different_kinds_takes_far_end_kind(self, set_grid):
        # E~W and W~C, so E W C is a run; its base kind comes from the far
        # end (C), which lets the cluster absorb the C beneath it.
        engine = PuzzleEngine(3, 3, 1)
        set_grid(engine, ["EWC", "KHC", "HKE"])
        assert engine.find_matches() == {_c(0, 0), _c(0, 1), _c(0, 2), _c(1, 2)}

    def test_crossing_runs_merge(self, set_grid):
        engine = PuzzleEngine(5, 5, 1)
        set_grid(engine, ["KHCIK", "HCEKH", "CEEEC", "IKEHI", "KHCIK"])
        assert engine.find_matches() == {
            _c(2, 1), _c(2, 2), _c(2, 3), _c(1, 2), _c(3, 2),
        }

    def test_run_of_two_is_not_a_match(self, set_grid):
        engine = PuzzleEngine(3, 3, 1)
        set_grid(engine, ["EEC", "CKH", "KHC"])
        assert engine.find_matches() == set()

    def test_matches_listed_in_discovery_order(self, set_grid):
        # Rows are scanned before columns; each run is listed from its far end.
        engine = PuzzleEngine(3, 4, 1)
        set_grid(engine, ["EEEK", "HCIK", "CHIK"])
        assert engine._matches_in_order() == [
            _c(0, 2), _c(0, 1), _c(0, 0), _c(2, 3), _c(1, 3), _c(0, 3),
        ]


class TestRejectedMoves:
    def test_non_adjacent_move_returns_none_and_keeps_grid(self):
        engine = PuzzleEngine(8, 8, "adjacency")
        before = engine.get_state().kinds()
        state_before = engine.rng.state
        assert engine.perform_move((0, 0), (0, 2)) is None
        assert engine.perform_move((0, 0), (1, 1)) is None
        assert engine.perform_move((3, 3), (3, 3)) is None
        assert engine.get_state().kinds() == before
        assert engine.rng.state == state_before

    def test_out_of_bounds_move_returns_none(self):
        engine = PuzzleEngine(8, 8, "bounds")
        before = engine.get_state().kinds()
        assert engine.perform_move((0, 7), (0, 8)) is None
        assert engine.perform_move((-1, 0), (0, 0)) is None
        assert engine.get_state().kinds() == before

    def test_swap_without_match_is_reverted(self, set_grid):
        engine = PuzzleEngine(5, 5, 1)
        set_grid(engine, QUIET)
        before = engine.get_state().to_dict()
        assert engine.perform_move((0, 0), (0, 1)) is None
        assert engine.get_state().to_dict() == before

    def test_seeded_first_swap(self):
        engine = PuzzleEngine(8, 8, "test-1")
        before = engine.get_state().kinds()
        result = engine.perform_move({"row": 0, "col": 0}, {"row": 0, "col": 1})
        if result is None:
            assert engine.get_state().kinds() == before
        else:
            assert engine.find_matches() == set()


class TestSuccessfulMoves:
    def test_move_resolves_to_fixed_point(self, set_grid):
        engine = PuzzleEngine(5, 5, "cascade")
        set_grid(engine, QUIET)
        move = engine.perform_move(_c(2, 3), _c(2, 4))
        assert isinstance(move, PuzzleMove)
        assert move.selections == (_c(2, 3), _c(2, 4))
        assert move.cleared_tiles >= 3
        assert move.combo_multiplier >= 1.0
        assert move.cascades >= 1
        assert engine.find_matches() == set()
        assert all(not c.is_empty for row in engine.get_state().grid for c in row)

    def test_rewards_are_buffered_until_collected(self, set_grid):
        engine = PuzzleEngine(5, 5, "rewards")
        set_grid(engine, QUIET)
        move = engine.perform_move(_c(2, 3), _c(2, 4))
        assert len(move.rewards) >= max(1, move.cleared_tiles // 3)
        assert engine.get_state().pending_rewards == move.rewards
        collected = engine.collect_rewards()
        assert tuple(collected) == move.rewards
        assert engine.collect_rewards() == []
        assert engine.get_state().pending_rewards == ()

    def test_chained_cascade_raises_combo(self, set_grid):
        engine = PuzzleEngine(5, 3, "chain")
        set_grid(engine, CHAIN)
        assert engine.find_matches() == set()
        move = engine.perform_move(_c(2, 0), _c(2, 1))
        assert move is not None
        assert move.cascades >= 2
        assert move.cleared_tiles >= 6
        assert move.combo_multiplier == pytest.approx(1 + (move.cascades - 1) * 0.25)
        assert move.combo_multiplier >= 1.25
        bonus = [r for r in move.rewards if r.metric is MetricKey.STABILITY]
        assert bool(bonus) == (move.combo_multiplier > 1.5)
        assert engine.find_matches() == set()

    def test_two_cascades_with_steep_step_earn_stability_bonus(self, set_grid):
        engine = PuzzleEngine(5, 3, "chain", SimulationConfig(combo_step=0.6))
        set_grid(engine, CHAIN)
        move = engine.perform_move(_c(2, 0), _c(2, 1))
        assert move.cascades >= 2
        assert move.combo_multiplier >= 1.6
        assert move.rewards[-1].metric is MetricKey.STABILITY
        assert move.rewards[-1].description == "Cascading insight steadies governance."

    def test_combo_tracks_cascade_depth_across_seeds(self, set_grid):
        for seed in ("x", "y", "z", 5, 12):
            engine = PuzzleEngine(5, 3, seed)
            set_grid(engine, CHAIN)
            move = engine.perform_move(_c(2, 0), _c(2, 1))
            assert move.combo_multiplier == pytest.approx(1 + (move.cascades - 1) * 0.25)

    def test_every_valid_move_reaches_fixed_point(self):
        for seed in ("a", "b", "c", 7, 99):
            engine = PuzzleEngine(8, 8, seed)
            for i in range(10):
                moves = engine.find_valid_moves()
                if not moves:
                    break
                move = engine.perform_move(*moves[i % len(moves)])
                assert move is not None
                assert engine.find_matches() == set()

    def test_same_seed_same_results(self):
        def play(seed):
            engine = PuzzleEngine(8, 8, seed)
            results = []
            for _ in range(6):
                moves = engine.find_valid_moves()
                if not moves:
                    break
                results.append(engine.perform_move(*moves[0]).to_dict())
            return results, engine.get_state().to_dict()

        assert play("determinism") == play("determinism")


class TestValidMoves:
    def test_search_leaves_board_untouched(self):
        engine = PuzzleEngine(8, 8, "search")
        before = engine.get_state().to_dict()
        rng_state = engine.rng.state
        engine.find_valid_moves()
        assert engine.get_state().to_dict() == before
        assert engine.rng.state == rng_state

    def test_crafted_board_moves(self, set_grid):
        engine = PuzzleEngine(5, 5, 1)
        set_grid(engine, QUIET)
        moves = engine.find_valid_moves()
        assert (_c(2, 3), _c(2, 4)) in moves
        assert all(a.is_adjacent(b) for a, b in moves)
        assert engine.has_valid_move()


class TestRewardGeneration:
    MAGNITUDES = {1.3, 1.2, 1.4, 1.1}

    def test_one_reward_per_three_tiles(self):
        engine = PuzzleEngine(4, 4, "r")
        rewards = engine._generate_rewards(9, 1.0)
        assert len(rewards) == 3
        assert all(r.delta in self.MAGNITUDES for r in rewards)
        assert MetricKey.STABILITY not in {r.metric for r in rewards}

    def test_at_least_one_reward(self):
        engine = PuzzleEngine(4, 4, "r")
        assert len(engine._generate_rewards(2, 1.0)) == 1

    def test_combo_scales_and_adds_stability(self):
        engine = PuzzleEngine(4, 4, "r")
        rewards = engine._generate_rewards(3, 1.75)
        assert len(rewards) == 2
        assert rewards[0].delta in {round(m * 1.75, 2) for m in self.MAGNITUDES}
        assert rewards[-1].metric is MetricKey.STABILITY
        assert rewards[-1].delta == 1.4

    def test_no_stability_bonus_at_threshold(self):
        engine = PuzzleEngine(4, 4, "r")
        rewards = engine._generate_rewards(3, 1.5)
        assert len(rewards) == 1


class TestCellView:
    def test_empty_cell_serializes_without_id(self):
        engine = PuzzleEngine(3, 3, 1)
        engine._grid[0][0] = None
        cell = engine.get_state().grid[0][0]
        assert cell.is_empty
        assert cell.kind == EMPTY
        assert cell.to_dict() == {"kind": "empty"}
