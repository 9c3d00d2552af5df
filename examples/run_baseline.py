#!/usr/bin/env python3
"""Play a few puzzle moves against a baseline civilization and print results."""

from civcascade.core.config import SimulationConfig
from civcascade.core.events import describe_event
from civcascade.core.rng import DeterministicRandom
from civcascade.game.session import SessionCoordinator
from civcascade.metrics.collector import MetricsCollector

CYCLES = 5
MAX_ATTEMPTS = 30


def print_snapshot(label, snapshot):
    print(f"\n=== {label} (tick {snapshot.tick}) ===")
    print(" | ".join(f"{k}: {v:.1f}" for k, v in snapshot.metrics.items()))
    for event in snapshot.events[:3]:
        print(f" - {describe_event(event)}")


def try_random_move(session, picker):
    """Attempt random right/down swaps until one matches or attempts run out."""
    state = session.board_state()
    for _ in range(MAX_ATTEMPTS):
        row = picker.int_between(0, state.rows - 1)
        col = picker.int_between(0, state.cols - 1)
        dr, dc = (0, 1) if picker.next() > 0.5 else (1, 0)
        if row + dr >= state.rows or col + dc >= state.cols:
            continue
        move = session.play_move((row, col), (row + dr, col + dc))
        if move is not None:
            return move
    return None


def main():
    config = SimulationConfig(experiment_name="baseline", random_seed="demo-seed")
    session = SessionCoordinator(config)
    collector = MetricsCollector()
    picker = DeterministicRandom("demo-picks")

    print(f"=== Civ Cascade: {config.experiment_name} (seed {config.random_seed!r}) ===")
    print_snapshot("Initial state", session.snapshot())
    collector.collect(session.snapshot())

    for cycle in range(1, CYCLES + 1):
        move = try_random_move(session, picker)
        if move is None:
            print(f"\nCycle {cycle}: no valid puzzle move located.")
        else:
            print(
                f"\nCycle {cycle}: cleared {move.cleared_tiles} tiles "
                f"(x{move.combo_multiplier:.2f}, {move.cascades} cascades)."
            )
            for reward in move.rewards:
                print(f"  Reward -> {reward.metric.value} +{reward.delta:.2f}")

        snapshot = session.step_tick()
        collector.collect(snapshot)
        print_snapshot(f"Post-cycle {cycle}", snapshot)

    print(f"\n{'Metric':>15} {'Mean':>7} {'Std':>6} {'Min':>7} {'Max':>7} {'Last':>7}")
    print("-" * 55)
    for metric, s in collector.summary().items():
        print(
            f"{metric:>15} {s['mean']:7.2f} {s['std']:6.2f} "
            f"{s['min']:7.2f} {s['max']:7.2f} {s['last']:7.2f}"
        )

    final = collector.metrics_history[-1]
    print(f"\nExposed resources: {', '.join(final.exposed_resources) or 'none'}")
    print(f"Technologies unlocked: {final.unlocked_techs}")


if __name__ == "__main__":
    main()
