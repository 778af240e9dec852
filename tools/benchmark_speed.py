"""
Performance Benchmark
=====================

Measures frame throughput of the pure transitions, the session wrapper and
the Gymnasium environment.

Usage:
    python -m tools.benchmark_speed [--steps S] [--envs N ...] [--quick]
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List

import numpy as np

import gymnasium as gym

from invoker.core.config_loader import load_config
from invoker.core.env_gym import InvokerEnv
from invoker.core.game import InvokerGame, collect, initial_state, set_paused, step

FRAME_MS = 1000.0 / 60.0


def _timing(mode: str, num_envs: int, num_steps: int, elapsed: float) -> dict:
    return {
        "mode": mode,
        "num_envs": num_envs,
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_envs * num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_transitions(num_steps: int = 1000, seed: int = 42) -> dict:
    """
    Benchmark the pure step/collect functions with no wrapper.

    A random key is pressed on roughly one frame in four.
    """
    config = load_config()
    rng = np.random.default_rng(seed)
    keys = config.keybindings

    state = set_paused(initial_state(config, seed=seed), False)
    start = time.perf_counter()

    for _ in range(num_steps):
        if rng.random() < 0.25:
            state = collect(state, keys[int(rng.integers(len(keys)))], config)
        state = step(state, FRAME_MS, config)

    elapsed = time.perf_counter() - start
    return _timing("transitions", 1, num_steps, elapsed)


def benchmark_session(num_steps: int = 1000, seed: int = 42) -> dict:
    """Benchmark InvokerGame.tick/press including callback dispatch."""
    config = load_config()
    game = InvokerGame(config=config, seed=seed)
    rng = np.random.default_rng(seed)
    keys = config.keybindings

    game.resume()
    start = time.perf_counter()

    for _ in range(num_steps):
        if rng.random() < 0.25:
            game.press(keys[int(rng.integers(len(keys)))])
        game.tick(FRAME_MS)

    elapsed = time.perf_counter() - start
    return _timing("session", 1, num_steps, elapsed)


def benchmark_single_env(num_steps: int = 1000, seed: int = 42) -> dict:
    """
    Benchmark single environment performance.

    Args:
        num_steps: Number of steps to run.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = InvokerEnv()
    rng = np.random.default_rng(seed)

    # Warmup
    env.reset(seed=seed)
    for _ in range(10):
        env.step(int(rng.integers(env.action_space.n)))

    env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(int(rng.integers(env.action_space.n)))
        if terminated or truncated:
            env.reset()

    elapsed = time.perf_counter() - start
    env.close()
    return _timing("env_single", 1, num_steps, elapsed)


def benchmark_vector_env(num_envs: int = 16, num_steps: int = 1000, seed: int = 42) -> dict:
    """
    Benchmark InvokerEnv batched through Gymnasium's SyncVectorEnv.

    Args:
        num_envs: Number of environments.
        num_steps: Number of batched steps.
        seed: Base random seed.

    Returns:
        Dict with timing results.
    """
    envs = gym.vector.SyncVectorEnv([InvokerEnv for _ in range(num_envs)])
    rng = np.random.default_rng(seed)
    n_actions = envs.single_action_space.n

    envs.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        envs.step(rng.integers(n_actions, size=num_envs))

    elapsed = time.perf_counter() - start
    envs.close()
    return _timing("env_vector", num_envs, num_steps, elapsed)


def run_all_benchmarks(vector_env_sizes: List[int], steps: int = 500) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("INVOKER CORE PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    for label, bench in (
        ("pure transitions", benchmark_transitions),
        ("InvokerGame session", benchmark_session),
        ("InvokerEnv (single)", benchmark_single_env),
    ):
        print(f"Benchmarking {label}...")
        result = bench(num_steps=steps)
        results.append(result)
        print(f"  Steps/sec: {result['steps_per_second']:.1f}")
        print(f"  ms/step:   {result['ms_per_step']:.3f}")
        print()

    for num_envs in vector_env_sizes:
        print(f"Benchmarking SyncVectorEnv (n={num_envs})...")
        result = benchmark_vector_env(num_envs=num_envs, num_steps=steps)
        results.append(result)
        print(f"  Env steps/sec: {result['steps_per_second']:.1f}")
        print(f"  ms/batch:      {result['ms_per_step']:.3f}")
        print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Envs':>6} {'Steps/s':>12} {'ms/step':>10}")
    print("-" * 50)

    for r in results:
        print(f"{r['mode']:<20} {r['num_envs']:>6} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.3f}")

    # CPU cost of one simulated minute at 60 fps
    frames_per_minute = 60 * 60
    core = results[0]
    print()
    print(f"One simulated minute: {frames_per_minute / core['steps_per_second'] * 1000:.1f} ms of CPU")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Invoker core performance")
    parser.add_argument("--steps", type=int, default=500, help="Steps per benchmark")
    parser.add_argument("--envs", type=int, nargs="+", default=[1, 4, 16],
                        help="Vector env sizes to test")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    steps = 100 if args.quick else args.steps
    run_all_benchmarks(vector_env_sizes=args.envs, steps=steps)
    return 0


if __name__ == "__main__":
    sys.exit(main())
