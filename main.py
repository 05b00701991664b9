"""
main.py — Master Entry Point
=============================
Runs the wind simulation on a demo scene: a closed box with a pillar in
the middle and a steady breeze along +X.

Usage:
    python main.py                    # Headless run, prints stats (default)
    python main.py --mode live        # Live visualization
    python main.py --mode benchmark   # Benchmark step performance
    python main.py --mode bake        # Bake streamlines and report the error
"""

import argparse
import logging
import numpy as np

DEMO_BREEZE = (2.0, 0.0, 0.0)


def build_demo(width: float, height: float, depth: float, cell_size: float,
               tornado: bool = False):
    """Simulation over a pillar scene, primed with a breeze or a tornado."""
    from wind import BoxScene, WindSimulation

    sim = WindSimulation(width, height, depth, cell_size=cell_size)

    scene = BoxScene()
    scene.add_centered_box((width / 2, height / 2, depth / 2),
                           (width / 6, height, depth / 6))
    solid = sim.build_for_scene(scene, position=(0.0, 0.0, 0.0))

    if tornado:
        sim.set_as_tornado()
    else:
        sim.fill_velocity(DEMO_BREEZE)

    print(f"Scene: {len(scene)} box(es), {solid} solid cells")
    return sim


def run_live(args):
    """Live interactive visualization."""
    from visualizer import WindVisualizer

    print(f"Starting live simulation ({args.width}x{args.height}x{args.depth}m, "
          f"cell={args.cell_size}m)...")
    print("Close the window to exit.\n")

    sim = build_demo(args.width, args.height, args.depth, args.cell_size, args.tornado)
    viz = WindVisualizer(sim, delta=args.dt, source_every=10)
    viz.run(fps=30, frames=args.frames)


def run_headless(args):
    """Run simulation without display, printing stats every 10 frames."""
    print(f"\nHeadless simulation | {args.width}x{args.height}x{args.depth}m | "
          f"{args.frames} frames")
    print(f"{'─'*60}")

    sim = build_demo(args.width, args.height, args.depth, args.cell_size, args.tornado)
    total_times = []

    for f in range(args.frames):
        if f % 10 == 0:
            sim.add_density_source()
        if f == args.frames // 2:
            sim.add_velocity_source()

        metrics = sim.step(args.dt)
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"density={metrics['density_total']:.3f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    print()
    print(sim)


def run_benchmark(args):
    """Per-phase timing breakdown of step()."""
    print(f"\n{'='*60}")
    print(f"  WIND STEP BENCHMARK | {args.width}x{args.height}x{args.depth}m | "
          f"{args.frames} frames")
    print(f"{'='*60}")

    sim = build_demo(args.width, args.height, args.depth, args.cell_size, args.tornado)

    # Warm up (also compiles the relaxation kernel)
    for _ in range(5):
        sim.step(args.dt)

    logs = [sim.step(args.dt) for _ in range(args.frames)]

    keys = ["density_ms", "velocity_ms", "total_ms"]
    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  Steps per second: {1000/np.mean(total_vals):.1f}")


def run_bake(args):
    """Settle the wind, bake streamlines and compare the bake with the simulation."""
    from wind import DeltaField, bake

    sim = build_demo(args.width, args.height, args.depth, args.cell_size, args.tornado)
    print(f"Settling wind for {args.frames} frames...")
    sim.step_n(args.dt, args.frames)

    lines = bake(sim)
    points = sum(len(line.points) for line in lines)
    print(f"Baked {len(lines)} streamlines, {points} points")

    # Compare against the simulation's own sampler (error of the sampling alone)
    delta = DeltaField().build(sim, sim.velocity.sample_near)
    print(f"Mean delta vs. sampled wind: {delta.error():.5f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="3D Wind Simulation")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark", "bake"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--width",     type=float, default=16.0, help="Volume width in meters")
    parser.add_argument("--height",    type=float, default=8.0,  help="Volume height in meters")
    parser.add_argument("--depth",     type=float, default=16.0, help="Volume depth in meters")
    parser.add_argument("--cell-size", type=float, default=1.0,  help="Cell edge length in meters")
    parser.add_argument("--dt",        type=float, default=1 / 60, help="Timestep in seconds")
    parser.add_argument("--frames",    type=int,   default=100, help="Number of frames")
    parser.add_argument("--tornado",   action="store_true", help="Start from the tornado preset")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log library messages")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    if args.mode == "live":
        run_live(args)
    elif args.mode == "headless":
        run_headless(args)
    elif args.mode == "benchmark":
        run_benchmark(args)
    elif args.mode == "bake":
        run_bake(args)
