#!/usr/bin/env python3
"""
Kepler Lab headless runner.

What this module does
- Loads a built-in (or user) preset into a SolarSystemModel and steps it for a
  fixed number of frames at a fixed frame time, the way an animation loop would.
- Logs energy and angular momentum drift, the center of mass, escapes and
  collisions, and for systems with at least two bodies the orbital elements of
  the second body around the first.

Units and conventions
- Simulation units: 100 view units = 1 AU, G = 10000 (see kepler_lab.constants).
  Semi-major axis and period are also reported in AU and years.

Running
1) Install the package: `pip install -e .`
2) List presets: `orbit-lab --list`
3) Run one: `orbit-lab --preset "Sun and planet" --steps 1200 --report-every 120`
"""

import argparse
import logging
import sys
from typing import List, Optional

from kepler_lab.collisions import COLLISION_MODES, CollisionSettings
from kepler_lab.constants import DEFAULT_SUBSTEPS, to_au, to_years
from kepler_lab.logging_config import setup_logging
from kepler_lab.orbit import EllipticalOrbitEngine
from kepler_lab.physics import EngineSettings, compute_angular_momentum, compute_energy
from kepler_lab.presets_loader import TEMPLATES_DIR, PresetError, find_template, list_templates
from kepler_lab.system import SolarSystemModel

logger = logging.getLogger("kepler_lab.runner")

FRAME_DT = 1 / 60.0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orbit-lab",
        description="Step a Kepler Lab preset without a window and log what happens.",
    )
    parser.add_argument("--list", action="store_true", help="list available presets and exit")
    parser.add_argument("--preset", default="intro", help="preset file, file stem or display name")
    parser.add_argument("--templates-dir", default=TEMPLATES_DIR, help="folder holding preset JSON files")
    parser.add_argument("--steps", type=int, default=600, help="number of frames to simulate")
    parser.add_argument("--dt", type=float, default=FRAME_DT, help="frame time in simulation time units")
    parser.add_argument("--time-scale", type=float, default=None, help="override the preset time scale")
    parser.add_argument("--substeps", type=int, default=DEFAULT_SUBSTEPS, help="integrator sub-steps per frame")
    parser.add_argument("--collision-mode", choices=COLLISION_MODES, default="Flag")
    parser.add_argument("--no-collisions", action="store_true", help="let bodies pass through each other")
    parser.add_argument("--center", action="store_true", help="move the origin to the center of mass first")
    parser.add_argument("--follow", action="store_true", help="cancel the center-of-mass drift first")
    parser.add_argument("--report-every", type=int, default=60, help="frames between status lines")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    return parser


def log_status(model: SolarSystemModel, orbit: Optional[EllipticalOrbitEngine], energy0: float) -> None:
    energy = compute_energy(model.bodies, g=model.engine.settings.g)
    drift = (energy - energy0) / abs(energy0) if energy0 else 0.0
    com = model.center_of_mass
    logger.info(
        "t=%8.3f  E=%.6g (drift %+.2e)  L=%.6g  COM=(%.2f, %.2f)",
        model.time, energy, drift, compute_angular_momentum(model.bodies), com.position[0], com.position[1],
    )
    if orbit is not None and orbit.secondary.participates:
        if orbit.allowed_orbit:
            logger.info(
                "  orbit: a=%.2f (%.3f AU)  e=%.4f  w=%.3f  nu=%.3f  T=%.3f (%.3f yr)",
                orbit.a, to_au(orbit.a), orbit.e, orbit.w, orbit.nu, orbit.period, to_years(orbit.period),
            )
        else:
            logger.info("  orbit: open (e=%.4f, a=%.2f)", orbit.e, orbit.a)
    escaped = [b.name for b in model.active_bodies if model.is_body_escaped(b)]
    if escaped:
        logger.info("  escaped: %s", ", ".join(escaped))


def run(args: argparse.Namespace) -> int:
    if args.list:
        for fn, display in list_templates(args.templates_dir):
            print(f"{fn:28s} {display}")
        return 0

    if args.steps < 0 or args.dt <= 0 or args.report_every < 1:
        logger.error("steps must be >= 0, dt > 0 and report-every >= 1")
        return 2

    try:
        preset = find_template(args.preset, args.templates_dir)
        engine_settings = EngineSettings(substeps=args.substeps)
    except (PresetError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    collision_settings = CollisionSettings(enable=not args.no_collisions, mode=args.collision_mode)
    time_scale = args.time_scale if args.time_scale is not None else (preset.time_scale or 1.0)
    model = SolarSystemModel(
        preset.bodies,
        engine_settings=engine_settings,
        collision_settings=collision_settings,
        max_bodies=max(4, len(preset.bodies)),
        time_scale=time_scale,
    )
    logger.info("Preset %r: %s", preset.name, preset.description or "no description")

    if args.center:
        model.center_system()
    elif args.follow:
        model.follow_center_of_mass()

    orbit = None
    if len(model.bodies) >= 2:
        orbit = EllipticalOrbitEngine(model.bodies[0], model.bodies[1], g=model.engine.settings.g)
        model.changed.add_listener(orbit.update)

    energy0 = compute_energy(model.bodies, g=model.engine.settings.g)
    log_status(model, orbit, energy0)
    for frame in range(1, args.steps + 1):
        model.step(args.dt)
        if frame % args.report_every == 0:
            log_status(model, orbit, energy0)
        if not model.active_bodies:
            logger.warning("No bodies left after %d frames", frame)
            break

    if model.is_any_body_collided():
        logger.info("Collisions: %s", model.last_collision_msg)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
