#!/usr/bin/env python3
"""
Preset JSON loading utilities.

This module defines a simple JSON schema and loader for preset systems
(templates/*.json next to this module). Each preset is an ordered list of
body states that SolarSystemModel.load_preset() swaps in atomically.

Schema
======
Template JSON (templates/*.json):
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "time_scale": 1.0,                  # optional, default None
  "bodies": [
    {
      "mass": 200.0,
      "position": [0.0, 0.0],
      "velocity": [0.0, 0.0],
      "active": true                 # optional, default true
    }
  ]
}

Users can add their own JSON files into the folder (or point the functions at
another folder) and they'll be picked up by the loader.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .data_models import BodyState

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")


class PresetError(ValueError):
  """Raised when a preset cannot be found or holds no usable bodies."""


@dataclass
class Preset:
  name: str
  bodies: List[BodyState] = field(default_factory=list)
  description: str = ""
  time_scale: Optional[float] = None


def _read_json(path: str) -> Optional[dict]:
  try:
    with open(path, "r", encoding="utf-8") as f:
      return json.load(f)
  except (OSError, json.JSONDecodeError) as exc:
    logger.warning("Could not read preset %s: %s", path, exc)
    return None


def body_state_from_dict(b: dict) -> BodyState:
  """Build a BodyState from one "bodies" entry; raises on missing or bad fields."""
  mass = float(b["mass"])
  if mass <= 0:
    raise ValueError(f"mass must be positive, got {mass}")
  return BodyState(
    mass=mass,
    position=(float(b["position"][0]), float(b["position"][1])),
    velocity=(float(b["velocity"][0]), float(b["velocity"][1])),
    active=bool(b.get("active", True)),
  )


def preset_from_dict(data: dict, default_name: str = "Preset") -> Preset:
  bodies: List[BodyState] = []
  for i, b in enumerate(data.get("bodies", [])):
    try:
      bodies.append(body_state_from_dict(b))
    except (KeyError, IndexError, TypeError, ValueError) as exc:
      logger.warning("Skipping body %d of preset %r: %s", i, default_name, exc)
      continue
  time_scale = data.get("time_scale")
  return Preset(
    name=data.get("name") or default_name,
    bodies=bodies,
    description=data.get("description", ""),
    time_scale=float(time_scale) if time_scale is not None else None,
  )


def list_templates(templates_dir: str = TEMPLATES_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, display_name) for available templates."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(templates_dir):
    return items
  for fn in sorted(os.listdir(templates_dir)):
    if not fn.lower().endswith(".json"):
      continue
    path = os.path.join(templates_dir, fn)
    data = _read_json(path) or {}
    display = data.get("name") or os.path.splitext(fn)[0]
    items.append((fn, display))
  return items


def load_template(file_name: str, templates_dir: str = TEMPLATES_DIR) -> Preset:
  """
  Load a template JSON by file name.
  Raises PresetError when the file is missing, unreadable or has no usable bodies.
  """
  path = os.path.join(templates_dir, file_name)
  data = _read_json(path)
  if data is None:
    raise PresetError(f"no readable preset at {path}")
  preset = preset_from_dict(data, default_name=os.path.splitext(file_name)[0])
  if not preset.bodies:
    raise PresetError(f"preset {preset.name!r} has no usable bodies")
  return preset


def find_template(key: str, templates_dir: str = TEMPLATES_DIR) -> Preset:
  """Load a template by file name, file stem or display name (case-insensitive)."""
  wanted = key.lower()
  for fn, display in list_templates(templates_dir):
    if wanted in (fn.lower(), os.path.splitext(fn)[0].lower(), display.lower()):
      return load_template(fn, templates_dir)
  raise PresetError(f"unknown preset {key!r}")
