#!/usr/bin/env python3
"""Render one of the demo scenes or a JSON scene file.

This script renders a scene end to end: it builds the scene, applies the
render settings from the command line, casts one ray per pixel and saves
the image as a PNG.

Usage:
    python examples/render_scene.py [options]

Options:
    --scene N               Demo scene number 1-5 (default: 1)
    --scene-file PATH       Render a JSON scene file instead of a demo scene
    --width WIDTH           Image width in pixels (default: 640)
    --height HEIGHT         Image height in pixels (default: 480)
    --output OUTPUT         Output file path (default: scene.png)
    --no-shadows            Disable shadow rays
    --no-phong              Disable Phong shading (flat ambient colour)
    --no-reflections        Disable mirror reflections
    --max-reflections N     Maximum reflection bounces (default: from scene)
    --gamma GAMMA           Gamma correction for the saved image (default: 1.0)
    --preview               Show the result in a Matplotlib window
    --cpu                   Force the CPU backend
    --list                  List the demo scenes and exit
    --verbose               Enable debug logging

Example:
    python examples/render_scene.py --scene 4 --max-reflections 8 --output mirrors.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a demo scene or a JSON scene file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--scene",
        type=int,
        default=1,
        help="Demo scene number 1-5 (default: 1)",
    )
    source.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="Render a JSON scene file instead of a demo scene",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Image width in pixels (default: 640)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=480,
        help="Image height in pixels (default: 480)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="scene.png",
        help="Output file path (default: scene.png)",
    )
    parser.add_argument("--no-shadows", action="store_true", help="Disable shadow rays")
    parser.add_argument("--no-phong", action="store_true", help="Disable Phong shading")
    parser.add_argument("--no-reflections", action="store_true", help="Disable mirror reflections")
    parser.add_argument(
        "--max-reflections",
        type=int,
        default=None,
        help="Maximum reflection bounces (default: from scene)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma correction for the saved image (default: 1.0)",
    )
    parser.add_argument("--preview", action="store_true", help="Show the result in a window")
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--list", action="store_true", help="List the demo scenes and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_settings(base, args: argparse.Namespace):
    """Apply the command-line switches on top of a scene's settings."""
    from raycaster.core.settings import RenderSettings

    data = base.to_dict()
    if args.no_shadows:
        data["shadows"] = False
    if args.no_phong:
        data["phong"] = False
    if args.no_reflections:
        data["reflections"] = False
    if args.max_reflections is not None:
        data["max_reflections"] = args.max_reflections
    return RenderSettings.from_dict(data)


def render_scene(args: argparse.Namespace) -> Path:
    """Build, render and save the requested scene.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raycaster.camera.pinhole import default_camera
    from raycaster.core.renderer import Renderer
    from raycaster.preview.export import save_png
    from raycaster.scene.demo_scenes import build_demo_scene
    from raycaster.scene.manager import load_scene_file

    if args.scene_file is not None:
        manager = load_scene_file(args.scene_file)
    else:
        manager = build_demo_scene(args.scene)
    manager.set_settings(build_settings(manager.settings, args))

    camera = default_camera(aspect_ratio=args.width / args.height)
    renderer = Renderer(manager.scene, camera, args.width, args.height)

    logger.info("Rendering %s at %dx%d...", args.scene_file or f"scene {args.scene}", args.width, args.height)
    elapsed = renderer.render()

    output_file = Path(args.output)
    save_png(renderer, str(output_file), gamma=args.gamma)
    print(f"Saved to: {output_file.absolute()} ({elapsed:.2f}s)")

    if args.preview:
        from raycaster.preview.display import show_preview

        show_preview(renderer, gamma=args.gamma, title=output_file.name)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.list:
        from raycaster.scene.demo_scenes import list_demo_scenes

        for number, description in list_demo_scenes():
            print(f"{number}: {description}")
        return 0

    # Taichi falls back to the CPU when no GPU backend is available
    ti.init(arch=ti.cpu if args.cpu else ti.gpu)

    try:
        render_scene(args)
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
