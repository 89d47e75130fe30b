"""
Generative Sketches Viewer - Entry Point

Usage:
    python -m generative_art [preset] [--window WxH] [--preview] [--snap N]

Examples:
    python -m generative_art
    python -m generative_art lorenz
    python -m generative_art topology --window 1200x800
    python -m generative_art ripples --preview
    python -m generative_art all --snap 240

Engines:
    resonance   - Spring-mass grid driven by interfering waves (default)
    attractor   - Lorenz / Rossler trails under a pointer-steered camera
    topology    - Iso-contours of a drifting noise terrain

Use --list to see all available presets.
"""

import math
import os
import sys

from .engine_base import Quality
from .presets import PRESET_ORDER, ENGINE_ORDER, list_presets


def snap(preset, width, height, frames, quality=Quality.full):
    """Headless mode: run N frames, save the last one as PNG, exit."""
    from PIL import Image
    from .simulator import SketchSimulator

    screenshots_dir = os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
        "screenshots"
    )
    os.makedirs(screenshots_dir, exist_ok=True)

    presets_to_snap = [preset] if preset != "all" else PRESET_ORDER

    for pkey in presets_to_snap:
        sim = SketchSimulator(pkey, width, height, quality)
        print(f"  {pkey}: running {frames} frames...", end="", flush=True)
        rgb = None
        for i in range(frames):
            # Slow circular sweep so pointer-driven behaviour shows up
            t = i / max(frames, 1)
            angle = 2.0 * math.pi * t
            sim.set_pointer(0.5 + 0.3 * math.cos(angle), 0.5 + 0.3 * math.sin(angle))
            rgb = sim.render()

        img = Image.fromarray(rgb)
        path = os.path.join(screenshots_dir, f"sketch_{pkey}.png")
        img.save(path)
        img.save(os.path.join(screenshots_dir, "latest.png"))
        print(f" saved: {path}")


def main():
    preset = "resonance"
    win_w, win_h = 800, 600
    quality = Quality.full
    snap_frames = 0

    args = sys.argv[1:]
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--window" and i + 1 < len(args):
            parts = args[i + 1].split("x")
            win_w, win_h = int(parts[0]), int(parts[1])
            i += 2
        elif arg == "--snap" and i + 1 < len(args):
            snap_frames = int(args[i + 1])
            i += 2
        elif arg == "--preview":
            quality = Quality.preview
            i += 1
        elif arg == "--list":
            print("\nAvailable presets:")
            for engine in ENGINE_ORDER:
                print(f"\n  [{engine}]")
                for key, name, desc in list_presets(engine):
                    print(f"    {key:16s} {name:20s} {desc}")
            print()
            return
        elif arg in ("--help", "-h"):
            print(__doc__)
            return
        elif arg in PRESET_ORDER or arg == "all":
            preset = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return

    if snap_frames > 0:
        print(f"Headless snap mode: {preset} @ {win_w}x{win_h}, {snap_frames} frames")
        snap(preset, win_w, win_h, snap_frames, quality)
        return

    if preset == "all":
        preset = PRESET_ORDER[0]

    print("Starting Generative Sketches Viewer")
    print(f"  Preset: {preset}")
    print(f"  Window: {win_w}x{win_h}")
    print(f"  Quality: {quality.value}")
    print()

    from .viewer import Viewer
    viewer = Viewer(width=win_w, height=win_h, start_preset=preset, quality=quality)
    viewer.run()


if __name__ == "__main__":
    main()
