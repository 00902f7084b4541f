#!/usr/bin/env python3
# ascii_image/cli.py
"""
Entry point for the ASCII image renderer.

    ascii-image render IMAGE [--width N] [--dither MODE] [--charset NAME] [--out FILE]
    ascii-image view IMAGE
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import List, Optional

from ascii_image.config import COLOR_MODES, DITHER_MODES, Config
from ascii_image.fonts import FontMetrics, FontSpec
from ascii_image.loader import ImageLoader, ImageLoadError
from ascii_image.logging_conf import setup_logging
from ascii_image.models import RenderConfig
from ascii_image.pipeline import AsciiPipeline
from ascii_image.rendering.colors import extract_main_colors
from ascii_image.rendering.renderer import Renderer, RenderOptions
from ascii_image.version import version_info

logger = logging.getLogger("ascii_image.cli")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ascii-image", description="Render images as ASCII art.")
    p.add_argument("--config", help="config file (default: ASCII_IMAGE_CONFIG or the per-user file)")
    p.add_argument("--version", action="version", version=version_info())
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="render once to stdout, a .txt or a .png file")
    r.add_argument("image", help="path, file:// or http(s) URL")
    r.add_argument("--width", type=int, help="output width in characters")
    r.add_argument("--dither", choices=DITHER_MODES)
    r.add_argument("--charset", help="character set name, or 'custom'")
    r.add_argument("--custom", help="custom character set, darkest glyph first")
    r.add_argument("--invert", action="store_true", default=None)
    r.add_argument("--contrast", type=float)
    r.add_argument("--brightness", type=float)
    r.add_argument("--blur", type=float)
    r.add_argument("--keep-white", action="store_true", help="render pure white pixels too")
    r.add_argument("--jitter", action="store_true", help="seeded brightness jitter before dithering")
    r.add_argument("--color-mode", choices=COLOR_MODES)
    r.add_argument("--seed", type=int, default=1, help="seed for noise dithering and jitter")
    r.add_argument("--out", "-o", help="output file; .png renders glyph images")

    v = sub.add_parser("view", help="interactive terminal viewer")
    v.add_argument("image", help="path, file:// or http(s) URL")
    return p


def _overrides(args: argparse.Namespace) -> dict:
    render = {}
    if args.width is not None:
        render["output_width"] = args.width
    if args.dither is not None:
        render["dither"] = args.dither
    if args.charset is not None:
        render["character_set"] = args.charset
    if args.custom is not None:
        render["custom_character_set"] = args.custom
        render.setdefault("character_set", "custom")
    if args.invert:
        render["invert_colors"] = True
    if args.contrast is not None:
        render["contrast"] = args.contrast
    if args.brightness is not None:
        render["brightness"] = args.brightness
    if args.blur is not None:
        render["blur"] = args.blur
    if args.keep_white:
        render["white_mode"] = "keep"
    if args.jitter:
        render["jitter"] = True
    out = {"render": render}
    if args.color_mode is not None:
        out["color"] = {"mode": args.color_mode}
    return out


def cmd_render(args: argparse.Namespace, cfg: Config) -> int:
    cfg.update(_overrides(args))
    loader = ImageLoader.from_config(cfg)
    try:
        img = loader.load(args.image)
    except ImageLoadError as exc:
        logger.error("%s", exc)
        return 1
    finally:
        loader.close()

    metrics = FontMetrics()
    font = FontSpec.from_config(cfg)
    config = RenderConfig.from_config(cfg, metrics.aspect_ratio(font))
    pipeline = AsciiPipeline()

    if cfg["color"]["extract"]:
        accent, second = extract_main_colors(pipeline.sample(img, config))
        config = config.with_changes(color=replace(config.color, color1=accent, color2=second))

    grid = pipeline.run(img, config, seed=args.seed)
    logger.info("rendered %s as %dx%d", args.image, grid.width, grid.height)

    out = args.out
    if out and os.path.splitext(out)[1].lower() == ".png":
        lay = cfg["layout"]
        options = RenderOptions(
            container=(lay["width"], lay["height"]),
            sizing=lay["sizing"],
            background=lay["background"],
            font=font,
            glow_blur=cfg["glow"]["blur"] if config.color.mode == "glow" else 0.0,
            glow_opacity=cfg["glow"]["opacity"],
        )
        Renderer(metrics).render(grid, "canvas", options).save(out)
        return 0

    text = grid.text() + "\n"
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        sys.stdout.write(text)
    return 0


def cmd_view(args: argparse.Namespace, cfg: Config) -> int:
    if os.name == "nt" and not sys.stdout.isatty():
        print("No Windows console detected. Run from cmd, PowerShell, or Windows Terminal.")
        return 1
    # Imported here so `render` works without a terminal.
    from ascii_image.ui.app import AsciiViewerApp

    AsciiViewerApp(args.image, cfg).run()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    cfg = Config.load(args.config, create_if_missing=args.config is None)
    if args.command == "render":
        setup_logging(cfg, console=True)
        return cmd_render(args, cfg)
    return cmd_view(args, cfg)


if __name__ == "__main__":
    raise SystemExit(main())
