"""
Command line:

  softrender list
  softrender render ROUTE -o FILE [--width W --height H --assets DIR --sampling POLICY]
  softrender view [ROUTE]
"""
import argparse
import logging
import sys
from typing import List, Optional

from .config import RenderConfig
from .errors import RenderError
from .logging_config import setup_logging
from .routes import ROUTES, render_png
from .texture import SAMPLING_POLICIES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="softrender",
        description="CPU software renderer: OBJ meshes to PNG images",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log transform matrices and pass timings")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--width", type=int, default=None, help="Canvas width in pixels")
    common.add_argument("--height", type=int, default=None, help="Canvas height in pixels")
    common.add_argument("--assets", default=None, help="Directory holding the OBJ assets")
    common.add_argument("--sampling", choices=SAMPLING_POLICIES, default=None,
                        help="Out-of-range texture/depth lookups: clamp or raise")
    common.add_argument("--seed", type=int, default=None, help="Seed of /flat-shading colors")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="List the available routes")

    render = sub.add_parser("render", parents=[common], help="Render one route to a PNG file")
    render.add_argument("route", choices=sorted(ROUTES), metavar="ROUTE")
    render.add_argument("-o", "--output", required=True, help="PNG file to write, '-' for stdout")

    view = sub.add_parser("view", parents=[common], help="Open the interactive preview window")
    view.add_argument("route", nargs="?", default=None, choices=sorted(ROUTES), metavar="ROUTE")
    return parser


def make_config(args) -> RenderConfig:
    """Environment defaults overridden by the command line flags."""
    return RenderConfig.from_env().with_overrides(
        width=args.width, height=args.height, assets_dir=args.assets,
        sampling=args.sampling, seed=args.seed,
    )


def cmd_list() -> int:
    width = max(len(path) for path in ROUTES)
    for path, route in ROUTES.items():
        print(f"{path:<{width}}  {route.description}")
    return 0


def cmd_render(args) -> int:
    config = make_config(args)
    png = render_png(args.route, config)
    if args.output == "-":
        sys.stdout.buffer.write(png)
    else:
        with open(args.output, "wb") as f:
            f.write(png)
        logger.info("wrote %s (%d bytes)", args.output, len(png))
    return 0


def cmd_view(args) -> int:
    from .viewer import run
    return run(make_config(args), args.route)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        if args.command == "list":
            return cmd_list()
        if args.command == "render":
            return cmd_render(args)
        return cmd_view(args)
    except (RenderError, ValueError, OSError) as e:
        logger.debug("command failed", exc_info=True)
        print(f"softrender: error: {e}", file=sys.stderr)
        return 1
