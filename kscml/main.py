"""
kscml command line
Main entry point: texture to PNG, container snapshots and Spriter export
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PIL import Image

from .core.animation import ANIM_MAGIC, AnimationContainer
from .core.errors import FormatError, KleiAssetError
from .core.scml import ConversionReport, build_scml
from .core.texture import TEXTURE_MAGIC, TextureContainer
from .core.texture_atlas import BUILD_MAGIC, AtlasContainer
from .utils.diagnostics import Diagnostics
from .utils.file_loader import detect_container, load_animation, load_atlas, load_texture, read_container
from .utils.settings import SettingsManager

# Colour of placeholder images for unresolved symbol frames
PLACEHOLDER_COLOR = (255, 0, 0, 0)


def write_placeholders(report: ConversionReport, directory: Path) -> List[Path]:
    """
    Write a 1x1 image for every missing symbol frame

    Args:
        report: Report returned by the export
        directory: Root folder for the placeholder images

    Returns:
        Paths of the written images
    """
    written = []
    for relative in report.missing_files():
        target = directory / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGBA", (1, 1), PLACEHOLDER_COLOR).save(target)
        written.append(target)
    return written


def cmd_tex2png(args, diagnostics: Diagnostics) -> int:
    texture = load_texture(args.input, diagnostics)
    output = args.output or args.input.with_suffix(".png")
    texture.to_image(args.mip).save(output)
    print(f"Wrote {output}")
    return 0


def cmd_dump(args, diagnostics: Diagnostics) -> int:
    data = read_container(args.input)
    magic = detect_container(data)
    if magic == BUILD_MAGIC:
        snapshot = AtlasContainer.from_bytes(data, diagnostics).to_dict()
    elif magic == ANIM_MAGIC:
        snapshot = AnimationContainer.from_bytes(data, diagnostics).to_dict()
    elif magic == TEXTURE_MAGIC:
        snapshot = TextureContainer.from_bytes(data, diagnostics).to_dict()
    else:
        raise FormatError(f"Unknown container magic {magic!r}")

    output = args.output or args.input.with_suffix(".json")
    output.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False))
    print(f"Wrote parsed data to {output}")
    return 0


def cmd_scml(args, diagnostics: Diagnostics) -> int:
    settings = SettingsManager(args.settings).load()
    diagnostics.config = settings.diagnostics
    if args.verbose:
        diagnostics.config.minimum_severity = "DEBUG"

    animation = load_animation(args.anim, diagnostics)
    atlas = load_atlas(args.build, diagnostics)
    content, report = build_scml(animation, atlas, settings, diagnostics)

    output = args.output or args.anim.with_suffix(".scml")
    output.write_text(content, encoding="utf-8")
    print(f"Wrote {output}")

    if not report.is_clean:
        print(report.summary())
    if args.placeholders:
        written = write_placeholders(report, args.placeholders)
        print(f"Wrote {len(written)} placeholder image(s) to {args.placeholders}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kscml",
        description="Decode Klei texture/build/animation containers and export Spriter projects.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug diagnostics.")
    sub = parser.add_subparsers(dest="command", required=True)

    tex = sub.add_parser("tex2png", help="Decode a .tex texture to PNG.")
    tex.add_argument("input", type=Path, help="Path to the .tex file.")
    tex.add_argument("-o", "--output", type=Path, help="Destination PNG path.")
    tex.add_argument("--mip", type=int, default=0, help="Mip level to decode (default 0).")
    tex.set_defaults(handler=cmd_tex2png)

    dump = sub.add_parser("dump", help="Write a JSON snapshot of a container.")
    dump.add_argument("input", type=Path, help="Path to a build, animation or texture file.")
    dump.add_argument("-o", "--output", type=Path, help="Destination JSON path.")
    dump.set_defaults(handler=cmd_dump)

    scml = sub.add_parser("scml", help="Export an animation and its build as SCML.")
    scml.add_argument("anim", type=Path, help="Path to anim.bin.")
    scml.add_argument("build", type=Path, help="Path to build.bin.")
    scml.add_argument("-o", "--output", type=Path, help="Destination .scml path.")
    scml.add_argument("--placeholders", type=Path, help="Write placeholder images for missing frames here.")
    scml.add_argument("--settings", type=Path, help="INI settings file (defaults to the per-user settings).")
    scml.set_defaults(handler=cmd_scml)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="[%(levelname)s] %(message)s")

    diagnostics = Diagnostics()
    if args.verbose:
        diagnostics.config.minimum_severity = "DEBUG"

    try:
        return args.handler(args, diagnostics)
    except KleiAssetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
