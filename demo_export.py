# demo_export.py
"""
Headless export: stamp a logo and a date onto images without the editor.

    python demo_export.py out/ a.jpg b.jpg --logo logo.png --date 22.03
"""
import argparse
import logging
import sys

from photostamp.batch_worker import DirectorySink, batch_export
from photostamp.image_io import DecodeError, load_logo_asset
from photostamp.models import ExportSettings
from photostamp.session import EditorSession


def build_parser():
    parser = argparse.ArgumentParser(description="Stamp a logo and date onto a batch of images.")
    parser.add_argument("out_dir")
    parser.add_argument("images", nargs="+", help="image files or folders")
    parser.add_argument("--logo")
    parser.add_argument("--logo-scale", type=float, default=0.3)
    parser.add_argument("--logo-pos", type=float, nargs=2, default=(0.02, 0.02), metavar=("X", "Y"))
    parser.add_argument("--date", default="")
    parser.add_argument("--date-scale", type=float, default=0.15)
    parser.add_argument("--date-pos", type=float, nargs=2, default=(0.02, 0.06), metavar=("X", "Y"))
    parser.add_argument("--format", choices=["png", "jpg"], default="png")
    parser.add_argument("--quality", type=int, default=90)
    parser.add_argument("--size", default="original", help="'original' or WxH, e.g. 640x400")
    parser.add_argument("--suffix", default="_wm")
    parser.add_argument("--annotations", help="JSON file written by the editor's 'Save annotations'")
    return parser


def demo(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = ExportSettings(suffix=args.suffix, format=args.format,
                                  quality=args.quality, size=args.size)
    except ValueError as e:
        parser.error(str(e))

    session = EditorSession()
    if not session.add_paths(args.images):
        print("No images found")
        return 1

    placement = session.placement
    if args.logo:
        try:
            placement.set_logo_asset(load_logo_asset(args.logo))
        except DecodeError as e:
            print(f"Logo skipped: {e}")
    placement.set_logo_scale(args.logo_scale)
    placement.set_logo_position(args.logo_pos)
    placement.set_date_text(args.date)
    placement.set_date_scale(args.date_scale)
    placement.set_date_position(args.date_pos)

    if args.annotations:
        try:
            count = session.load_annotations(args.annotations)
        except (OSError, ValueError) as e:
            print(f"Annotations skipped: {e}")
        else:
            print(f"Loaded {count} annotation(s)")

    def progress(idx, total, success, message):
        print(f"[{idx}/{total}] {message}")

    summary = batch_export(session, settings, DirectorySink(args.out_dir), progress)
    for path in summary.paths:
        print("Saved:", path)
    return 0 if summary.ok else 2


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    sys.exit(demo())
