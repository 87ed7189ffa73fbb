import argparse
import json
import sys

from aligner.config import OffsetCache, load_config
from aligner.errors import AlignmentError
from aligner.layers import CaptchaAssets
from aligner.preview import render_ascii, save_result
from aligner.search import AlignmentSolver


def load_assets(args):
    if args.json:
        with open(args.json, "r") as f:
            return CaptchaAssets.from_json(json.load(f))
    return CaptchaAssets.from_files(args.fg, args.bg)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Slider Captcha Aligner")
    parser.add_argument("--fg", help="Foreground (glyph) image")
    parser.add_argument("--bg", help="Background (noise) image")
    parser.add_argument("--json", help="Captcha JSON payload with base64 img/bg")
    parser.add_argument("--offset", type=float, help="Skip the search and use this internal offset")
    parser.add_argument("--config", default="config.toml", help="TOML config file")
    parser.add_argument("--cache", action="store_true", help="Replay/store offsets in the offset cache")
    parser.add_argument("--out", help="Save the best composite as PNG")
    parser.add_argument("--ascii", action="store_true", help="Print the best composite as ASCII art")

    args = parser.parse_args(argv)

    if not args.fg and not args.json:
        parser.print_help()
        return 1

    config = load_config(args.config)
    solver = AlignmentSolver(config)

    try:
        assets = load_assets(args)

        custom_offset = args.offset
        cache = OffsetCache(config.cache_path) if args.cache else None
        if cache is not None and custom_offset is None and assets.challenge in cache:
            custom_offset = cache.get(assets.challenge)
            print(f"Replaying cached offset for {assets.challenge}")

        result = solver.solve(assets, custom_offset=custom_offset)
    except (AlignmentError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if cache is not None and assets.challenge:
        cache.put(assets.challenge, -result.best_offset)
        cache.save()

    print(f"Best offset: {result.best_offset} (disorder {result.disorder:.4f})")

    if args.out:
        save_result(result, args.out)
        print(f"Saved composite to {args.out}")

    if args.ascii:
        print(render_ascii(result, config.dark_threshold))

    return 0


if __name__ == "__main__":
    sys.exit(main())
