#!/usr/bin/env python3
"""Batch analyze images and write theme exports for each."""

import argparse
import sys
import time
from pathlib import Path

from analyze import run_pipeline
from extract_colors import DEFAULT_MAX_COLORS
from theme_generator import HarmonyType, export_to_json, export_to_powerbi


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    extensions = {'.jpg', '.jpeg', '.png', '.webp', '.gif', '.bmp'}
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in extensions)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Batch analyze images and export a theme for each.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images to analyze'
    )
    parser.add_argument(
        '--output', '-o',
        required=True,
        help='Directory for theme JSON files'
    )
    parser.add_argument(
        '--harmony',
        default=HarmonyType.COMPLEMENTARY.value,
        help='Harmony rule applied to every image'
    )
    parser.add_argument(
        '--colors', '-n',
        type=int,
        default=DEFAULT_MAX_COLORS,
        help='Maximum number of colors to extract per image'
    )

    args = parser.parse_args(argv)

    input_dir = Path(args.input)
    output_dir = Path(args.output)

    # Validate input directory
    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        return 2

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        return 2

    output_dir.mkdir(parents=True, exist_ok=True)

    total = len(images)
    succeeded = 0
    failed = []

    batch_start = time.perf_counter()

    for i, image_path in enumerate(images, 1):
        try:
            img_start = time.perf_counter()
            ranked, theme = run_pipeline(str(image_path), args.colors, args.harmony)
            img_elapsed = time.perf_counter() - img_start

            json_file = output_dir / f"{image_path.stem}-theme.json"
            powerbi_file = output_dir / f"{image_path.stem}-powerbi.json"
            for output_file in (json_file, powerbi_file):
                if output_file.exists():
                    print(f"  Warning: Overwriting {output_file.name}", file=sys.stderr)
            json_file.write_text(export_to_json(theme), encoding='utf-8')
            powerbi_file.write_text(export_to_powerbi(theme), encoding='utf-8')

            print(f"[{i}/{total}] {image_path.name} → {theme.base_color} "
                  f"({len(ranked)} colors, {img_elapsed:.2f}s)")
            succeeded += 1

        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}"
            print(f"[{i}/{total}] {image_path.name} → ERROR: {error_msg}", file=sys.stderr)
            failed.append((image_path.name, error_msg))

    batch_elapsed = time.perf_counter() - batch_start

    # Summary
    print()
    print(f"Completed: {succeeded}/{total} succeeded in {batch_elapsed:.2f}s")
    if succeeded > 0:
        print(f"Average: {batch_elapsed / succeeded:.2f}s per image")
    if failed:
        print(f"Failed ({len(failed)}):")
        for name, error in failed:
            print(f"  - {name}: {error}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
