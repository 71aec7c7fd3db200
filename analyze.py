#!/usr/bin/env python3
"""
Image to theme pipeline.

Extracts dominant colors from an image, builds a harmony theme from the most
frequent one (or a given base color), and renders the result as prose, HTML,
a swatch image, and theme exports.
Three stages: Extraction → Theme → Render
"""

from typing import Optional

from PIL import Image, ImageDraw

from color_convert import hex_to_rgb
from extract_colors import ColorExtractor, RankedColor, calculate_diversity, DEFAULT_MAX_COLORS
from theme_generator import (
    HARMONY_DESCRIPTIONS, HarmonyType, Theme, ThemeGenerator,
    export_to_json, export_to_powerbi,
)


# =============================================================================
# Pipeline
# =============================================================================

def run_pipeline(image_path: str, max_colors: int = DEFAULT_MAX_COLORS,
                 harmony_type: str = HarmonyType.COMPLEMENTARY.value,
                 base_color: Optional[str] = None) -> tuple[list[RankedColor], Theme]:
    """Run extraction and theme generation.

    Args:
        image_path: Path to the image file
        max_colors: Upper bound on extracted colors
        harmony_type: Harmony rule for secondary/accent colors
        base_color: Theme base; defaults to the most frequent image color

    Returns:
        Tuple of (ranked_colors, theme) for rendering.

    Raises:
        ValueError: If no base color is given and the image has no opaque pixels
    """
    # Stage 1: Extraction
    extractor = ColorExtractor()
    extractor.load_image(image_path)
    ranked = extractor.analyze(max_colors)

    # Stage 2: Theme
    if base_color is None:
        if not ranked:
            raise ValueError("Image has no opaque pixels to pick a base color from")
        base_color = ranked[0].hex

    generator = ThemeGenerator()
    generator.set_base_color(base_color)
    generator.set_harmony_type(harmony_type)
    theme = generator.generate()

    return ranked, theme


# =============================================================================
# Render
# =============================================================================

def harmony_description(harmony_type: str) -> str:
    try:
        return HARMONY_DESCRIPTIONS[HarmonyType(harmony_type)]
    except ValueError:
        return f"Unknown harmony '{harmony_type}', using complementary rule."


def render(ranked: list[RankedColor], theme: Theme) -> str:
    """Stage 3: Render colors and theme as prose."""
    lines = []

    lines.append(f"COLORS: {len(ranked)} | Diversity: {calculate_diversity(ranked)}/100")
    lines.append("")
    for i, color in enumerate(ranked, 1):
        lines.append(f"  {i:2d}. {color.hex} | RGB{color.rgb} | {color.percentage}% of image")
    lines.append("")

    lines.append(f"THEME: {theme.harmony_type} from {theme.base_color}")
    lines.append(harmony_description(theme.harmony_type))
    lines.append("")
    width = max(len(name) for name in theme.names)
    for color in theme.colors:
        lines.append(f"  {color.name:<{width}}  {color.hex}  {color.role}")

    return "\n".join(lines)


def text_color_for_background(hex_color: str) -> str:
    """Return black or white text color based on background luma."""
    r, g, b = hex_to_rgb(hex_color)
    luma = 0.299 * r + 0.587 * g + 0.114 * b
    return "#000" if luma > 140 else "#fff"


def render_html(ranked: list[RankedColor], theme: Theme, image_path: str) -> str:
    """Stage 3b: Render colors and theme as a static HTML page."""
    from html import escape

    safe_path = escape(str(image_path))

    css = """
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: system-ui, -apple-system, sans-serif;
            background: #f5f5f5;
            color: #333;
            line-height: 1.5;
            padding: 2rem;
            max-width: 900px;
            margin: 0 auto;
        }
        h1 { font-size: 1.5rem; margin-bottom: 0.5rem; }
        h2 { font-size: 1.2rem; margin: 2rem 0 1rem; border-bottom: 1px solid #ddd; padding-bottom: 0.5rem; }
        .meta { color: #666; font-size: 0.9rem; margin-bottom: 1rem; }
        .palette-strip {
            display: flex;
            height: 80px;
            border-radius: 8px;
            overflow: hidden;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
            margin: 1.5rem 0;
        }
        .palette-strip .swatch {
            display: flex;
            align-items: flex-end;
            justify-content: center;
            padding: 0.5rem;
            font-size: 0.7rem;
            font-weight: 500;
        }
        .theme-grid {
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(200px, 1fr));
            gap: 1rem;
        }
        .theme-color {
            background: #fff;
            border-radius: 8px;
            overflow: hidden;
            box-shadow: 0 1px 3px rgba(0,0,0,0.08);
        }
        .theme-color .swatch { height: 60px; }
        .theme-color .info { padding: 0.5rem 0.75rem; font-size: 0.85rem; }
        .theme-color .name { font-weight: 600; }
        .theme-color .values { font-family: monospace; color: #555; font-size: 0.8rem; }
        .theme-color .role { color: #777; font-size: 0.8rem; }
    """

    lines = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f'  <title>Theme: {safe_path}</title>',
        f'  <style>{css}</style>',
        '</head>',
        '<body>',
    ]

    # Header
    lines.append(f'<h1>{escape(theme.harmony_type.capitalize())} theme</h1>')
    lines.append(f'<p class="meta">{escape(harmony_description(theme.harmony_type))}</p>')
    lines.append(f'<p class="meta">Source: {safe_path} | Base: {theme.base_color} | '
                 f'Diversity: {calculate_diversity(ranked)}/100</p>')

    # Extracted colors strip
    lines.append('<h2>Image colors</h2>')
    lines.append('<div class="palette-strip">')
    total = sum(c.count for c in ranked) or 1
    for color in ranked:
        flex = max(5, color.count / total * 100)  # min 5% for visibility
        text_color = text_color_for_background(color.hex)
        lines.append(f'  <div class="swatch" style="background:{color.hex}; color:{text_color}; '
                     f'flex:{flex:.1f}">{color.hex} · {color.percentage}%</div>')
    lines.append('</div>')

    # Theme colors
    lines.append('<h2>Theme</h2>')
    lines.append('<div class="theme-grid">')
    for color in theme.colors:
        lines.append('<div class="theme-color">')
        lines.append(f'  <div class="swatch" style="background:{color.hex}"></div>')
        lines.append('  <div class="info">')
        lines.append(f'    <div class="name">{escape(color.name)}</div>')
        lines.append(f'    <div class="values">{color.hex}</div>')
        lines.append(f'    <div class="role">{escape(color.role)}</div>')
        lines.append('  </div>')
        lines.append('</div>')
    lines.append('</div>')

    lines.append('</body>')
    lines.append('</html>')

    return '\n'.join(lines)


def visualize_palette(swatches: list[tuple], output_path: str) -> None:
    """
    Save a swatch grid image.

    Args:
        swatches: (hex, label) pairs, drawn in order
        output_path: Path to save the output image
    """
    swatch_size = 80
    padding = 10
    text_height = 25
    cols = max(1, min(len(swatches), 6))
    rows = max(1, (len(swatches) + cols - 1) // cols)

    img_width = cols * (swatch_size + padding) + padding
    img_height = rows * (swatch_size + text_height + padding) + padding

    img = Image.new('RGB', (img_width, img_height), (240, 240, 240))
    draw = ImageDraw.Draw(img)

    for i, (hex_color, label) in enumerate(swatches):
        row = i // cols
        col = i % cols

        x = padding + col * (swatch_size + padding)
        y = padding + row * (swatch_size + text_height + padding)

        draw.rectangle([x, y, x + swatch_size, y + swatch_size], fill=hex_to_rgb(hex_color))

        # Center label under swatch
        bbox = draw.textbbox((0, 0), label)
        text_width = bbox[2] - bbox[0]
        text_x = x + (swatch_size - text_width) // 2
        draw.text((text_x, y + swatch_size + 4), label, fill=(0, 0, 0))

    img.save(output_path)


def analyze_image(image_path: str, max_colors: int = DEFAULT_MAX_COLORS,
                  harmony_type: str = HarmonyType.COMPLEMENTARY.value,
                  base_color: Optional[str] = None) -> tuple[str, str, Theme, list[RankedColor]]:
    """Run the full pipeline on an image.

    Returns:
        Tuple of (prose_output, html_output, theme, ranked_colors)
    """
    ranked, theme = run_pipeline(image_path, max_colors, harmony_type, base_color)
    prose = render(ranked, theme)
    html = render_html(ranked, theme, image_path)
    return prose, html, theme, ranked


# =============================================================================
# CLI
# =============================================================================

def main(argv=None) -> int:
    import argparse
    import sys
    from pathlib import Path

    parser = argparse.ArgumentParser(
        description='Analyze an image and generate a color theme from it.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--colors', '-n',
        type=int,
        default=DEFAULT_MAX_COLORS,
        help=f'Maximum number of colors to extract (default {DEFAULT_MAX_COLORS})'
    )
    parser.add_argument(
        '--harmony',
        default=HarmonyType.COMPLEMENTARY.value,
        help='Harmony rule: ' + ', '.join(h.value for h in HarmonyType)
    )
    parser.add_argument(
        '--base',
        default=None,
        help='Base color as #rrggbb. Defaults to the most frequent image color.'
    )
    parser.add_argument(
        '--output', '-o',
        nargs='?',
        const=True,
        default=None,
        help='Write HTML report. Optionally specify path, otherwise auto-names from input.'
    )
    parser.add_argument('--json', default=None, help='Write theme JSON to this path')
    parser.add_argument('--powerbi', default=None, help='Write Power BI theme JSON to this path')
    parser.add_argument('--swatches', default=None, help='Write swatch PNG to this path')

    args = parser.parse_args(argv)
    image_path = Path(args.input)

    try:
        prose, html, theme, ranked = analyze_image(
            str(image_path), args.colors, args.harmony, args.base
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error analyzing image: {e}", file=sys.stderr)
        return 1

    # Always print prose to terminal
    print(prose)

    outputs = []
    if args.output:
        if args.output is True:
            outputs.append((image_path.with_name(f"{image_path.stem}-theme.html"), html))
        else:
            outputs.append((Path(args.output), html))
    if args.json:
        outputs.append((Path(args.json), export_to_json(theme)))
    if args.powerbi:
        outputs.append((Path(args.powerbi), export_to_powerbi(theme)))

    try:
        for output_path, text in outputs:
            output_path.write_text(text, encoding='utf-8')
            print(f"Wrote: {output_path}")
        if args.swatches:
            swatches = [(c.hex, f"{c.percentage}%") for c in ranked]
            swatches += [(c.hex, c.name) for c in theme.colors]
            visualize_palette(swatches, args.swatches)
            print(f"Wrote: {args.swatches}")
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
