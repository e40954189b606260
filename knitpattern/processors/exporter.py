from typing import List, Optional

from PIL import Image, ImageDraw, ImageFont

from knitpattern.config import GRID_MAJOR_EVERY
from knitpattern.models import Pattern
from knitpattern.processors.color import rgb_to_hex
from knitpattern.processors.pattern import cell_size_for, legend_entries, render_pattern

# A4 landscape, in millimetres
PAGE_WIDTH_MM = 297
PAGE_HEIGHT_MM = 210
MARGIN_MM = 10
LEGEND_RESERVE_MM = 40
SWATCH_MM = 10
LEGEND_ROW_MM = 15
LEGEND_COLUMN_MM = 60


def export_to_png(im: Image.Image, output_path: str) -> str:
    """
    Save a rendered pattern as PNG.

    Args:
        im: Rendered pattern image
        output_path: Path to save the PNG

    Returns:
        Path to the output PNG file
    """
    im.save(output_path, "PNG")
    return output_path


def export_to_pdf(
    pattern: Pattern,
    output_path: str,
    show_grid: bool = True,
    title: str = "My Knitting Pattern",
    dpi: int = 150,
) -> str:
    """
    Export a pattern as a two-page A4 landscape PDF.

    Page 1 holds the title and the pattern, page 2 the color legend.

    Args:
        pattern: Pattern to export
        output_path: Path to save the PDF
        show_grid: Draw the counting grid on the pattern
        title: Heading for the first page
        dpi: Raster resolution of the pages

    Returns:
        Path to the output PDF file
    """
    def mm(value: float) -> int:
        return int(round(value * dpi / 25.4))

    page_size = (mm(PAGE_WIDTH_MM), mm(PAGE_HEIGHT_MM))
    heading_font = ImageFont.load_default(size=mm(6))
    text_font = ImageFont.load_default(size=mm(3.5))

    # Page 1: the pattern, fitted under the title
    pattern_page = Image.new("RGB", page_size, "white")
    draw = ImageDraw.Draw(pattern_page)
    draw.text((mm(MARGIN_MM), mm(MARGIN_MM + 5)), title, fill="black", font=heading_font, anchor="ls")

    rendered = render_pattern(pattern, show_grid=show_grid)
    max_width = mm(PAGE_WIDTH_MM - 2 * MARGIN_MM)
    max_height = mm(PAGE_HEIGHT_MM - 2 * MARGIN_MM - LEGEND_RESERVE_MM)

    final_width = max_width
    final_height = rendered.height * final_width / rendered.width
    if final_height > max_height:
        final_height = max_height
        final_width = rendered.width * final_height / rendered.height

    fitted = rendered.resize(
        (max(1, int(final_width)), max(1, int(final_height))),
        Image.Resampling.NEAREST,
    )
    pattern_page.paste(fitted, (mm(MARGIN_MM), mm(MARGIN_MM + 10)))

    # Page 2: the legend, wrapping into columns
    legend_page = Image.new("RGB", page_size, "white")
    draw = ImageDraw.Draw(legend_page)
    draw.text((mm(MARGIN_MM), mm(MARGIN_MM + 5)), "Color Legend", fill="black", font=heading_font, anchor="ls")

    current_x = MARGIN_MM
    current_y = MARGIN_MM + 15
    for entry in legend_entries(pattern):
        box = [mm(current_x), mm(current_y), mm(current_x + SWATCH_MM), mm(current_y + SWATCH_MM)]
        draw.rectangle(box, fill=tuple(entry["rgb"]), outline="black", width=1)
        draw.text(
            (mm(current_x + 15), mm(current_y + 7)),
            f"{entry['label']}  {entry['stitches']} st",
            fill="black",
            font=text_font,
            anchor="ls",
        )

        current_y += LEGEND_ROW_MM
        if current_y > PAGE_HEIGHT_MM - MARGIN_MM:
            current_y = MARGIN_MM + 15
            current_x += LEGEND_COLUMN_MM

    pattern_page.save(
        output_path,
        "PDF",
        save_all=True,
        append_images=[legend_page],
        resolution=dpi,
    )
    return output_path


def export_to_svg(
    pattern: Pattern,
    output_path: str,
    cell_size: Optional[int] = None,
    show_grid: bool = True,
) -> str:
    """
    Export a pattern as SVG.

    Horizontal runs of one color are merged into a single rect.

    Args:
        pattern: Pattern to export
        output_path: Path to save the SVG
        cell_size: Units per stitch (default: same as the PNG render)
        show_grid: Draw the counting grid

    Returns:
        Path to the output SVG file
    """
    cell_size = cell_size or cell_size_for(pattern.width)
    w = pattern.width * cell_size
    h = pattern.height * cell_size
    hex_colors = [rgb_to_hex(c.rgb) for c in pattern.palette]

    svg_parts: List[str] = [f'<rect width="{w}" height="{h}" fill="#FFFFFF"/>']
    for y in range(pattern.height):
        row = pattern.labels[y]
        x = 0
        while x < pattern.width:
            label = int(row[x])
            start = x
            x += 1
            while x < pattern.width and int(row[x]) == label:
                x += 1
            if label < 0:
                continue
            svg_parts.append(
                f'<rect x="{start * cell_size}" y="{y * cell_size}" '
                f'width="{(x - start) * cell_size}" height="{cell_size}" fill="{hex_colors[label]}"/>'
            )

    if show_grid:
        svg_parts.extend(_grid_lines(pattern.width, pattern.height, cell_size))

    final_svg = f'''<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" viewBox="0 0 {w} {h}" shape-rendering="crispEdges">
{chr(10).join(svg_parts)}
</svg>'''

    with open(output_path, "w") as f:
        f.write(final_svg)

    return output_path


def _grid_lines(cols: int, rows: int, cell_size: int) -> List[str]:
    """Thin lines around every stitch, bold ones every GRID_MAJOR_EVERY stitches."""
    w = cols * cell_size
    h = rows * cell_size
    lines = []
    for major in (False, True):
        step = GRID_MAJOR_EVERY if major else 1
        style = 'stroke-opacity="0.8" stroke-width="2"' if major else 'stroke-opacity="0.15" stroke-width="1"'
        for x in range(0, cols + 1, step):
            lines.append(f'<line x1="{x * cell_size}" y1="0" x2="{x * cell_size}" y2="{h}" stroke="#000000" {style}/>')
        for y in range(0, rows + 1, step):
            lines.append(f'<line x1="0" y1="{y * cell_size}" x2="{w}" y2="{y * cell_size}" stroke="#000000" {style}/>')
    lines.append(f'<rect width="{w}" height="{h}" fill="none" stroke="#000000" stroke-opacity="0.8" stroke-width="2"/>')
    return lines
