"""Slide deck exporter using python-pptx.

Hidden design decisions:
- Slide geometry (10in x 5.625in, the 16:9 size replies are laid out for)
- Translation of pptxgenjs-style item options to python-pptx calls
- Shape and chart name tables
- Skipping items that cannot be rendered instead of failing the deck
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Any

from pptx import Presentation
from pptx.chart.data import CategoryChartData, XyChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Emu, Inches, Pt

from ..reply.models import DecodedReply, SlideItem, SlideItemKind, SlideSpec
from .base import ArtifactExporter, ExportError

logger = logging.getLogger(__name__)

SLIDE_WIDTH_IN = 10.0
SLIDE_HEIGHT_IN = 5.625
_BLANK_LAYOUT = 6

# pptxgenjs shape name -> MSO_SHAPE member name
SHAPE_NAMES = {
    "rect": "RECTANGLE",
    "roundRect": "ROUNDED_RECTANGLE",
    "ellipse": "OVAL",
    "triangle": "ISOSCELES_TRIANGLE",
    "rtTriangle": "RIGHT_TRIANGLE",
    "parallelogram": "PARALLELOGRAM",
    "trapezoid": "TRAPEZOID",
    "diamond": "DIAMOND",
    "pentagon": "REGULAR_PENTAGON",
    "hexagon": "HEXAGON",
    "heptagon": "HEPTAGON",
    "octagon": "OCTAGON",
    "decagon": "DECAGON",
    "dodecagon": "DODECAGON",
    "pie": "PIE",
    "chord": "CHORD",
    "teardrop": "TEAR",
    "frame": "FRAME",
    "halfFrame": "HALF_FRAME",
    "corner": "CORNER",
    "diagStripe": "DIAGONAL_STRIPE",
    "plus": "CROSS",
    "plaque": "PLAQUE",
    "can": "CAN",
    "cube": "CUBE",
    "bevel": "BEVEL",
    "donut": "DONUT",
    "noSmoking": "NO_SYMBOL",
    "blockArc": "BLOCK_ARC",
    "foldedCorner": "FOLDED_CORNER",
    "smileyFace": "SMILEY_FACE",
    "heart": "HEART",
    "lightningBolt": "LIGHTNING_BOLT",
    "sun": "SUN",
    "moon": "MOON",
    "cloud": "CLOUD",
    "arc": "ARC",
    "doubleBracket": "DOUBLE_BRACKET",
    "doubleBrace": "DOUBLE_BRACE",
    "leftBracket": "LEFT_BRACKET",
    "rightBracket": "RIGHT_BRACKET",
    "leftBrace": "LEFT_BRACE",
    "rightBrace": "RIGHT_BRACE",
    "arrow": "RIGHT_ARROW",
    "rightArrow": "RIGHT_ARROW",
    "leftArrow": "LEFT_ARROW",
    "upArrow": "UP_ARROW",
    "downArrow": "DOWN_ARROW",
    "leftRightArrow": "LEFT_RIGHT_ARROW",
    "upDownArrow": "UP_DOWN_ARROW",
    "quadArrow": "QUAD_ARROW",
    "bentArrow": "BENT_ARROW",
    "uTurnArrow": "U_TURN_ARROW",
    "circularArrow": "CIRCULAR_ARROW",
    "curvedRightArrow": "CURVED_RIGHT_ARROW",
    "curvedLeftArrow": "CURVED_LEFT_ARROW",
    "curvedUpArrow": "CURVED_UP_ARROW",
    "curvedDownArrow": "CURVED_DOWN_ARROW",
    "stripedRightArrow": "STRIPED_RIGHT_ARROW",
    "notchedRightArrow": "NOTCHED_RIGHT_ARROW",
    "pentagonArrow": "PENTAGON",
    "chevron": "CHEVRON",
    "star4": "STAR_4_POINT",
    "star5": "STAR_5_POINT",
    "star6": "STAR_6_POINT",
    "star7": "STAR_7_POINT",
    "star8": "STAR_8_POINT",
    "star10": "STAR_10_POINT",
    "star12": "STAR_12_POINT",
    "star16": "STAR_16_POINT",
    "star24": "STAR_24_POINT",
    "star32": "STAR_32_POINT",
    "ribbon": "DOWN_RIBBON",
    "ribbon2": "UP_RIBBON",
    "wave": "WAVE",
    "doubleWave": "DOUBLE_WAVE",
    "rectCallout": "RECTANGULAR_CALLOUT",
    "roundRectCallout": "ROUNDED_RECTANGULAR_CALLOUT",
    "ellipseCallout": "OVAL_CALLOUT",
    "cloudCallout": "CLOUD_CALLOUT",
}

# pptxgenjs chart name -> (column variant, horizontal bar variant)
CHART_TYPES = {
    "line": (XL_CHART_TYPE.LINE_MARKERS, XL_CHART_TYPE.LINE_MARKERS),
    "pie": (XL_CHART_TYPE.PIE, XL_CHART_TYPE.PIE),
    "area": (XL_CHART_TYPE.AREA, XL_CHART_TYPE.AREA),
    "bar": (XL_CHART_TYPE.COLUMN_CLUSTERED, XL_CHART_TYPE.BAR_CLUSTERED),
    "bar3d": (XL_CHART_TYPE.THREE_D_COLUMN_CLUSTERED, XL_CHART_TYPE.THREE_D_BAR_CLUSTERED),
    "doughnut": (XL_CHART_TYPE.DOUGHNUT, XL_CHART_TYPE.DOUGHNUT),
    "radar": (XL_CHART_TYPE.RADAR, XL_CHART_TYPE.RADAR),
    "scatter": (XL_CHART_TYPE.XY_SCATTER, XL_CHART_TYPE.XY_SCATTER),
}

_LEGEND_POSITIONS = {
    "b": XL_LEGEND_POSITION.BOTTOM,
    "t": XL_LEGEND_POSITION.TOP,
    "l": XL_LEGEND_POSITION.LEFT,
    "r": XL_LEGEND_POSITION.RIGHT,
    "tr": XL_LEGEND_POSITION.CORNER,
}

_ALIGNMENTS = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}

_ANCHORS = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

# Default (x, y, w, h) in inches per item kind
_DEFAULT_BOXES = {
    SlideItemKind.TEXT: (0.5, 0.5, 9.0, 1.0),
    SlideItemKind.TABLE: (0.5, 1.5, 9.0, 2.5),
    SlideItemKind.IMAGE: (1.0, 1.0, 4.0, 3.0),
    SlideItemKind.SHAPE: (1.0, 1.0, 3.0, 1.5),
    SlideItemKind.CHART: (0.5, 1.0, 9.0, 4.0),
}


class UnsupportedItemError(ValueError):
    """A slide item names a shape or chart that cannot be rendered."""


def parse_color(value: Any) -> RGBColor | None:
    """Parse a hex color like 'FF0000' or '#ff0000'."""
    if not isinstance(value, str):
        return None
    hex_value = value.strip().lstrip("#")
    if len(hex_value) != 6:
        return None
    try:
        return RGBColor.from_string(hex_value.upper())
    except ValueError:
        return None


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", "").strip())
        except ValueError:
            return None
    return None


def _measure(value: Any, total: float, default: float) -> float:
    """Resolve a coordinate in inches; '50%' strings are relative to ``total``."""
    if isinstance(value, str) and value.strip().endswith("%"):
        number = _to_number(value.strip()[:-1])
        return default if number is None else total * number / 100.0
    number = _to_number(value)
    return default if number is None else number


def _fill_color(options: dict[str, Any]) -> RGBColor | None:
    fill = options.get("fill")
    if isinstance(fill, dict):
        return parse_color(fill.get("color"))
    return parse_color(fill)


class SlideDeckExporter(ArtifactExporter):
    """Builds a .pptx deck from the slides of a decoded reply.

    Each slide spec becomes one blank slide. Items that name an unknown
    shape or chart, or that python-pptx rejects, are skipped with a
    warning so the rest of the deck still renders.
    """

    def __init__(
        self,
        filename: str = "Presentation.pptx",
        image_root: str | Path | None = None,
    ):
        """Initialize the exporter.

        Args:
            filename: Default output file name
            image_root: Directory that relative image paths resolve against
        """
        self._filename = filename
        self._image_root = Path(image_root) if image_root else None

    @property
    def file_extension(self) -> str:
        return ".pptx"

    @property
    def default_filename(self) -> str:
        return self._filename

    def can_export(self, reply: DecodedReply) -> bool:
        return reply.is_displayable and reply.has_slides

    def export(self, reply: DecodedReply) -> bytes:
        if not self.can_export(reply):
            raise ExportError("Reply has no slides to export")
        return self.export_slides(reply.slides or [])

    def export_slides(self, slides: list[SlideSpec]) -> bytes:
        """Render slide specs to .pptx bytes."""
        try:
            prs = Presentation()
            prs.slide_width = Inches(SLIDE_WIDTH_IN)
            prs.slide_height = Inches(SLIDE_HEIGHT_IN)
            layout = prs.slide_layouts[_BLANK_LAYOUT]

            for number, spec in enumerate(slides, 1):
                slide = prs.slides.add_slide(layout)
                for item in spec.data:
                    try:
                        self._add_item(slide, item)
                    except Exception as e:
                        logger.warning(
                            "Skipping %s item on slide %d: %s",
                            item.type.value, number, e
                        )

            buffer = BytesIO()
            prs.save(buffer)
            return buffer.getvalue()
        except Exception as e:
            raise ExportError(f"Failed to build presentation: {e}") from e

    def _add_item(self, slide: Any, item: SlideItem) -> None:
        if item.type == SlideItemKind.TEXT:
            self._add_text(slide, item)
        elif item.type == SlideItemKind.TABLE:
            self._add_table(slide, item)
        elif item.type == SlideItemKind.IMAGE:
            self._add_image(slide, item)
        elif item.type == SlideItemKind.SHAPE:
            self._add_shape(slide, item)
        elif item.type == SlideItemKind.CHART:
            self._add_chart(slide, item)

    def _box(self, item: SlideItem) -> tuple[Emu, Emu, Emu, Emu]:
        x, y, w, h = _DEFAULT_BOXES[item.type]
        opts = item.options
        return (
            Inches(_measure(opts.get("x"), SLIDE_WIDTH_IN, x)),
            Inches(_measure(opts.get("y"), SLIDE_HEIGHT_IN, y)),
            Inches(_measure(opts.get("w"), SLIDE_WIDTH_IN, w)),
            Inches(_measure(opts.get("h"), SLIDE_HEIGHT_IN, h)),
        )

    def _add_text(self, slide: Any, item: SlideItem) -> None:
        opts = item.options
        shape_name = opts.get("shape")
        if shape_name:
            shape = slide.shapes.add_shape(_resolve_shape(shape_name), *self._box(item))
        else:
            shape = slide.shapes.add_textbox(*self._box(item))

        fill = _fill_color(opts)
        if fill is not None:
            shape.fill.solid()
            shape.fill.fore_color.rgb = fill

        _write_text_frame(shape.text_frame, _text_lines(item.value), opts)

    def _add_shape(self, slide: Any, item: SlideItem) -> None:
        opts = item.options
        shape = slide.shapes.add_shape(_resolve_shape(item.value), *self._box(item))

        fill = _fill_color(opts)
        if fill is not None:
            shape.fill.solid()
            shape.fill.fore_color.rgb = fill

        line = opts.get("line")
        if isinstance(line, dict):
            line_color = parse_color(line.get("color"))
            if line_color is not None:
                shape.line.color.rgb = line_color
            width = _to_number(line.get("width"))
            if width is not None:
                shape.line.width = Pt(width)

        rotate = _to_number(opts.get("rotate"))
        if rotate is not None:
            shape.rotation = rotate

        text = opts.get("text")
        if text:
            _write_text_frame(shape.text_frame, _text_lines(text), opts)

    def _add_table(self, slide: Any, item: SlideItem) -> None:
        rows = item.value
        if not isinstance(rows, list) or not rows:
            raise UnsupportedItemError("table value must be a non-empty list of rows")
        rows = [row if isinstance(row, list) else [row] for row in rows]
        n_cols = max(len(row) for row in rows)
        if n_cols == 0:
            raise UnsupportedItemError("table rows are empty")

        opts = item.options
        frame = slide.shapes.add_table(len(rows), n_cols, *self._box(item))
        table = frame.table

        col_widths = opts.get("colW")
        if isinstance(col_widths, list):
            for index, width in enumerate(col_widths[:n_cols]):
                inches = _to_number(width)
                if inches is not None:
                    table.columns[index].width = Inches(inches)
        row_heights = opts.get("rowH")
        if isinstance(row_heights, list):
            for index, height in enumerate(row_heights[:len(rows)]):
                inches = _to_number(height)
                if inches is not None:
                    table.rows[index].height = Inches(inches)

        for r, row in enumerate(rows):
            for c in range(n_cols):
                raw = row[c] if c < len(row) else ""
                cell_opts = dict(opts)
                if isinstance(raw, dict):
                    cell_opts.update(raw.get("options") or {})
                    raw = raw.get("text", "")
                cell = table.cell(r, c)
                fill = _fill_color(cell_opts)
                if fill is not None:
                    cell.fill.solid()
                    cell.fill.fore_color.rgb = fill
                _write_text_frame(cell.text_frame, _text_lines(raw), cell_opts)

    def _add_image(self, slide: Any, item: SlideItem) -> None:
        source = item.value or item.options.get("path")
        path = self._resolve_image(source)
        if path is not None:
            slide.shapes.add_picture(str(path), *self._box(item))
            return

        # Remote or missing images render as a labelled placeholder
        placeholder = slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, *self._box(item))
        placeholder.fill.solid()
        placeholder.fill.fore_color.rgb = RGBColor(0xE7, 0xE6, 0xE6)
        label = item.options.get("placeholder") or "Image"
        _write_text_frame(
            placeholder.text_frame,
            [str(label)],
            {"align": "center", "valign": "middle", "color": "595959", "fontSize": 14},
        )

    def _resolve_image(self, source: Any) -> Path | None:
        if not isinstance(source, str) or not source or "://" in source:
            return None
        path = Path(source)
        if not path.is_absolute() and self._image_root is not None:
            path = self._image_root / path
        return path if path.is_file() else None

    def _add_chart(self, slide: Any, item: SlideItem) -> None:
        name = str(item.value or "").strip().lower()
        if name not in CHART_TYPES:
            raise UnsupportedItemError(f"unsupported chart type {item.value!r}")
        if not item.chart_data:
            raise UnsupportedItemError("chart has no data series")

        opts = item.options
        column_type, bar_type = CHART_TYPES[name]
        chart_type = bar_type if opts.get("barDir") == "bar" else column_type

        if name == "scatter":
            chart_data = _scatter_data(item)
        else:
            chart_data = CategoryChartData()
            labels = next((s.labels for s in item.chart_data if s.labels), [])
            chart_data.categories = [str(label) for label in labels]
            for series in item.chart_data:
                chart_data.add_series(series.name, [_to_number(v) for v in series.values])

        frame = slide.shapes.add_chart(chart_type, *self._box(item), chart_data)
        chart = frame.chart

        chart.has_legend = bool(opts.get("showLegend", True))
        if chart.has_legend:
            chart.legend.position = _LEGEND_POSITIONS.get(
                opts.get("legendPos", "r"), XL_LEGEND_POSITION.RIGHT
            )
            chart.legend.include_in_layout = False

        title = opts.get("title")
        if title and opts.get("showTitle", True):
            chart.has_title = True
            chart.chart_title.text_frame.text = str(title)

        if opts.get("showValue"):
            chart.plots[0].has_data_labels = True

        colors = [parse_color(c) for c in opts.get("chartColors") or []]
        colors = [c for c in colors if c is not None]
        if colors:
            _apply_chart_colors(chart, name, colors)


def _resolve_shape(name: Any) -> MSO_SHAPE:
    member = SHAPE_NAMES.get(str(name)) if name is not None else None
    shape = getattr(MSO_SHAPE, member, None) if member else None
    if shape is None:
        raise UnsupportedItemError(f"unsupported shape {name!r}")
    return shape


def _text_lines(value: Any) -> list[str]:
    """Flatten a text value (string or list of text runs) into lines."""
    if value is None:
        return [""]
    if isinstance(value, list):
        lines: list[str] = []
        for part in value:
            if isinstance(part, dict):
                lines.extend(str(part.get("text", "")).split("\n"))
            else:
                lines.extend(str(part).split("\n"))
        return lines or [""]
    return str(value).split("\n")


def _write_text_frame(text_frame: Any, lines: list[str], opts: dict[str, Any]) -> None:
    text_frame.word_wrap = True
    anchor = _ANCHORS.get(str(opts.get("valign", "")).lower())
    if anchor is not None:
        text_frame.vertical_anchor = anchor

    bullet = bool(opts.get("bullet"))
    font_size = _to_number(opts.get("fontSize"))
    font_color = parse_color(opts.get("color"))
    alignment = _ALIGNMENTS.get(str(opts.get("align", "")).lower())

    for index, line in enumerate(lines):
        paragraph = text_frame.paragraphs[0] if index == 0 else text_frame.add_paragraph()
        if alignment is not None:
            paragraph.alignment = alignment
        run = paragraph.add_run()
        run.text = f"• {line}" if bullet and line else line
        font = run.font
        if font_size is not None:
            font.size = Pt(font_size)
        if opts.get("fontFace"):
            font.name = str(opts["fontFace"])
        if "bold" in opts:
            font.bold = bool(opts["bold"])
        if "italic" in opts:
            font.italic = bool(opts["italic"])
        if "underline" in opts:
            font.underline = bool(opts["underline"])
        if font_color is not None:
            font.color.rgb = font_color


def _scatter_data(item: SlideItem) -> XyChartData:
    """Build scatter data: the first series holds X values, the rest Y values."""
    if len(item.chart_data) < 2:
        raise UnsupportedItemError("scatter chart needs an X series and a Y series")
    x_values = [_to_number(v) for v in item.chart_data[0].values]
    chart_data = XyChartData()
    for series in item.chart_data[1:]:
        xy = chart_data.add_series(series.name)
        for x, y in zip(x_values, series.values, strict=False):
            y_value = _to_number(y)
            if x is not None and y_value is not None:
                xy.add_data_point(x, y_value)
    return chart_data


def _apply_chart_colors(chart: Any, name: str, colors: list[RGBColor]) -> None:
    if name in ("pie", "doughnut"):
        points = chart.plots[0].series[0].points
        for index in range(len(chart.plots[0].categories)):
            fill = points[index].format.fill
            fill.solid()
            fill.fore_color.rgb = colors[index % len(colors)]
        return

    for index, series in enumerate(chart.series):
        color = colors[index % len(colors)]
        if name in ("line", "scatter", "radar"):
            series.format.line.color.rgb = color
        else:
            series.format.fill.solid()
            series.format.fill.fore_color.rgb = color
