"""Barcode image generation on top of ReportLab's barcode widgets.

ReportLab encodes the code and lays out the bars. The layout is written as SVG
by ReportLab's SVG renderer, rasterized to PNG or JPG with Pillow, or turned
into absolutely positioned HTML bars. One drawing unit is one CSS pixel.
"""

from __future__ import annotations

import base64
import html
import io
import logging
import math
import os
import tempfile
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from PIL import Image, ImageDraw
from reportlab.graphics import renderSVG
from reportlab.graphics.barcode import createBarcodeDrawing, getCodeNames
from reportlab.graphics.shapes import Drawing, Group, Rect
from reportlab.graphics.transform import mmult
from reportlab.lib import colors

from fluentkit.config import get_temp_dir
from fluentkit.errors import (
    InvalidBarcodeError,
    InvalidBarcodeSizeError,
    InvalidColorError,
    UnknownBarcodeFormatError,
    UnknownBarcodeTypeError,
)

logger = logging.getLogger(__name__)

Color = str | Sequence[int]
Bar = tuple[float, float, float, float]

FORMAT_SVG = "svg"
FORMAT_PNG = "png"
FORMAT_JPG = "jpg"
FORMAT_HTML = "html"
FORMATS = (FORMAT_SVG, FORMAT_PNG, FORMAT_JPG, FORMAT_HTML)

TYPE_EAN_13 = "ean13"

DEFAULT_WIDTH_FACTOR = 2
DEFAULT_HEIGHT = 30
DPI = 96

DATA_URI_PREFIXES = {
    FORMAT_SVG: "data:image/svg+xml;base64,",
    FORMAT_PNG: "data:image/png;base64,",
    FORMAT_JPG: "data:image/jpeg;base64,",
}

_PILLOW_FORMATS = {FORMAT_PNG: "PNG", FORMAT_JPG: "JPEG"}

COLOR_NAME_ERROR = "The selected format requires a hex code or color name."
COLOR_RGB_ERROR = (
    "When using the PNG or JPG format the color must be in a valid RGB format "
    "(example: [55, 85, 155])"
)

_IDENTITY = (1, 0, 0, 1, 0, 0)

# ReportLab rejects a value with ValueError from `validate()`, or with
# AttributeError when the widget's attribute map refuses the assignment.
_ENCODING_ERRORS = (ValueError, AttributeError)


def symbologies() -> dict[str, str]:
    """Map lowercased symbology names (`ean13`, `code128`, `qr`, ...) to ReportLab's."""
    return {name.lower(): name for name in getCodeNames()}


def _positive(name: str, value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, int | float) or not value > 0:
        raise InvalidBarcodeSizeError(name, value)
    return value


def _bars(node: Any, transform: Sequence[float] = _IDENTITY) -> Iterator[Bar]:
    """Yield the filled rectangles of an expanded drawing as `(x, y, width, height)`.

    Coordinates are in drawing units with the origin at the bottom left.
    """
    if isinstance(node, Group):
        transform = mmult(transform, node.transform)
        for child in node.contents:
            yield from _bars(child, transform)
    elif isinstance(node, Rect) and node.fillColor is not None:
        a, _, _, d, e, f = transform
        x, y = a * node.x + e, d * node.y + f
        width, height = a * node.width, d * node.height
        if width > 0 and height > 0:
            yield x, y, width, height


class FluentBarcode:
    """Chainable barcode builder.

    Example:
        ```py
        img_src = str(barcode("9313920040041"))  # data:image/svg+xml;base64,...
        barcode("9313920040041").set_format("png").set_color([55, 85, 155]).save("ean.png")
        ```
    """

    def __init__(self, code: str, barcode_type: str | None = None) -> None:
        self._code = code
        self._type = barcode_type or TYPE_EAN_13
        self._width_factor = DEFAULT_WIDTH_FACTOR
        self._height = DEFAULT_HEIGHT
        self._color: Color | None = None
        self._format = FORMAT_SVG

    def __str__(self) -> str:
        return self.embed()

    def __repr__(self) -> str:
        return f"FluentBarcode({self._code!r}, {self._type!r})"

    # --- Accessors ---

    @property
    def code(self) -> str:
        """The encoded value."""
        return self._code

    def set_code(self, code: str) -> FluentBarcode:
        """Set the value to encode; it is checked when the barcode is rendered."""
        self._code = code
        return self

    @property
    def type(self) -> str:
        """The symbology name in any case, e.g. `ean13`, `code128` or `qr`."""
        return self._type

    def set_type(self, barcode_type: str) -> FluentBarcode:
        """Set the symbology; unknown names raise when the barcode is rendered."""
        self._type = barcode_type
        return self

    @property
    def width_factor(self) -> int:
        """Width of the narrowest bar in pixels."""
        return self._width_factor

    def set_width_factor(self, width_factor: int) -> FluentBarcode:
        """Set the width of the narrowest bar in pixels.

        Raises:
            InvalidBarcodeSizeError: If the value is not a positive number.
        """
        self._width_factor = _positive("width factor", width_factor)
        return self

    @property
    def height(self) -> int:
        """Bar height in pixels."""
        return self._height

    def set_height(self, height: int) -> FluentBarcode:
        """Set the bar height in pixels.

        Raises:
            InvalidBarcodeSizeError: If the value is not a positive number.
        """
        self._height = _positive("height", height)
        return self

    @property
    def color(self) -> Color | None:
        """Bar color, or None for black."""
        return self._color

    def set_color(self, color: Color | None) -> FluentBarcode:
        """Set the bar color; None resets it to black.

        Raises:
            InvalidColorError: If the color does not suit the current format.
        """
        if color:
            self.validate_color(color)
        self._color = color
        return self

    @property
    def format(self) -> str:
        """Output format: `svg`, `png`, `jpg` or `html`."""
        return self._format

    def set_format(self, fmt: str) -> FluentBarcode:
        """Set the output format.

        Raises:
            UnknownBarcodeFormatError: If the format is not supported.
            InvalidColorError: If the current color does not suit the new format.
        """
        if fmt not in FORMATS:
            raise UnknownBarcodeFormatError(fmt)
        if self._color:
            self.validate_color(self._color, fmt)
        self._format = fmt
        return self

    # --- Validation ---

    def validate_color(self, color: Any, fmt: str | None = None) -> None:
        """Check a color against an output format (the current one by default).

        SVG and HTML take a color name or hex code; PNG and JPG take three RGB
        components between 0 and 255.

        Raises:
            InvalidColorError: If the color does not suit the format.
        """
        if (fmt or self._format) in (FORMAT_SVG, FORMAT_HTML):
            if not isinstance(color, str):
                raise InvalidColorError(COLOR_NAME_ERROR)
            try:
                colors.toColor(color)
            except ValueError as e:
                raise InvalidColorError(COLOR_NAME_ERROR) from e
            return

        if (
            isinstance(color, str | bytes)
            or not isinstance(color, Sequence)
            or len(color) != 3
            or not all(isinstance(c, int) and 0 <= c <= 255 for c in color)
        ):
            raise InvalidColorError(COLOR_RGB_ERROR)

    # --- Output ---

    def contents(self) -> bytes:
        """Render the barcode in the current format.

        Raises:
            UnknownBarcodeTypeError: If the symbology is unknown.
            InvalidBarcodeError: If the code cannot be encoded in the symbology.
        """
        drawing = self._drawing()

        if self._format == FORMAT_SVG:
            return renderSVG.drawToString(drawing).encode("utf-8")
        if self._format == FORMAT_HTML:
            return self._render_html(drawing).encode("utf-8")
        return self._render_image(drawing)

    def embed(self, fmt: str | None = None) -> str:
        """Get a string for embedding the barcode in a page.

        Returns:
            A data URI for the `src` attribute of an `img` element, or the
            markup itself for the HTML format.
        """
        if fmt and fmt != self._format:
            return self._copy_with_format(fmt).embed()

        if self._format == FORMAT_HTML:
            return self.contents().decode("utf-8")

        encoded = base64.b64encode(self.contents()).decode("ascii")
        return DATA_URI_PREFIXES[self._format] + encoded

    def save(self, filename: str | os.PathLike[str] | None = None) -> Path:
        """Write the barcode to a file.

        Args:
            filename: Target path. An `svg`, `png`, `jpg` or `html` extension
                switches the format first. Without a filename a new file named
                after the code is created in the configured temp directory.

        Returns:
            The path of the written file.
        """
        if filename is not None:
            path = Path(filename)
            extension = path.suffix.lstrip(".").lower()
            if extension in FORMATS:
                self.set_format(extension)
        else:
            fd, name = tempfile.mkstemp(
                prefix=self._code, suffix=f".{self._format}", dir=get_temp_dir()
            )
            os.close(fd)
            path = Path(name)

        path.write_bytes(self.contents())
        logger.debug("Saved %s barcode %s to %s", self._type, self._code, path)
        return path

    # --- Internal Helpers ---

    def _copy_with_format(self, fmt: str) -> FluentBarcode:
        other = FluentBarcode(self._code, self._type)
        other.set_width_factor(self._width_factor).set_height(self._height)
        other.set_format(fmt)
        if self._color:
            other.set_color(self._color)
        return other

    def _bar_color(self) -> colors.Color:
        if not self._color:
            return colors.black
        if isinstance(self._color, str):
            return colors.toColor(self._color)
        red, green, blue = self._color
        return colors.Color(red / 255, green / 255, blue / 255)

    def _drawing(self) -> Drawing:
        """Lay out the barcode with bars only: no quiet zones and no text."""
        name = symbologies().get(self._type.lower())
        if name is None:
            raise UnknownBarcodeTypeError(self._type)

        try:
            drawing = createBarcodeDrawing(
                name,
                value=self._code,
                barWidth=self._width_factor,
                barHeight=self._height,
                barFillColor=self._bar_color(),
                humanReadable=False,
                quiet=False,
            )
            return drawing.expandUserNodes()
        except _ENCODING_ERRORS as e:
            raise InvalidBarcodeError(self._code, self._type, str(e)) from e

    def _render_image(self, drawing: Drawing) -> bytes:
        fill = tuple(self._color) if self._color else (0, 0, 0)
        image = Image.new(
            "RGB",
            (math.ceil(drawing.width), math.ceil(drawing.height)),
            (255, 255, 255),
        )
        canvas = ImageDraw.Draw(image)

        for x, y, width, height in _bars(drawing):
            # Pillow counts rows from the top and includes the end pixel
            left, top = round(x), round(drawing.height - y - height)
            right = max(left, round(x + width) - 1)
            bottom = max(top, round(drawing.height - y) - 1)
            canvas.rectangle((left, top, right, bottom), fill=fill)

        buffer = io.BytesIO()
        image.save(buffer, format=_PILLOW_FORMATS[self._format], dpi=(DPI, DPI))
        return buffer.getvalue()

    def _render_html(self, drawing: Drawing) -> str:
        """Render the bars as absolutely positioned `div` elements."""
        color = html.escape(str(self._color or "black"), quote=True)

        bars = []
        for x, y, width, height in _bars(drawing):
            top = drawing.height - y - height
            bars.append(
                f'<div style="background-color:{color};'
                f"width:{width:g}px;height:{height:g}px;position:absolute;"
                f'left:{x:g}px;top:{top:g}px;">&nbsp;</div>'
            )

        return (
            f'<div style="font-size:0;position:relative;'
            f'width:{drawing.width:g}px;height:{drawing.height:g}px;">'
            + "".join(bars)
            + "</div>"
        )
