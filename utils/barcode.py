# utils/barcode.py

import io

from barcode import Code128
from barcode.writer import ImageWriter, SVGWriter


def barcode_svg(barcode_text: str) -> str:
    """
    Render `barcode_text` as a Code128 SVG fragment suitable for inlining
    into an HTML page.
    """
    if not barcode_text:
        raise ValueError("barcode_text must be a non-empty string")
    buffer = io.BytesIO()
    Code128(barcode_text, writer=SVGWriter()).write(buffer, options={"module_height": 10.0})
    svg = buffer.getvalue().decode("utf-8")
    # drop the XML prolog/doctype, browsers want the bare <svg> element inline
    start = svg.find("<svg")
    return svg[start:] if start >= 0 else svg


def barcode_png(barcode_text: str) -> bytes:
    if not barcode_text:
        raise ValueError("barcode_text must be a non-empty string")
    buffer = io.BytesIO()
    Code128(barcode_text, writer=ImageWriter()).write(buffer)
    return buffer.getvalue()
