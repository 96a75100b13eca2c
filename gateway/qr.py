from typing import List, NamedTuple

import qrcode
import qrcode.constants

ERROR_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


class QRSVG(NamedTuple):
    """SVG drawing of a QR code: a ``size`` x ``size`` viewBox and one path."""

    size: int
    path: str


def _qr_matrix(text: str, error: str = "M", border: int = 1) -> List[List[bool]]:
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_LEVELS.get(error.upper(), qrcode.constants.ERROR_CORRECT_M),
        box_size=1,
        border=max(0, border),
    )
    qr.add_data(text)
    qr.make(fit=True)
    return qr.get_matrix()


def render(text: str, error: str = "M", border: int = 1) -> QRSVG:
    """
    Encode ``text`` and describe it as an SVG path of unit squares.

    The matrix already includes the quiet-zone border, so path coordinates
    map directly onto a ``0 0 size size`` viewBox.
    """
    matrix = _qr_matrix(text, error=error, border=border)
    parts = []
    for y, row in enumerate(matrix):
        for x, dark in enumerate(row):
            if dark:
                parts.append(f"M{x} {y}h1v1h-1z")
    return QRSVG(size=len(matrix), path="".join(parts))
