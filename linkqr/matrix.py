"""Matrix producer: encode a string into a QR module matrix with the qrcode library."""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import qrcode
import qrcode.constants
from qrcode.exceptions import DataOverflowError
from PIL import Image

from linkqr.errors import EncodingCapacityExceeded, InvalidInput, InvalidMatrix
from linkqr.logging import audit, get_logger, trace

log = get_logger("matrix")


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}

# Approximate fraction of codewords each level can restore
ECC_RECOVERY = {"L": 0.07, "M": 0.15, "Q": 0.25, "H": 0.30}


@dataclass(frozen=True)
class ModuleMatrix:
    """Immutable N x N grid of dark (True) / light (False) modules, indexed [y][x]."""
    modules: tuple[tuple[bool, ...], ...]
    version: int | None = None
    ecc: str = "H"

    @property
    def size(self) -> int:
        return len(self.modules)

    def is_dark(self, x: int, y: int) -> bool:
        return self.modules[y][x]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence], **kwargs) -> "ModuleMatrix":
        return cls(tuple(tuple(bool(cell) for cell in row) for row in rows), **kwargs)

    @classmethod
    def from_flat(cls, module_count: int, modules: Sequence, **kwargs) -> "ModuleMatrix":
        """Build from a row-major flat list of ``module_count ** 2`` flags."""
        if module_count <= 0 or len(modules) != module_count * module_count:
            raise InvalidMatrix(
                f"Expected {module_count}x{module_count} modules, got {len(modules)}"
            )
        rows = [modules[y * module_count:(y + 1) * module_count] for y in range(module_count)]
        return cls.from_rows(rows, **kwargs)


def _make_qr(data: str, ecc: str, box_size: int = 1, border: int = 0) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=ECC_NAMES[ecc.upper()].value,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    # qrcode 8 overflows by setting version 41, which its version setter rejects with ValueError
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as exc:
        raise EncodingCapacityExceeded(
            f"{len(data)} characters do not fit any QR version at ECC level {ecc.upper()}"
        ) from exc
    return qr


@trace
def encode_matrix(text: str, ecc: str = "H") -> ModuleMatrix:
    """Encode *text* at the smallest version that fits the given ECC level.

    Raises:
        EncodingCapacityExceeded: *text* is too long for version 40.
    """
    qr = _make_qr(text, ecc)
    matrix = ModuleMatrix.from_rows(qr.modules, version=qr.version, ecc=ecc.upper())
    audit("qr.matrix_encoded", logger=log,
          data=text[:80], version=qr.version,
          size=f"{matrix.size}x{matrix.size}", ecc=ecc.upper())
    return matrix


@trace
def generate_plain_qr(data: str, ecc: str = "H", box_size: int = 10, border: int = 4) -> Image.Image:
    """Unstyled black-on-white QR image, for callers falling back from the styled render."""
    if not isinstance(data, str) or not data.strip():
        raise InvalidInput("QR data must be a non-empty string")

    qr = _make_qr(data, ecc, box_size=box_size, border=border)
    img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    audit("qr.plain_generated", logger=log,
          data=data[:80], version=qr.version, ecc=ecc.upper(),
          image_px=f"{img.size[0]}x{img.size[1]}")
    return img
