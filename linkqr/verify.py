"""Scan verification: decode rendered QR images and sample their module grid."""

import time
from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image, ImageOps
from pyzbar.pyzbar import decode as pyzbar_decode

from linkqr.logging import audit, get_logger, trace

log = get_logger("verify")


@dataclass
class ScanResult:
    """Result of a single scan attempt."""
    success: bool
    decoded_data: str | None = None
    decode_time_ms: float = 0.0
    decoder: str = ""
    error: str | None = None


def _finish(decoder: str, start: float, data: str | None) -> ScanResult:
    elapsed = (time.perf_counter() - start) * 1000
    if data:
        audit("scan.verified", logger=log, decoder=decoder, success=True, time_ms=round(elapsed, 1), data=data[:80])
        return ScanResult(success=True, decoded_data=data, decode_time_ms=elapsed, decoder=decoder)
    audit("scan.verified", logger=log, decoder=decoder, success=False, time_ms=round(elapsed, 1), error="No QR code detected")
    return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error="No QR code detected")


@trace
def scan_pyzbar(image: Image.Image) -> ScanResult:
    """Scan a QR code using pyzbar (wraps ZBar)."""
    start = time.perf_counter()
    try:
        results = pyzbar_decode(image.convert("L"))
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        audit("scan.error", logger=log, decoder="pyzbar/zbar", error=str(e), time_ms=round(elapsed, 1))
        return ScanResult(success=False, decode_time_ms=elapsed, decoder="pyzbar/zbar", error=str(e))
    data = results[0].data.decode("utf-8", errors="replace") if results else None
    return _finish("pyzbar/zbar", start, data)


@trace
def scan_opencv(image: Image.Image) -> ScanResult:
    """Scan a QR code using OpenCV's built-in QR detector."""
    start = time.perf_counter()
    try:
        gray = cv2.cvtColor(np.array(image.convert("RGB")), cv2.COLOR_RGB2GRAY)
        data, _, _ = cv2.QRCodeDetector().detectAndDecode(gray)
    except cv2.error as e:
        elapsed = (time.perf_counter() - start) * 1000
        audit("scan.error", logger=log, decoder="opencv", error=str(e), time_ms=round(elapsed, 1))
        return ScanResult(success=False, decode_time_ms=elapsed, decoder="opencv", error=str(e))
    return _finish("opencv", start, data or None)


def _with_quiet_zone(image: Image.Image) -> Image.Image:
    """Pad with white so decoders see a full quiet zone around a tight canvas margin."""
    return ImageOps.expand(image.convert("RGB"), border=max(16, image.width // 10), fill="white")


@trace
def verify(image: Image.Image, expected_data: str | None = None) -> list[ScanResult]:
    """Run all available decoders on an image.

    Args:
        image: PIL Image containing a QR code.
        expected_data: If provided, marks result as failure if decoded data doesn't match.

    Returns:
        List of ScanResults, one per decoder.
    """
    padded = _with_quiet_zone(image)
    results = []
    for scanner in [scan_pyzbar, scan_opencv]:
        result = scanner(padded)
        if result.success and expected_data and result.decoded_data != expected_data:
            result.success = False
            result.error = f"Data mismatch: got '{result.decoded_data}', expected '{expected_data}'"
        results.append(result)
    return results

