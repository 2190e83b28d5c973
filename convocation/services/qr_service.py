import io

import qrcode
import qrcode.image.svg
from PIL import Image

from .. import config


class QrRasterError(Exception):
    pass


def make_qr_svg(payload: str) -> str:
    img = qrcode.make(payload, image_factory=qrcode.image.svg.SvgPathImage, box_size=10, border=4)
    return img.to_string(encoding="unicode")


def rasterize_qr_svg(svg: str, size: int = None) -> Image.Image:
    """
    Renders QR vector markup to a square RGB image on an opaque white
    background. PDF pages cannot carry the SVG itself.
    """
    size = size or config.QR_RASTER_SIZE
    if not svg or not svg.strip():
        raise QrRasterError("QR code markup is empty")

    try:
        # needs the system cairo library, loaded only when a ticket is drawn
        import cairosvg

        png = cairosvg.svg2png(
            bytestring=svg.encode("utf-8"),
            output_width=size,
            output_height=size,
            background_color="white",
        )
        img = Image.open(io.BytesIO(png))
        img.load()
    except Exception as e:
        raise QrRasterError(f"Could not rasterize QR code: {e}") from e

    if img.size != (size, size):
        raise QrRasterError(f"QR code rendered at {img.size}, expected {size}x{size}")

    if img.mode in ("RGBA", "LA", "P"):
        # flatten any remaining transparency onto white
        img = img.convert("RGBA")
        background = Image.new("RGB", img.size, "white")
        background.paste(img, mask=img.split()[-1])
        return background
    return img.convert("RGB")
