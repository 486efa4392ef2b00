import io

from PIL import Image, ImageDraw, ImageFont

PLACEHOLDER_SIZE = 1000


def load_caption_font(size: int = 24) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a readable sans-serif font, falling back to PIL's default."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
        "/System/Library/Fonts/Supplemental/Arial.ttf",
        "C:\\Windows\\Fonts\\arial.ttf",
    ]
    for font_path in font_paths:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            continue
    return ImageFont.load_default()


def render_placeholder(page_number: int, size: int = PLACEHOLDER_SIZE) -> bytes:
    """Blank white PNG captioned with the failed page number."""
    image = Image.new("RGB", (size, size), "white")
    draw = ImageDraw.Draw(image)
    draw.text(
        (50, size // 2),
        f"Page {page_number} - Image conversion failed",
        font=load_caption_font(),
        fill="black",
    )
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
