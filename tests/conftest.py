import io

import pytest
from PIL import Image


def png_from_blocks(blocks, width=100, mode="RGB"):
    """Stack horizontal color bands: blocks = [(color, rows), ...]."""
    height = sum(rows for _, rows in blocks)
    img = Image.new(mode, (width, height))
    y = 0
    for color, rows in blocks:
        img.paste(color, (0, y, width, y + rows))
        y += rows
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class FakePageSession:
    """Stands in for a browser page: records calls, returns a canned dump."""

    def __init__(self, dump=None, goto_error=None, evaluate_error=None, image=b"", viewport=(None, None)):
        self.dump = dump
        self.goto_error = goto_error
        self.evaluate_error = evaluate_error
        self.image = image
        self.viewport = viewport
        self.visited = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def goto(self, url, timeout_ms=30000):
        self.visited.append((url, timeout_ms))
        if self.goto_error:
            raise self.goto_error

    async def evaluate(self, script, arg=None):
        if self.evaluate_error:
            raise self.evaluate_error
        return self.dump

    async def screenshot(self, options):
        self.screenshot_options = options
        return self.image


@pytest.fixture
def brand_png():
    # red 5000 px, navy 3000 px, beige 2000 px
    return png_from_blocks([((255, 0, 0), 50), ((17, 34, 85), 30), ((230, 225, 220), 20)])


@pytest.fixture
def page_dump():
    return {
        "rootVariables": [
            {"name": "--spacing-lg", "value": "24px"},
            {"name": "--text-color", "value": "rgb(33, 37, 41)"},
            {"name": "--brand-primary-color", "value": " #1A73E8 "},
            {"name": "--overlay-color", "value": "rgba(0, 0, 0, 0)"},
        ],
        "buttons": [
            {"selector": "button", "backgroundColor": "rgba(0, 0, 0, 0)", "color": "rgba(0, 0, 0, 0)",
             "borderColor": "rgba(0, 0, 0, 0)", "className": "ghost", "text": ""},
            {"selector": ".btn", "backgroundColor": "rgb(255, 255, 255)", "color": "rgb(26, 115, 232)",
             "borderColor": "rgb(26, 115, 232)", "className": "btn btn-light", "text": "  Sign in  "},
            {"selector": ".cta", "backgroundColor": "rgb(26, 115, 232)", "color": "rgb(255, 255, 255)",
             "borderColor": "rgb(26, 115, 232)", "className": "cta", "text": "Get started for free today " * 5},
        ],
        "navigation": [
            {"selector": "header", "backgroundColor": "rgb(255, 255, 255)", "color": "rgb(32, 33, 36)"},
            {"selector": "nav", "backgroundColor": "rgba(0, 0, 0, 0)", "color": "rgba(0, 0, 0, 0)"},
        ],
        "headings": [
            {"tag": "h1", "color": "rgb(32, 33, 36)", "text": "Build faster with our platform today"},
            {"tag": "h2", "color": "rgb(95, 99, 104)", "text": "Features"},
            {"tag": "h3", "color": "rgb(95, 99, 104)", "text": "Pricing"},
        ],
        "links": ["rgb(26, 115, 232)", "rgb(26, 115, 232)", "rgb(95, 99, 104)"],
        "backgrounds": {"body": "rgb(255, 255, 255)", "main": "rgba(0, 0, 0, 0)"},
        "images": [
            {"kind": "img", "src": "https://example.com/static/logo.png", "alt": "Example logo",
             "markup": None, "rect": {"top": 10, "width": 120, "height": 40},
             "inHeader": True, "explicitLogo": True},
            {"kind": "svg", "src": None, "alt": None, "markup": "<svg class=\"mark\" viewBox=\"0 0 100 30\"></svg>",
             "rect": {"top": 12, "width": 100, "height": 30}, "inHeader": True, "explicitLogo": False},
            {"kind": "img", "src": "https://example.com/hero.jpg", "alt": "", "markup": None,
             "rect": {"top": 300, "width": 1200, "height": 500}, "inHeader": False, "explicitLogo": False},
        ],
        "stylesheetLinks": [
            "https://example.com/app.css",
            "https://fonts.googleapis.com/css2?family=Roboto&display=swap",
        ],
        "headingFonts": [
            {"fontFamily": "\"Google Sans\", Arial, sans-serif", "fontSize": "48px", "fontWeight": "700", "source": "h1"},
        ],
        "bodyFont": {"fontFamily": "Roboto, Arial, sans-serif", "fontSize": "16px", "fontWeight": "400", "source": "p"},
        "viewportHeight": 800,
    }


@pytest.fixture
def fake_session():
    return FakePageSession
