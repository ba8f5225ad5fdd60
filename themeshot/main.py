import json
import logging
from functools import lru_cache
from typing import Literal, Optional

from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response, StreamingResponse

from .analyzers import analyze_screenshot, analyze_website_colors
from .browser import ScreenshotOptions, capture_screenshot
from .config import get_settings
from .errors import ThemeshotError
from .logging_config import setup_logging
from .models import ThemeResult
from .palette import (
    extract_color_palette,
    get_simple_color_palette,
    render_palette_strip,
    simplify,
)
from .uploader import S3Uploader

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="themeshot - website screenshots and brand themes")

USAGE_MESSAGE = "Please send Url as query param: ?url=https://www.google.com"

STATUS_BY_KIND = {
    "decode_error": 422,
    "navigation_timeout": 504,
    "navigation_error": 502,
    "evaluation_error": 502,
    "browser_error": 503,
    "capture_error": 502,
    "upload_error": 502,
}


@lru_cache()
def get_uploader() -> S3Uploader:
    return S3Uploader(settings)


def theme_response(result: ThemeResult) -> JSONResponse:
    status = 200 if result.success else STATUS_BY_KIND.get(result.error_kind, 500)
    return JSONResponse(content=result.to_dict(), status_code=status)


@app.exception_handler(ThemeshotError)
async def themeshot_error_handler(request: Request, exc: ThemeshotError):
    logger.warning(f"{request.url.path}: {exc.kind}: {exc}")
    return JSONResponse(
        content={"message": str(exc), "errorKind": exc.kind},
        status_code=STATUS_BY_KIND.get(exc.kind, 500),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.url.path}: unhandled error")
    return JSONResponse(content={"message": str(exc)}, status_code=500)


@app.get("/")
async def screenshot(
    url: Optional[str] = None,
    upload: bool = False,
    width: Optional[int] = Query(None, gt=0, le=4096),
    height: Optional[int] = Query(None, gt=0, le=4096),
    full_page: bool = False,
    image_type: Literal["png", "jpeg"] = "png",
    quality: Optional[int] = Query(None, ge=0, le=100),
):
    """
    Screenshot of `url` as raw image bytes, or {"url": hosted} when upload=true.
    """
    if not url:
        return JSONResponse(content={"message": USAGE_MESSAGE}, status_code=400)

    options = ScreenshotOptions(
        width=width, height=height, full_page=full_page, image_type=image_type, quality=quality
    )
    image = await capture_screenshot(url, options)

    if upload:
        hosted_url = await run_in_threadpool(get_uploader().upload_screenshot, image, options.content_type)
        return JSONResponse(content={"url": hosted_url})
    return Response(content=image, media_type=options.content_type)


@app.get("/api/theme")
async def website_theme(url: Optional[str] = None, method: Literal["dom", "pixel"] = "dom"):
    """
    Theme for a live site.
    method=dom reads computed styles of the rendered page (with confidence and logos);
    method=pixel derives it from a screenshot's palette.
    """
    if not url:
        return JSONResponse(content={"message": USAGE_MESSAGE}, status_code=400)

    if method == "dom":
        result = await analyze_website_colors(url)
    else:
        image = await capture_screenshot(url, ScreenshotOptions())
        result = await run_in_threadpool(analyze_screenshot, image)
    return theme_response(result)


@app.post("/api/theme/image")
async def image_theme(file: UploadFile = File(...)):
    content = await file.read()
    result = await run_in_threadpool(analyze_screenshot, content)
    return theme_response(result)


@app.post("/api/palette")
async def image_palette(file: UploadFile = File(...), simple: bool = False):
    content = await file.read()
    if simple:
        payload = await run_in_threadpool(get_simple_color_palette, content, settings.max_image_side)
    else:
        payload = (await run_in_threadpool(extract_color_palette, content, settings.max_image_side)).to_dict()
    return JSONResponse(content=payload, status_code=200 if payload["success"] else 422)


@app.post("/api/palette/preview")
async def palette_preview(file: UploadFile = File(...)):
    """
    Returns a PNG strip of the extracted swatches, with the simplified palette
    in the X-Palette header. Use this to eyeball what the extractor picked.
    """
    content = await file.read()
    result = await run_in_threadpool(extract_color_palette, content, settings.max_image_side)
    if not result.success:
        return JSONResponse(content=result.to_dict(), status_code=422)
    png_io = render_palette_strip(result.palette)
    headers = {"X-Palette": json.dumps(simplify(result.palette))}
    return StreamingResponse(png_io, media_type="image/png", headers=headers)


@app.get("/health")
async def health():
    return {"status": "ok", "service": settings.app_name}
