from __future__ import annotations

import html
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

from PIL import Image

from . import media


INDEX_NAME = "index.html"


@dataclass(frozen=True)
class GalleryImage:
    filename: str
    small_filename: str
    size_kib: int
    small_size_kib: int
    width: int | None = None
    height: int | None = None
    frames: int | None = None


@dataclass(frozen=True)
class PeriodLink:
    period: str
    href: str
    label: str


@dataclass(frozen=True)
class RenderedPage:
    period: str
    filename: str
    title: str
    previous: PeriodLink | None
    next: PeriodLink | None
    image_count: int
    html: str


_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def period_label(period: str) -> str:
    """'202403' -> 'Mar 2024', in English whatever the process locale."""
    month = datetime.strptime(period, "%Y%m")
    return f"{_MONTH_ABBR[month.month - 1]} {month.year:04d}"


def _link(period: str) -> PeriodLink:
    return PeriodLink(period=period, href=media.page_name(period), label=period_label(period))


def group_by_period(names: Iterable[str]) -> dict[str, list[str]]:
    """
    Group archive originals by YYYYMM, both levels in lexical order. Names that
    are not archive identifiers (pages, derivatives, strays) are left out.
    """
    groups: dict[str, list[str]] = {}
    for name in sorted(names):
        if not media.is_identifier_name(name):
            continue
        groups.setdefault(media.period_key(name), []).append(name)
    return groups


def _gif_info(path: Path, logger=None) -> tuple[int, int, int] | None:
    try:
        with Image.open(path) as im:
            return im.width, im.height, getattr(im, "n_frames", 1)
    except OSError as e:  # includes PIL.UnidentifiedImageError
        if logger:
            logger.warning(f"Cannot read image dimensions of {path.name}: {e}")
        return None


def load_images(
    archive_dir: Path, groups: dict[str, list[str]], *, logger=None
) -> dict[str, list[GalleryImage]]:
    """
    Stat each original and its derivative. A missing derivative raises OSError.
    """
    out: dict[str, list[GalleryImage]] = {}
    for period, names in groups.items():
        images: list[GalleryImage] = []
        for name in names:
            small = media.derivative_name(name)
            size = (archive_dir / name).stat().st_size
            small_size = (archive_dir / small).stat().st_size
            info = _gif_info(archive_dir / small, logger)
            width, height, frames = info if info is not None else (None, None, None)
            images.append(
                GalleryImage(
                    filename=name,
                    small_filename=small,
                    size_kib=size // 1024,
                    small_size_kib=small_size // 1024,
                    width=width,
                    height=height,
                    frames=frames,
                )
            )
        out[period] = images
    return out


_STYLE = (
    "<style>"
    ".image-block{margin-top:20px}"
    ".image-block>a>img{margin:0 auto;max-width:100%;height:auto}"
    "button{font-size:20px;min-width:100px;font-family:Helvetica}"
    "h1{display:inline;font-family:Helvetica;font-size:24px;padding:0 1em}"
    ".alt{font-size:10px;color:#666}"
    "</style>\n"
)


def _nav(previous: PeriodLink | None, next_: PeriodLink | None) -> tuple[str, str]:
    prev_html = ""
    next_html = ""
    if previous is not None:
        prev_html = (
            f"<a href=\"{html.escape(previous.href)}\" rel=\"prev\">"
            f"<button>&larr; {html.escape(previous.label)}</button></a>"
        )
    if next_ is not None:
        next_html = (
            f"<a href=\"{html.escape(next_.href)}\" rel=\"next\">"
            f"<button>{html.escape(next_.label)} &rarr;</button></a>"
        )
    return prev_html, next_html


def _image_block(img: GalleryImage) -> str:
    name = html.escape(img.filename)
    small = html.escape(img.small_filename)
    dims = ""
    if img.width is not None and img.height is not None:
        dims = f" width=\"{img.width}\" height=\"{img.height}\""
    frames = ""
    if img.frames is not None:
        frames = f" {img.frames} frame{'s' if img.frames != 1 else ''}"
    return (
        "<div class=\"image-block\">"
        f"<a href=\"{small}\"><img src=\"{small}\" alt=\"{small}\" loading=\"lazy\"{dims}></a><br/>"
        f"<span class=\"alt\"><a href=\"{name}\">{name}</a> size:{img.size_kib}k{frames}</span><br/>"
        f"<span class=\"alt\"><a href=\"{small}\">{small}</a> size:{img.small_size_kib}k</span><br/>"
        "</div>\n"
    )


def render_page(
    *,
    title: str,
    images: list[GalleryImage],
    previous: PeriodLink | None,
    next_: PeriodLink | None,
) -> str:
    prev_html, next_html = _nav(previous, next_)
    parts = [
        "<!doctype html>\n",
        "<html><head><meta charset=\"utf-8\">"
        "<meta name=\"viewport\" content=\"initial-scale=1.0, width=480\">"
        "<link rel=\"icon\" href=\"data:,\">"
        f"<title>{html.escape(title)}</title>\n",
        _STYLE,
        "</head><body>\n",
        f"<div class=\"nav\">{prev_html}<h1>{html.escape(title)}</h1>{next_html}</div>\n",
    ]
    parts.extend(_image_block(img) for img in images)
    parts.append(f"<p class=\"nav\">{prev_html}{next_html}</p>\n")
    parts.append("</body></html>\n")
    return "".join(parts)


def render_pages(groups: dict[str, list[GalleryImage]]) -> list[RenderedPage]:
    """
    One page per non-empty period, in period order. Previous/next link to the
    neighbouring non-empty periods, so gaps in the calendar are skipped.
    """
    periods = [p for p, images in sorted(groups.items()) if images]
    pages: list[RenderedPage] = []
    for i, period in enumerate(periods):
        previous = _link(periods[i - 1]) if i > 0 else None
        next_ = _link(periods[i + 1]) if i < len(periods) - 1 else None
        title = period_label(period)
        pages.append(
            RenderedPage(
                period=period,
                filename=media.page_name(period),
                title=title,
                previous=previous,
                next=next_,
                image_count=len(groups[period]),
                html=render_page(title=title, images=groups[period], previous=previous, next_=next_),
            )
        )
    return pages


def write_gallery(archive_dir: Path, pages: list[RenderedPage], *, logger) -> list[Path]:
    """
    Write every page, then point `index.html` at the newest one.
    """
    written: list[Path] = []
    for page in pages:
        out_path = archive_dir / page.filename
        logger.info(f"creating {page.filename} for {page.image_count} images")
        out_path.write_text(page.html, encoding="utf-8")
        written.append(out_path)

    if pages:
        newest = pages[-1].filename
        index = archive_dir / INDEX_NAME
        logger.info(f"symlinking {INDEX_NAME} to {newest}")
        if index.is_symlink() or index.exists():
            index.unlink()
        os.symlink(newest, index)
    return written


def build_gallery(archive_dir: Path, names: list[str], *, logger) -> list[Path]:
    groups = group_by_period(names)
    images = load_images(archive_dir, groups, logger=logger)
    return write_gallery(archive_dir, render_pages(images), logger=logger)
