"""Template image catalogue for AI Photo Studio.

Templates are plain image files dropped into the template image directory
(``public/templates`` by default).  There is no database: the directory
listing *is* the catalogue, re-read on every request so newly added files
show up without a restart.

Template References
-------------------
The gateway accepts a template either as a data URI (what the browser client
sends) or as a reference to a file in the catalogue.  References may take any
of these forms, all resolving to the same file::

    summer-dress.png
    templates/summer-dress.png
    /templates/summer-dress.png

Anything that would resolve outside the template directory is rejected.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from photostudio.core.data_uri import DecodedImage, guess_mime_type

logger = logging.getLogger(__name__)

TEMPLATE_PATTERN = re.compile(r"\.(png|jpg|jpeg|webp)$", re.IGNORECASE)

# URL prefix under which the template directory is mounted.
TEMPLATE_URL_PREFIX = "/templates"


class TemplateNotFoundError(LookupError):
    """Raised when a template reference does not name a usable file."""


@dataclass(frozen=True)
class TemplateInfo:
    """A single selectable template image.

    Attributes:
        filename: File name inside the template directory.
        url: URL path the browser can load the image from.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    filename: str
    url: str
    width: int
    height: int

    def to_dict(self) -> dict:
        return asdict(self)


def is_template_filename(filename: str) -> bool:
    """Return ``True`` if *filename* has a supported image extension."""
    return bool(TEMPLATE_PATTERN.search(filename))


def list_templates(directory: Path) -> list[TemplateInfo]:
    """List the template images available in *directory*.

    Files without a supported image extension are ignored.  Files that Pillow
    cannot open are skipped with a warning rather than failing the listing.

    Args:
        directory: Template image directory.

    Returns:
        Templates sorted by filename.  Empty if the directory is missing.
    """
    if not directory.is_dir():
        logger.warning(f"Error reading templates directory: {directory} does not exist")
        return []

    templates: list[TemplateInfo] = []
    for path in sorted(directory.iterdir(), key=lambda p: p.name):
        if not path.is_file() or not is_template_filename(path.name):
            continue

        try:
            with Image.open(path) as img:
                width, height = img.size
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Skipping unreadable template {path.name}: {e}")
            continue

        templates.append(
            TemplateInfo(
                filename=path.name,
                url=f"{TEMPLATE_URL_PREFIX}/{path.name}",
                width=width,
                height=height,
            )
        )

    return templates


def resolve_template_path(directory: Path, reference: str) -> Path:
    """Resolve a template reference to a file inside *directory*.

    Args:
        directory: Template image directory.
        reference: ``name.png``, ``templates/name.png`` or
            ``/templates/name.png``.

    Returns:
        Absolute path of the template file.

    Raises:
        TemplateNotFoundError: If the reference escapes the directory, is not
            an image filename, or the file does not exist.
    """
    name = reference.strip()
    prefix = TEMPLATE_URL_PREFIX.lstrip("/") + "/"
    name = name.lstrip("/")
    if name.startswith(prefix):
        name = name[len(prefix):]

    if not name or not is_template_filename(name):
        raise TemplateNotFoundError(f"Unknown template: {reference}")

    base = directory.resolve()
    candidate = (base / name).resolve()

    # Security: the resolved path must stay inside the template directory.
    if not candidate.is_relative_to(base):
        raise TemplateNotFoundError(f"Unknown template: {reference}")

    if not candidate.is_file():
        raise TemplateNotFoundError(f"Unknown template: {reference}")

    return candidate


def load_template(directory: Path, reference: str) -> DecodedImage:
    """Read a catalogue template into memory.

    Raises:
        TemplateNotFoundError: See :func:`resolve_template_path`.
    """
    path = resolve_template_path(directory, reference)
    return DecodedImage(data=path.read_bytes(), mime_type=guess_mime_type(path))
