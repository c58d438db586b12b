from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

IMAGE = "image"
VIDEO = "video"
AUDIO = "audio"
FILE = "file"

ATTACHMENT_KINDS = (IMAGE, VIDEO, AUDIO, FILE)

KB = 1024
MB = 1024 * 1024


@dataclass(frozen=True)
class AttachmentView:
    """How an attachment should be presented to the user."""

    presentation: str
    url: str
    filename: str
    size_label: str
    icon: str
    download_url: Optional[str] = None
    inline: bool = True


def format_file_size(size_bytes: int) -> str:
    if size_bytes < KB:
        return f"{size_bytes} B"
    if size_bytes < MB:
        return f"{size_bytes / KB:.2f} KB"
    return f"{size_bytes / MB:.2f} MB"


def kind_for_mime_type(mime_type: Optional[str]) -> str:
    base_type = (mime_type or "").split(";")[0].strip().lower()
    major = base_type.split("/")[0]
    if major in (IMAGE, VIDEO, AUDIO):
        return major
    return FILE


def _field(attachment: Any, name: str) -> Any:
    if isinstance(attachment, Mapping):
        return attachment.get(name)
    return getattr(attachment, name, None)


def render_attachment(attachment: Any) -> Optional[AttachmentView]:
    """
    Pick the presentation for an attachment based on its kind.

    Accepts a mapping or any object with url/kind/filename/size_bytes.
    Unknown kinds fall back to the downloadable file presentation.
    Returns None when there is nothing to show.
    """
    if attachment is None:
        return None

    url = _field(attachment, "url")
    if not url:
        return None

    kind = _field(attachment, "kind")
    filename = _field(attachment, "filename") or ""
    size_label = format_file_size(_field(attachment, "size_bytes") or 0)

    if kind == IMAGE:
        return AttachmentView(IMAGE, url, filename, size_label, icon="image")
    if kind == VIDEO:
        return AttachmentView(VIDEO, url, filename, size_label, icon="video_library")
    if kind == AUDIO:
        return AttachmentView(AUDIO, url, filename, size_label, icon="audio_file")

    return AttachmentView(
        FILE,
        url,
        filename,
        size_label,
        icon="insert_drive_file",
        download_url=url,
        inline=False,
    )
