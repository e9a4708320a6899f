"""Framebuffer specifications and attachment bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Iterable

from glab.core import get_logger

__all__ = [
    "MAX_FRAMEBUFFER_SIZE",
    "Framebuffer",
    "FramebufferAttachmentSpecification",
    "FramebufferSpecification",
    "FramebufferTextureFormat",
    "FramebufferTextureSpecification",
    "is_depth_format",
    "to_gl_format",
]

MAX_FRAMEBUFFER_SIZE = 8192

GL_RGBA8 = 0x8058
GL_RGBA32F = 0x8814
GL_RED_INTEGER = 0x8D94
GL_RED = 0x1903


class FramebufferTextureFormat(IntEnum):
    NONE = 0
    RGBA8 = 1
    RGBA32F = 2
    RED_INTEGER = 3
    RED_FLOAT = 4
    DEPTH24STENCIL8 = 5
    DEPTH = 5


def is_depth_format(fmt: FramebufferTextureFormat) -> bool:
    return fmt == FramebufferTextureFormat.DEPTH24STENCIL8


_GL_FORMATS = {
    FramebufferTextureFormat.RGBA8: GL_RGBA8,
    FramebufferTextureFormat.RGBA32F: GL_RGBA32F,
    FramebufferTextureFormat.RED_INTEGER: GL_RED_INTEGER,
    FramebufferTextureFormat.RED_FLOAT: GL_RED,
}


def to_gl_format(fmt: FramebufferTextureFormat) -> int:
    """Return the driver format constant used to clear a colour attachment."""
    try:
        return _GL_FORMATS[FramebufferTextureFormat(fmt)]
    except (KeyError, ValueError):
        raise ValueError(f"no colour format for {fmt!r}") from None


@dataclass(frozen=True)
class FramebufferTextureSpecification:
    texture_format: FramebufferTextureFormat = FramebufferTextureFormat.NONE


@dataclass
class FramebufferAttachmentSpecification:
    attachments: list[FramebufferTextureSpecification] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.attachments = [
            a
            if isinstance(a, FramebufferTextureSpecification)
            else FramebufferTextureSpecification(FramebufferTextureFormat(a))
            for a in self.attachments
        ]


@dataclass
class FramebufferSpecification:
    width: int = 0
    height: int = 0
    attachments: FramebufferAttachmentSpecification = field(
        default_factory=FramebufferAttachmentSpecification
    )
    samples: int = 1
    swap_chain_target: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.attachments, FramebufferAttachmentSpecification):
            self.attachments = FramebufferAttachmentSpecification(
                list(self.attachments)  # type: ignore[arg-type]
            )


class Framebuffer:
    """Holds a framebuffer's size and splits its attachments into colour and depth."""

    def __init__(self, spec: FramebufferSpecification) -> None:
        self._spec = replace(
            spec,
            attachments=FramebufferAttachmentSpecification(
                list(spec.attachments.attachments)
            ),
        )
        self._color_specs: list[FramebufferTextureSpecification] = []
        self._depth_spec = FramebufferTextureSpecification()
        for attachment in self._spec.attachments.attachments:
            if is_depth_format(attachment.texture_format):
                self._depth_spec = attachment
            else:
                self._color_specs.append(attachment)

    @property
    def multisampled(self) -> bool:
        return self._spec.samples > 1

    def resize(self, width: int, height: int) -> bool:
        """Change the size; invalid sizes are logged and ignored. Return whether it changed."""
        if width <= 0 or height <= 0 or width > MAX_FRAMEBUFFER_SIZE or height > MAX_FRAMEBUFFER_SIZE:
            get_logger().warning("Attempted to rezize framebuffer to %s, %s", width, height)
            return False
        self._spec.width = int(width)
        self._spec.height = int(height)
        return True

    @property
    def color_attachment_specifications(self) -> list[FramebufferTextureSpecification]:
        return list(self._color_specs)

    @property
    def depth_attachment_specification(self) -> FramebufferTextureSpecification:
        return self._depth_spec

    @property
    def specification(self) -> FramebufferSpecification:
        return self._spec

    @classmethod
    def create(
        cls,
        width: int,
        height: int,
        formats: Iterable[FramebufferTextureFormat] = (),
        samples: int = 1,
    ) -> "Framebuffer":
        return cls(
            FramebufferSpecification(
                width, height, FramebufferAttachmentSpecification(list(formats)), samples
            )
        )