"""
Story - one page entry: title, message and the pictures around the box.

Stories are immutable values. Every ``with_*`` / image method returns a new
Story, so a base story can be derived into speaker variants without the
variants seeing each other's changes.

Usage:
    base = Story()
    alice = base.with_title(parse_markup("{{}}Alice"))
    stories = [alice.with_msg(parse_markup("{{color:red}}Hi!"))]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from vnframework.components.text import RunSequence, TextRun

logger = logging.getLogger(__name__)

# Horizontal spacing between stacked side images (rem)
IMAGE_STEP_REM = 5


@dataclass(frozen=True)
class ImagePrint:
    """
    An image shown on the page.

    Attributes:
        name: Image source path
        style: Extra style declarations
        class_name: Extra class
    """
    name: str
    style: str = ""
    class_name: str = ""


@dataclass(frozen=True)
class Story:
    """
    One page entry.

    Attributes:
        title: Runs shown in the name plate
        msg: Runs revealed in the message box
        left_images: Images stacked from the left edge
        center_image: Optional centered image
        right_images: Images stacked from the right edge (mirrored)
        background: Page background style
        class_name: Page class
    """
    title: RunSequence = ()
    msg: RunSequence = ()
    left_images: tuple[ImagePrint, ...] = ()
    center_image: Optional[ImagePrint] = None
    right_images: tuple[ImagePrint, ...] = ()
    background: str = ""
    class_name: str = ""

    def with_title(self, title: Sequence[TextRun]) -> Story:
        return replace(self, title=tuple(title))

    def with_msg(self, msg: Sequence[TextRun]) -> Story:
        return replace(self, msg=tuple(msg))

    def with_background(self, background: str) -> Story:
        return replace(self, background=background)

    def with_class(self, class_name: str) -> Story:
        return replace(self, class_name=class_name)

    # Left images

    def add_left_image(self, image: ImagePrint) -> Story:
        return replace(self, left_images=self.left_images + (image,))

    def remove_left_image(self, index: int) -> Story:
        return replace(self, left_images=_without(self.left_images, index))

    def pop_left_image(self) -> Story:
        return replace(self, left_images=self.left_images[:-1])

    def change_left_image(self, image: ImagePrint, index: int) -> Story:
        """Replace the image at index, keeping its stacking position."""
        return replace(self, left_images=_swapped(self.left_images, image, index))

    # Right images

    def add_right_image(self, image: ImagePrint) -> Story:
        return replace(self, right_images=self.right_images + (image,))

    def remove_right_image(self, index: int) -> Story:
        return replace(self, right_images=_without(self.right_images, index))

    def pop_right_image(self) -> Story:
        return replace(self, right_images=self.right_images[:-1])

    def change_right_image(self, image: ImagePrint, index: int) -> Story:
        return replace(self, right_images=_swapped(self.right_images, image, index))

    # Center image

    def change_center_image(self, image: ImagePrint) -> Story:
        return replace(self, center_image=image)

    def remove_center_image(self) -> Story:
        return replace(self, center_image=None)

    def image_placements(self) -> list[tuple[ImagePrint, str]]:
        """
        Images with their positioning declarations, in paint order.

        Side images are offset by their stack index and layered upward;
        right images are mirrored.
        """
        placements = []
        for index, image in enumerate(self.left_images):
            offset = index * IMAGE_STEP_REM - IMAGE_STEP_REM
            placements.append((image, f"{image.style}left: {offset}rem;z-index:{index};"))

        if self.center_image is not None:
            image = self.center_image
            placements.append((image, f"{image.style}left: 50%;transform: translateX(-50%);"))

        for index, image in enumerate(self.right_images):
            offset = index * IMAGE_STEP_REM - IMAGE_STEP_REM
            placements.append(
                (image, f"{image.style}right: {offset}rem;z-index:{index};transform: scaleX(-1);")
            )
        return placements


def _without(images: tuple[ImagePrint, ...], index: int) -> tuple[ImagePrint, ...]:
    if not 0 <= index < len(images):
        logger.debug("Image index %d out of range (%d images)", index, len(images))
        return images
    return images[:index] + images[index + 1:]


def _swapped(images: tuple[ImagePrint, ...], image: ImagePrint, index: int) -> tuple[ImagePrint, ...]:
    if not 0 <= index < len(images):
        logger.debug("Image index %d out of range (%d images)", index, len(images))
        return images
    return images[:index] + (image,) + images[index + 1:]
