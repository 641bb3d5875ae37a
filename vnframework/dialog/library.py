"""
Story library.

Loads story files (JSON), validates them against STORY_FILE_SCHEMA and
turns their markup into ready-to-show Story lists keyed by file id.

File layout:
    {
        "id": "chapter_1",
        "title": "Chapter 1",
        "stories": [
            {"title": "{{}}Alice", "msg": "{{color:red}}Hello!",
             "left_images": [{"name": "alice.png"}], "background": ""}
        ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator

import jsonschema

from vnframework.dialog.markup import MarkupParser
from vnframework.dialog.story import ImagePrint, Story

_IMAGE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "style": {"type": "string"},
        "class": {"type": "string"},
    },
    "required": ["name"],
    "additionalProperties": False,
}

STORY_FILE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "stories": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "msg": {"type": "string"},
                    "left_images": {"type": "array", "items": _IMAGE_SCHEMA},
                    "right_images": {"type": "array", "items": _IMAGE_SCHEMA},
                    "center_image": {"anyOf": [_IMAGE_SCHEMA, {"type": "null"}]},
                    "background": {"type": "string"},
                    "class": {"type": "string"},
                },
                "required": ["msg"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["id", "stories"],
}


def _image(data: dict[str, Any]) -> ImagePrint:
    return ImagePrint(data["name"], data.get("style", ""), data.get("class", ""))


class StoryLibrary:
    """
    Central storage for story files.

    Markup errors inside a file follow the parser mode: lenient parsing
    degrades the bad segment, strict parsing rejects the whole file.
    """

    def __init__(self, data_path: Path | str | None = None, strict: bool = False):
        self._data_path = Path(data_path) if data_path is not None else None
        self._strict = strict
        self.stories: dict[str, list[Story]] = {}
        self.titles: dict[str, str] = {}

        self.logger = logging.getLogger(__name__)

    def load_all(self) -> int:
        """Load every *.json file in the data directory. Returns the file count."""
        if self._data_path is None or not self._data_path.exists():
            self.logger.warning(f"Story directory not found: {self._data_path}")
            return 0

        loaded = 0
        for file_path in sorted(self._data_path.glob("*.json")):
            if self.load_file(file_path) is not None:
                loaded += 1

        self.logger.info(f"Loaded {loaded} story files ({sum(len(s) for s in self.stories.values())} stories).")
        return loaded

    def load_file(self, file_path: Path | str) -> str | None:
        """Load one story file. Returns its id, or None if it was rejected."""
        file_path = Path(file_path)
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to load {file_path}: {e}")
            return None

        return self.load_data(data, source=str(file_path))

    def load_data(self, data: Any, source: str = "<data>") -> str | None:
        """Validate and register already-decoded story data."""
        try:
            jsonschema.validate(instance=data, schema=STORY_FILE_SCHEMA)
        except jsonschema.ValidationError as e:
            self.logger.error(f"Validation error in {source}: {e.message}")
            return None

        parser = MarkupParser(strict=self._strict)
        try:
            stories = [self._build_story(entry, parser) for entry in data["stories"]]
        except ValueError as e:
            self.logger.error(f"Markup error in {source}: {e}")
            return None

        story_id = data["id"]
        if story_id in self.stories:
            self.logger.warning(f"Story id {story_id!r} from {source} replaces an earlier file")

        self.stories[story_id] = stories
        self.titles[story_id] = data.get("title", story_id)
        return story_id

    @staticmethod
    def _build_story(entry: dict[str, Any], parser: MarkupParser) -> Story:
        center = entry.get("center_image")
        return Story(
            title=parser.parse(entry.get("title", "")),
            msg=parser.parse(entry["msg"]),
            left_images=tuple(_image(i) for i in entry.get("left_images", [])),
            center_image=_image(center) if center else None,
            right_images=tuple(_image(i) for i in entry.get("right_images", [])),
            background=entry.get("background", ""),
            class_name=entry.get("class", ""),
        )

    def get(self, story_id: str) -> list[Story] | None:
        return self.stories.get(story_id)

    def __contains__(self, story_id: object) -> bool:
        return story_id in self.stories

    def __iter__(self) -> Iterator[str]:
        return iter(self.stories)

    def __len__(self) -> int:
        return len(self.stories)
