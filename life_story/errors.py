from __future__ import annotations


class StoryError(Exception):
    """Base class for errors raised by the story viewer."""


class DataShapeError(StoryError, ValueError):
    """A dataset row is missing a field or carries a non-finite number."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class SceneIndexError(StoryError, IndexError):
    """Render was dispatched for a slide outside the scene list."""

    def __init__(self, slide: int, count: int) -> None:
        super().__init__(f"No scene for slide {slide!r} (expected 0..{count - 1})")
        self.slide = slide
        self.count = count


class ConfigError(StoryError):
    pass
