from __future__ import annotations

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence


class ControlPanel(metaclass=ABCMeta):
    """Widgets a scene injects for its own options; emptied on every teardown."""

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def add_choice(self, label: str, options: Sequence[str], current: Optional[str],
                   on_change: Callable[[str], None]) -> None:
        pass

    @abstractmethod
    def add_toggle(self, label: str, value: bool, on_change: Callable[[bool], None]) -> None:
        pass


class NavigationControls(metaclass=ABCMeta):
    @abstractmethod
    def set_nav_state(self, back_disabled: bool, next_disabled: bool) -> None:
        pass

    def set_caption(self, text: str) -> None:
        pass


@dataclass
class ControlSpec:
    kind: str  # choice|toggle
    label: str
    value: object
    options: Sequence[str]
    on_change: Callable


class HeadlessControls(ControlPanel):
    def __init__(self) -> None:
        self.widgets: Dict[str, ControlSpec] = {}

    def clear(self) -> None:
        self.widgets.clear()

    def add_choice(self, label: str, options: Sequence[str], current: Optional[str],
                   on_change: Callable[[str], None]) -> None:
        self.widgets[label] = ControlSpec("choice", label, current, tuple(options), on_change)

    def add_toggle(self, label: str, value: bool, on_change: Callable[[bool], None]) -> None:
        self.widgets[label] = ControlSpec("toggle", label, bool(value), (), on_change)

    def choose(self, label: str, value: object) -> None:
        spec = self.widgets[label]
        if spec.kind == "choice" and value not in spec.options:
            raise ValueError(f"{value!r} is not an option of {label!r}")
        spec.on_change(value)


class HeadlessNavigation(NavigationControls):
    def __init__(self) -> None:
        self.back_disabled = True
        self.next_disabled = False
        self.caption = ""
        self.history: List[tuple] = []

    def set_nav_state(self, back_disabled: bool, next_disabled: bool) -> None:
        self.back_disabled = bool(back_disabled)
        self.next_disabled = bool(next_disabled)
        self.history.append((self.back_disabled, self.next_disabled))

    def set_caption(self, text: str) -> None:
        self.caption = text
