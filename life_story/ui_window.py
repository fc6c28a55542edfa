from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable

from .config import StoryConfig
from .errors import StoryError
from .records import Dataset
from .session import Session, build_session
from .ui_panel_canvas import CanvasPanel, TkCanvasSurface
from .ui_panel_controls import ControlsPanel
from .ui_panel_toolbar import ToolbarPanel

logger = logging.getLogger(__name__)


class StoryWindow(tk.Tk):
    def __init__(self, dataset: Dataset, config: StoryConfig, *, start_slide: int = 0):
        super().__init__()
        self.title("Life Expectancy: a story in five scenes")
        self.resizable(False, False)
        self.config_ = config

        self.toolbar = ToolbarPanel(self, self, on_back=self._on_back, on_next=self._on_next)
        body = ttk.Frame(self)
        body.pack(side="top", fill="both", expand=True)
        self.canvas_panel = CanvasPanel(self, body, width=config.canvas_width, height=config.canvas_height,
                                        background=config.background)
        self.controls_panel = ControlsPanel(self, body)

        self.session: Session = build_session(
            dataset,
            config,
            surface_factory=lambda cfg: TkCanvasSurface(
                self.canvas, cfg.plot_width, cfg.plot_height, cfg.margin, cfg.background
            ),
            controls=self.controls_panel,
            nav=self.toolbar,
        )

        self.bind("<Left>", lambda _e: self._on_back())
        self.bind("<Right>", lambda _e: self._on_next())
        self.bind("<Home>", lambda _e: self._navigate(lambda: self.session.controller.go_to(0)))
        self.bind("<End>", lambda _e: self._navigate(
            lambda: self.session.controller.go_to(self.session.controller.max_slide)))

        self._navigate(lambda: self.session.controller.go_to(start_slide))

    def _navigate(self, action: Callable[[], None]) -> None:
        # a failed render aborts only itself; the next click starts clean
        try:
            action()
        except StoryError as e:
            logger.exception("Scene render failed")
            messagebox.showerror("Scene failed", str(e), parent=self)

    def _on_back(self) -> None:
        self._navigate(self.session.controller.retreat)

    def _on_next(self) -> None:
        self._navigate(self.session.controller.advance)
