from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable

from .controls import NavigationControls


class ToolbarPanel(NavigationControls):
    def __init__(
        self,
        owner,
        parent: tk.Widget,
        *,
        on_back: Callable[[], None],
        on_next: Callable[[], None],
    ) -> None:
        self.owner = owner
        self.frame = ttk.Frame(parent)
        self.frame.pack(side="top", fill="x", padx=8, pady=(8, 0))

        self.btn_back = ttk.Button(self.frame, text="< Back", command=on_back)
        self.btn_back.pack(side="left")
        self.btn_next = ttk.Button(self.frame, text="Next >", command=on_next)
        self.btn_next.pack(side="left", padx=(8, 0))

        ttk.Separator(self.frame, orient="vertical").pack(side="left", fill="y", padx=10)
        self.caption_var = tk.StringVar(value="")
        ttk.Label(self.frame, textvariable=self.caption_var).pack(side="left")

    def set_nav_state(self, back_disabled: bool, next_disabled: bool) -> None:
        self.btn_back.configure(state=("disabled" if back_disabled else "normal"))
        self.btn_next.configure(state=("disabled" if next_disabled else "normal"))

    def set_caption(self, text: str) -> None:
        self.caption_var.set(text)
