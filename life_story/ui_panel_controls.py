from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional, Sequence

from .controls import ControlPanel


class ControlsPanel(ControlPanel):
    """Side panel scenes fill with their own widgets."""

    def __init__(self, owner, parent: tk.Widget) -> None:
        self.owner = owner
        frame = ttk.LabelFrame(parent, text="Controls", padding=8)
        self.frame = frame
        frame.pack(side="right", fill="y", padx=(8, 8), pady=(8, 8))
        self._vars: list = []

    def clear(self) -> None:
        for w in list(self.frame.winfo_children()):
            w.destroy()
        self._vars.clear()

    # Callbacks re-render the scene, which clears this panel; run them after
    # the widget's own event handler has returned.
    def _later(self, fn: Callable[[], None]) -> None:
        self.frame.after_idle(fn)

    def add_choice(self, label: str, options: Sequence[str], current: Optional[str],
                   on_change: Callable[[str], None]) -> None:
        ttk.Label(self.frame, text=label).pack(side="top", anchor="w")
        var = tk.StringVar(value=current or "")
        self._vars.append(var)
        combo = ttk.Combobox(self.frame, textvariable=var, state="readonly", width=18, values=tuple(options))
        combo.pack(side="top", fill="x", pady=(2, 8))
        combo.bind("<<ComboboxSelected>>", lambda _e: self._later(lambda: on_change(var.get())))

    def add_toggle(self, label: str, value: bool, on_change: Callable[[bool], None]) -> None:
        var = tk.BooleanVar(value=bool(value))
        self._vars.append(var)
        ttk.Checkbutton(
            self.frame,
            text=label,
            variable=var,
            command=lambda: self._later(lambda: on_change(var.get())),
        ).pack(side="top", anchor="w", pady=(2, 8))
