from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Optional, Tuple

from .scales import blend
from .surface import HoverHandler, Item, LeaveHandler, Margin, Surface


class TkCanvasSurface(Surface):
    """Surface over a tk.Canvas; plot coordinates are shifted by the margin."""

    def __init__(self, canvas: tk.Canvas, width: float, height: float, margin: Margin = Margin(),
                 background: str = "#ffffff") -> None:
        super().__init__(width, height, margin, background)
        self.canvas = canvas

    def _xy(self, coords) -> list:
        m = self.margin
        return [c + (m.left if i % 2 == 0 else m.top) for i, c in enumerate(coords)]

    def _color(self, color: Optional[object], opacity: float = 1.0) -> str:
        if not color:
            return ""
        # tk has no alpha; flatten over the background instead
        if opacity < 1.0:
            return blend(str(color), self.background, opacity)
        return str(color)

    def _create(self, item: Item) -> int:
        c = self.canvas
        st = item.style
        opacity = 1.0 if st.get("opacity") is None else float(st["opacity"])
        if item.kind == "circle":
            cx, cy = self._xy(item.coords[:2])
            r = item.coords[2]
            return c.create_oval(cx - r, cy - r, cx + r, cy + r,
                                 fill=self._color(st.get("fill"), opacity),
                                 outline=self._color(st.get("outline"), opacity),
                                 tags=item.tags)
        if item.kind in ("path", "line"):
            kw = {}
            if st.get("dash"):
                kw["dash"] = tuple(st["dash"])
            return c.create_line(*self._xy(item.coords), fill=self._color(st.get("stroke"), opacity),
                                 width=float(st.get("width", 1.0)), capstyle="round", joinstyle="round",
                                 tags=item.tags, **kw)
        if item.kind == "rect":
            return c.create_rectangle(*self._xy(item.coords), fill=self._color(st.get("fill")),
                                      outline=self._color(st.get("outline")), tags=item.tags)
        if item.kind == "text":
            x, y = self._xy(item.coords)
            font = ("TkDefaultFont", int(st.get("size", 11)), "bold" if st.get("bold") else "normal")
            return c.create_text(x, y, text=str(st["text"]), fill=self._color(st.get("fill")),
                                 anchor=str(st.get("anchor", "nw")), font=font, tags=item.tags)
        raise ValueError(f"Unsupported item kind: {item.kind}")

    def _delete(self, item_id: int) -> None:
        self.canvas.delete(item_id)

    def _bind(self, item_id: int, on_enter: HoverHandler, on_leave: LeaveHandler) -> None:
        m = self.margin
        self.canvas.tag_bind(item_id, "<Enter>", lambda e: on_enter((e.x - m.left, e.y - m.top)))
        self.canvas.tag_bind(item_id, "<Leave>", lambda _e: on_leave())

    def bbox(self, item_id: int) -> Optional[Tuple[float, float, float, float]]:
        box = self.canvas.bbox(item_id)
        if box is None:
            return None
        m = self.margin
        x0, y0, x1, y1 = box
        return (x0 - m.left, y0 - m.top, x1 - m.left, y1 - m.top)

    def lower(self, item_id: int, below_id: int) -> None:
        self.canvas.tag_lower(item_id, below_id)


class CanvasPanel:
    def __init__(self, owner, parent: tk.Widget, *, width: int, height: int, background: str) -> None:
        self.owner = owner
        frame = ttk.Frame(parent)
        self.frame = frame
        frame.pack(side="left", fill="both", expand=True)

        owner.canvas = tk.Canvas(frame, width=width, height=height, background=background,
                                 highlightthickness=1, highlightbackground="#ccc")
        owner.canvas.configure(takefocus=1)
        owner.canvas.pack(side="top", fill="both", expand=True)
