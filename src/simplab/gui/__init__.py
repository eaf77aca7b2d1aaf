"""GUI package for SimpLab."""

from simplab.gui.render import BeakerDrawing, beaker_drawing

__all__ = ["BeakerDrawing", "beaker_drawing"]
