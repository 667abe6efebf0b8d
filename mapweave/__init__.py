"""Configuration-driven procedural map layout.

Generators declare their options as a settings schema, callers resolve those
options into a flat settings document, and the generator paints a grid from
it with MultiBrushes.
"""

__version__ = "0.1.0"
