"""Generator settings: declarative options resolved into a settings document.

- ConfigNode: the parsed schema tree a generator declares its options in
- Option / Choice: one tunable axis and its concrete values
- GeneratorSettings: loads options for a terrain, compiles and randomizes choices
- SettingsDocument: the flat key/value result a generator consumes
"""

from .model import GeneratorSettings, SettingsDocument, fluent_references
from .nodes import ConfigNode
from .options import Choice, Option, UiType

__all__ = [
    "Choice",
    "ConfigNode",
    "GeneratorSettings",
    "Option",
    "SettingsDocument",
    "UiType",
    "fluent_references",
]
