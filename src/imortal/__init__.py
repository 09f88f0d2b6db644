"""Immortal Engine: graph IR, component registry, validation and codegen."""

__version__ = "0.1.0"

# Version of the persisted project document. Files whose major component
# differs are rejected on load.
IR_VERSION = "1.0.0"
FORMAT_NAME = "imortal"
