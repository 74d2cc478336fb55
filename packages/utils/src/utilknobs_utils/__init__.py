"""Parameter validation and generic value access for utilknobs packages."""

# Import all utility modules for easy access
from utilknobs_utils import (
    collection_utils,
    messages,
    params_checker,
    property_access,
    reflection_utils,
    scalar_utils,
    string_utils,
    type_spec,
    type_utils,
)

__version__ = "1.0.0"

__all__ = [
    "collection_utils",
    "messages",
    "params_checker",
    "property_access",
    "reflection_utils",
    "scalar_utils",
    "string_utils",
    "type_spec",
    "type_utils",
]
