"""Extension layer: plugin system via pluggy.

Discovery: ``gqlorm.plugins`` entry points plus ``.gqlorm/plugins/*.py``.
Plugin failures are warnings, never errors.
"""

from gqlorm.plugins.hookspecs import hookimpl
from gqlorm.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
