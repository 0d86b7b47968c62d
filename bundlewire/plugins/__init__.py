from .base import Plugin
from .copy_files import CopyPlugin, CopyTarget
from .externals import ExternalsPlugin
from .inline import InlinePlugin
from .replace import ReplacePlugin, import_meta_plugin
from .typescript import TypeScriptPlugin

__all__ = [
    "Plugin",
    "CopyPlugin",
    "CopyTarget",
    "ExternalsPlugin",
    "InlinePlugin",
    "ReplacePlugin",
    "TypeScriptPlugin",
    "import_meta_plugin",
]
