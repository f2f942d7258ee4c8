from .markers import hook_impl
from .markers import hook_spec

__all__ = [
    "hook_impl",
    "hook_spec",
]
