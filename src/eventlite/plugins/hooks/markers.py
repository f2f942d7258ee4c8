"""Pluggy markers for the eventlite hook namespace."""

import pluggy

HOOK_NAMESPACE = "eventlite"

hook_spec = pluggy.HookspecMarker(HOOK_NAMESPACE)
"""Marker for hook specifications, only used by eventlite itself."""

hook_impl = pluggy.HookimplMarker(HOOK_NAMESPACE)
"""Marker for hook implementations provided by plugins."""
