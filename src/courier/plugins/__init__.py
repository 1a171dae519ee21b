"""Channel plugins for courier.

A channel plugin implements ``courier_channel_adapter`` and returns an
adapter for one chat platform. ``plugins.adapters.PluginOutboundDeps``
turns the collected adapters into the deps the action runner dispatches
through.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import pluggy

from courier.config import get_settings
from courier.logger import logger
from courier.plugins.hookspecs import CourierSpec

if TYPE_CHECKING:
    from courier.config import Settings

__all__ = [
    "collect_hook_results",
    "get_plugin_manager",
]

# (module, class, key under [plugins.<key>])
_BUILTIN_PLUGIN_SPECS: list[tuple[str, str, str]] = [
    ("courier.plugins.console", "ConsoleChannelPlugin", "console"),
]


def _register_builtins(pm: pluggy.PluginManager, settings: Settings) -> None:
    for module_path, class_name, key in _BUILTIN_PLUGIN_SPECS:
        cfg = settings.plugins.get(key)
        if cfg is not None and not cfg.enabled:
            logger.info("Channel plugin disabled", plugin=key)
            continue
        try:
            plugin_cls = getattr(importlib.import_module(module_path), class_name)
            pm.register(plugin_cls(), name=f"builtin-{key}")
        except ImportError:
            logger.debug("Channel plugin unavailable", plugin=key)
        except Exception:
            logger.exception("Channel plugin failed to load", plugin=key)
        else:
            logger.info("Channel plugin registered", plugin=key)


def _drop_class_objects(pm: pluggy.PluginManager) -> None:
    # Hooks on a bare class have no bound self.
    for plugin in list(pm.get_plugins()):
        if isinstance(plugin, type):
            name = pm.get_name(plugin) or plugin.__name__
            pm.unregister(plugin=plugin)
            logger.warning("Dropped channel plugin registered as a class", plugin=name)


def get_plugin_manager() -> pluggy.PluginManager:
    """Plugin manager with the built-in channels and any ``courier`` entry points."""
    pm = pluggy.PluginManager("courier")
    pm.add_hookspecs(CourierSpec)

    _register_builtins(pm, get_settings())

    external = pm.load_setuptools_entrypoints("courier")
    if external:
        logger.info("Loaded channel plugins from entry points", count=external)
    _drop_class_objects(pm)

    logger.debug("Channel plugins ready", plugins=[pm.get_name(p) for p in pm.get_plugins()])
    return pm


def collect_hook_results(
    hook_attr: str,
    validator: Callable[[Any], bool],
    label: str,
    *,
    pm: pluggy.PluginManager | None = None,
) -> list[Any]:
    """Non-``None`` results of ``pm.hook.<hook_attr>()`` that pass *validator*.

    A hook that raises yields an empty list.
    """
    if pm is None:
        pm = get_plugin_manager()
    hook_caller = getattr(pm.hook, hook_attr)
    try:
        provided = hook_caller()
    except Exception:
        logger.exception("Channel plugin hook failed", hook=hook_attr, label=label)
        return []

    accepted: list[Any] = []
    for item in provided:
        if item is None:
            continue
        if validator(item):
            accepted.append(item)
        else:
            logger.warning("Skipping invalid plugin result", label=label, type=type(item).__name__)
    return accepted
