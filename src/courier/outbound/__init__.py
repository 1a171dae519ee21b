"""Outbound message actions: target resolution, policy, and dispatch."""

from courier.outbound.action_runner import MessageActionRunner
from courier.outbound.action_spec import (
    ACTION_TARGET_MODE,
    MessageAction,
    action_requires_target,
)
from courier.outbound.directory_cache import (
    DIRECTORY_CACHE_TTL_MS,
    DirectoryCache,
    build_directory_cache_key,
)
from courier.outbound.target_resolver import TargetResolver

__all__ = [
    "ACTION_TARGET_MODE",
    "DIRECTORY_CACHE_TTL_MS",
    "DirectoryCache",
    "MessageAction",
    "MessageActionRunner",
    "TargetResolver",
    "action_requires_target",
    "build_directory_cache_key",
]
