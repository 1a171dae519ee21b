"""Message actions and their target requirement.

``ACTION_TARGET_MODE`` is the single place that decides whether an action
needs a destination and which parameter carries it:

- ``"to"``        → a user/group/channel destination in ``params["to"]``
- ``"channelId"`` → a channel/group id in ``params["channelId"]``
- ``"none"``      → the action takes no destination

Handlers never re-derive this; the orchestrator consults it once, before
any resolution work.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType

from courier.errors import ValidationError
from courier.types import TargetMode


class MessageAction(StrEnum):
    SEND = "send"
    BROADCAST = "broadcast"
    POLL = "poll"
    REACT = "react"
    REACTIONS = "reactions"
    READ = "read"
    EDIT = "edit"
    DELETE = "delete"
    PIN = "pin"
    UNPIN = "unpin"
    LIST_PINS = "list-pins"
    PERMISSIONS = "permissions"
    THREAD_CREATE = "thread-create"
    THREAD_LIST = "thread-list"
    THREAD_REPLY = "thread-reply"
    SEARCH = "search"
    STICKER = "sticker"
    MEMBER_INFO = "member-info"
    ROLE_INFO = "role-info"
    EMOJI_LIST = "emoji-list"
    EMOJI_UPLOAD = "emoji-upload"
    STICKER_UPLOAD = "sticker-upload"
    ROLE_ADD = "role-add"
    ROLE_REMOVE = "role-remove"
    CHANNEL_INFO = "channel-info"
    CHANNEL_LIST = "channel-list"
    CHANNEL_CREATE = "channel-create"
    CHANNEL_EDIT = "channel-edit"
    CHANNEL_DELETE = "channel-delete"
    CHANNEL_MOVE = "channel-move"
    CATEGORY_CREATE = "category-create"
    CATEGORY_EDIT = "category-edit"
    CATEGORY_DELETE = "category-delete"
    VOICE_STATUS = "voice-status"
    EVENT_LIST = "event-list"
    EVENT_CREATE = "event-create"
    TIMEOUT = "timeout"
    KICK = "kick"
    BAN = "ban"


ACTION_TARGET_MODE: Mapping[MessageAction, TargetMode] = MappingProxyType(
    {
        MessageAction.SEND: "to",
        MessageAction.BROADCAST: "none",
        MessageAction.POLL: "to",
        MessageAction.REACT: "to",
        MessageAction.REACTIONS: "to",
        MessageAction.READ: "to",
        MessageAction.EDIT: "to",
        MessageAction.DELETE: "to",
        MessageAction.PIN: "to",
        MessageAction.UNPIN: "to",
        MessageAction.LIST_PINS: "to",
        MessageAction.PERMISSIONS: "to",
        MessageAction.THREAD_CREATE: "to",
        MessageAction.THREAD_LIST: "none",
        MessageAction.THREAD_REPLY: "to",
        MessageAction.SEARCH: "none",
        MessageAction.STICKER: "to",
        MessageAction.MEMBER_INFO: "none",
        MessageAction.ROLE_INFO: "none",
        MessageAction.EMOJI_LIST: "none",
        MessageAction.EMOJI_UPLOAD: "none",
        MessageAction.STICKER_UPLOAD: "none",
        MessageAction.ROLE_ADD: "none",
        MessageAction.ROLE_REMOVE: "none",
        MessageAction.CHANNEL_INFO: "channelId",
        MessageAction.CHANNEL_LIST: "none",
        MessageAction.CHANNEL_CREATE: "none",
        MessageAction.CHANNEL_EDIT: "channelId",
        MessageAction.CHANNEL_DELETE: "channelId",
        MessageAction.CHANNEL_MOVE: "channelId",
        MessageAction.CATEGORY_CREATE: "none",
        MessageAction.CATEGORY_EDIT: "none",
        MessageAction.CATEGORY_DELETE: "none",
        MessageAction.VOICE_STATUS: "none",
        MessageAction.EVENT_LIST: "none",
        MessageAction.EVENT_CREATE: "none",
        MessageAction.TIMEOUT: "none",
        MessageAction.KICK: "none",
        MessageAction.BAN: "none",
    }
)


def parse_action(name: str | MessageAction) -> MessageAction:
    """Coerce a raw action name into a ``MessageAction``."""
    try:
        return MessageAction(str(name).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown message action: {name}") from None


def action_target_mode(action: str | MessageAction) -> TargetMode:
    return ACTION_TARGET_MODE[parse_action(action)]


def action_requires_target(action: str | MessageAction) -> bool:
    return action_target_mode(action) != "none"
