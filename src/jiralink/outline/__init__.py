"""Outline document model and host adapters."""

from .host import HostMessage, JsonOutlineHost, MemoryOutlineHost, RegisteredCommand
from .model import Block, CommandHandler, OutlineHost

__all__ = [
    "Block",
    "CommandHandler",
    "HostMessage",
    "JsonOutlineHost",
    "MemoryOutlineHost",
    "OutlineHost",
    "RegisteredCommand",
]
