"""API routers."""

from collab.api import chat, milestones, notifications, proposals, reputation

__all__ = ["chat", "milestones", "notifications", "proposals", "reputation"]
