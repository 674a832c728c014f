"""Dialogue orchestration over the text understanding and Google adapters."""

from __future__ import annotations

from .dialogue import DialogueOrchestrator, derive_title

__all__ = ["DialogueOrchestrator", "derive_title"]
