"""Upstream model providers."""

from .openai_responses import OpenAIResponsesUpstream, classify_event

__all__ = ["OpenAIResponsesUpstream", "classify_event"]
