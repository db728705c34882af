"""Prompt templates and loaders for the CashPulse advisor."""

from .base import PromptTemplate, available_prompts, get_prompt_text, load_prompt, render_prompt

__all__ = ["PromptTemplate", "available_prompts", "get_prompt_text", "load_prompt", "render_prompt"]
