"""Content composition (Generator prompt → draft → Composition)."""

from inputcheck.compose.composer import ContentComposer, build_share_blocks, synthesize_follow_up
from inputcheck.compose.draft import GeneratorDraft, parse_draft
from inputcheck.compose.prompts import PromptBuilder, build_repair_prompt

__all__ = [
    "ContentComposer",
    "GeneratorDraft",
    "PromptBuilder",
    "build_repair_prompt",
    "build_share_blocks",
    "parse_draft",
    "synthesize_follow_up",
]
