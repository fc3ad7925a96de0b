"""
Narrative summaries of matched section pairs.

The classifier asks a Summarizer to describe what changed between two
aligned sections. The contract is a plain string: the exact sentinel phrase
NO_CHANGE_SENTINEL means "semantically equivalent", anything else is a
narrative of the differences.

OllamaSummarizer talks to a local Ollama server over its HTTP API.
"""

import logging

import requests


logger = logging.getLogger(__name__)

# Returned by a summarizer when two sections have no substantive difference
NO_CHANGE_SENTINEL = "No significant changes detected."

# Used as the narrative when summarizing a pair fails
SUMMARY_ERROR_MARKER = "Error: Could not analyze differences between sections due to an exception."

DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "qwen2.5:7b"

SYSTEM_PROMPT = "You are an expert document comparison assistant."

COMPARE_SECTIONS_PROMPT = """Compare Section A (original) with Section B (new).
Report only substantive changes: added, removed or modified values, dates,
obligations, or wording that changes meaning. Ignore formatting and
punctuation unless the meaning changes.
If the sections say the same thing, answer exactly "{sentinel}"
Otherwise answer with a short bulleted list of the key differences, one
difference per line, each line starting with '* '.

Section A (original):
```
{section_a}
```

Section B (new):
```
{section_b}
```

Differences:
"""


class SummarizationError(Exception):
    """Raised when a summarizer cannot produce a narrative."""
    pass


class Summarizer:
    """Contract for describing the differences between two section texts."""

    def summarize(self, text_a: str, text_b: str) -> str:
        raise NotImplementedError


def build_prompt(text_a: str, text_b: str) -> str:
    """Fill the comparison prompt for one section pair."""
    return COMPARE_SECTIONS_PROMPT.format(
        sentinel=NO_CHANGE_SENTINEL,
        section_a=text_a or "",
        section_b=text_b or "",
    )


def is_no_change(narrative: str) -> bool:
    """Whether a narrative is the no-change sentinel (case-insensitive)."""
    return narrative.strip().lower() == NO_CHANGE_SENTINEL.lower()


class OllamaSummarizer(Summarizer):
    """Summarizer backed by a model served by Ollama."""

    def __init__(
        self,
        model: str = DEFAULT_OLLAMA_MODEL,
        host: str = DEFAULT_OLLAMA_HOST,
        timeout: float = 600,
        max_new_tokens: int = 512,
    ):
        self.model = model
        self.host = host.rstrip("/")
        self.timeout = timeout
        self.max_new_tokens = max_new_tokens

    def summarize(self, text_a: str, text_b: str) -> str:
        payload = {
            "model": self.model,
            "stream": False,
            "options": {"temperature": 0, "num_predict": self.max_new_tokens},
            "system": SYSTEM_PROMPT,
            "prompt": build_prompt(text_a, text_b),
        }
        try:
            r = requests.post(f"{self.host}/api/generate", json=payload, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise SummarizationError(f"Ollama request failed: {e}") from e

        if not isinstance(data, dict):
            raise SummarizationError(f"Unexpected Ollama payload: {type(data).__name__}")
        narrative = (data.get("response") or "").strip()
        if not narrative:
            raise SummarizationError("Ollama returned an empty response")
        logger.debug("Ollama narrative (%d chars) from model %s", len(narrative), self.model)
        return narrative
