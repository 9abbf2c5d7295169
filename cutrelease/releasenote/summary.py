"""Release summaries and the release pull request text."""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import openai

from ..errors import SummaryError
from ..hosting.models import ChangeRequest


logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.7

RELEASE_TITLE_TEMPLATE = "Release: Version {version}"
RELEASE_BODY_HEADER = "# Release Summary"

PROMPT_TEMPLATE = """Create a release summary for the following pull requests. The summary should have two parts:

1. Group the changes by type (e.g., Features, Bug Fixes, Improvements) and list them down in bullet points.
  1.1 Make each type an h3 header with a corresponding emoji prefix.
  1.2 For each type, make each bullet point concise and easy to read and understand for non-tech people.
  1.3 Don't link the bullet points to a pull request.
2. The last section should be a list of pull requests included in the release. Format: "#<number> - <title> by [@<author>](<authorUrl>) (<date>)".

Pull Requests to summarize:
{details}

Keep the summary concise, clear, and focused on the user impact. Use professional but easy-to-understand language."""


def format_date(change: ChangeRequest) -> str:
    """Creation date, in local time, in the active locale's short date form."""
    return change.created_at.astimezone().strftime('%x')


def compose_fallback_summary(changes: Sequence[ChangeRequest]) -> str:
    """List the selected changes one per line, in selection order."""
    return '\n'.join(
        f"#{c.number} - {c.title} (by [@{c.author}]({c.author_url}) on {format_date(c)})"
        for c in changes
    )


def change_details(changes: Sequence[ChangeRequest]) -> List[Dict[str, Any]]:
    return [
        {
            'number': c.number,
            'title': c.title,
            'author': c.author,
            'authorUrl': c.author_url,
            'date': format_date(c),
            'url': c.url,
        }
        for c in changes
    ]


def build_prompt(changes: Sequence[ChangeRequest]) -> str:
    return PROMPT_TEMPLATE.format(details=json.dumps(change_details(changes), indent=2))


def create_openai_client(api_key: str, base_url: Optional[str] = None) -> "openai.OpenAI":
    """Build the OpenAI client, optionally against a compatible endpoint."""
    return openai.OpenAI(api_key=api_key, base_url=base_url or None)


class ReleaseSummarizer:
    """Drafts release notes with an OpenAI chat model."""

    def __init__(self, client, model: str = DEFAULT_MODEL,
                 temperature: float = DEFAULT_TEMPERATURE):
        """Initialize summarizer.

        Args:
            client: ``openai.OpenAI`` instance (or anything with the same
                ``chat.completions.create`` call)
            model: Chat model name
            temperature: Sampling temperature
        """
        self.client = client
        self.model = model or DEFAULT_MODEL
        self.temperature = temperature

    def summarize(self, changes: Sequence[ChangeRequest]) -> str:
        """Generate markdown release notes for the selected changes.

        Raises:
            SummaryError: The API call failed or returned no message content
        """
        logger.info(f"Requesting summary of {len(changes)} pull requests from {self.model}")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{'role': 'user', 'content': build_prompt(changes)}],
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise SummaryError(str(e)) from e

        choices = getattr(response, 'choices', None) or []
        content = None
        if choices and getattr(choices[0], 'message', None) is not None:
            content = choices[0].message.content
        if not content:
            raise SummaryError(
                "Invalid API response structure. Expected response.choices[0].message.content"
            )
        return content


def build_release_title(version: str) -> str:
    return RELEASE_TITLE_TEMPLATE.format(version=version)


def build_release_body(summary: str) -> str:
    return f"{RELEASE_BODY_HEADER}\n\n{summary}"
