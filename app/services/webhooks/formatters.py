"""Platform-specific webhook payload shapes.

Destinations are recognised by case-insensitive substrings of their URL and
checked in the order of ``PLATFORM_FORMATTERS``; anything unrecognised gets
the ``WebhookPayload`` itself, unmodified.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable

from .types import WebhookPayload

GENERIC_PLATFORM = "generic"
NOTION_DATABASE_PLACEHOLDER = "YOUR_DATABASE_ID"
JIRA_PROJECT_KEY = "FEEDBACK"

_NOTION_DATABASE_ID = re.compile(r"([a-f0-9]{32})")

_SENTIMENT_EMOJI = {
    "positive": "😊",
    "neutral": "😐",
    "negative": "😞",
}
_DEFAULT_EMOJI = "📢"

_PRIORITY_COLOR = {
    "high": "#ff0000",
    "medium": "#ffa500",
    "low": "#00ff00",
}
_DEFAULT_COLOR = "#808080"


def _mrkdwn(text: str) -> dict[str, str]:
    return {"type": "mrkdwn", "text": text}


def _text_node(text: str, **marks: Any) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "text", "text": text}
    if marks.get("strong"):
        node["marks"] = [{"type": "strong"}]
    elif marks.get("href"):
        node["marks"] = [{"type": "link", "attrs": {"href": marks["href"]}}]
    return node


def _paragraph(*nodes: dict[str, Any]) -> dict[str, Any]:
    return {"type": "paragraph", "content": list(nodes)}


def _rich_text(content: str) -> list[dict[str, Any]]:
    return [{"text": {"content": content}}]


def format_slack_payload(feedback: WebhookPayload) -> dict[str, Any]:
    """Block Kit message with a priority-coloured attachment linking the audio."""

    emoji = _SENTIMENT_EMOJI.get(feedback.sentiment, _DEFAULT_EMOJI)
    color = _PRIORITY_COLOR.get(feedback.priority, _DEFAULT_COLOR)

    return {
        "blocks": [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"{emoji} New Feedback: {feedback.category}",
                },
            },
            {
                "type": "section",
                "fields": [
                    _mrkdwn(f"*Summary:*\n{feedback.summary}"),
                    _mrkdwn(f"*Sentiment:* {feedback.sentiment}\n*Priority:* {feedback.priority}"),
                ],
            },
            {
                "type": "section",
                "text": _mrkdwn(f"*Transcript:*\n> {feedback.transcript}"),
            },
            {
                "type": "context",
                "elements": [_mrkdwn(f"ID: {feedback.id} | {feedback.timestamp}")],
            },
        ],
        "attachments": [
            {
                "color": color,
                "blocks": [
                    {
                        "type": "section",
                        "text": _mrkdwn(f"<{feedback.audio_url}|🎧 Listen to audio>"),
                    }
                ],
            }
        ],
    }


def format_jira_payload(feedback: WebhookPayload) -> dict[str, Any]:
    """Issue-creation body with an Atlassian Document Format description."""

    return {
        "fields": {
            "project": {"key": JIRA_PROJECT_KEY},
            "summary": feedback.summary,
            "description": {
                "type": "doc",
                "version": 1,
                "content": [
                    _paragraph(_text_node("Transcript:", strong=True)),
                    _paragraph(_text_node(feedback.transcript)),
                    _paragraph(
                        _text_node(
                            f"Sentiment: {feedback.sentiment} | Priority: {feedback.priority}"
                        )
                    ),
                    _paragraph(
                        _text_node("Audio: "),
                        _text_node(feedback.audio_url, href=feedback.audio_url),
                    ),
                ],
            },
            "issuetype": {"name": "Bug" if feedback.category == "bug" else "Task"},
            "priority": {"name": feedback.priority[:1].upper() + feedback.priority[1:]},
        }
    }


def format_github_payload(feedback: WebhookPayload) -> dict[str, Any]:
    """Issue-creation body with markdown and labels."""

    body = (
        f"## Transcript\n\n{feedback.transcript}\n\n---\n\n"
        f"**Sentiment:** {feedback.sentiment}\n"
        f"**Priority:** {feedback.priority}\n"
        f"**Audio:** [Listen]({feedback.audio_url})\n\n"
        f"*Feedback ID: {feedback.id}*"
    )
    return {
        "title": feedback.summary,
        "body": body,
        "labels": [feedback.category, feedback.sentiment, f"priority-{feedback.priority}"],
    }


def notion_database_id(webhook_url: str) -> str:
    match = _NOTION_DATABASE_ID.search(webhook_url.lower())
    return match.group(1) if match else NOTION_DATABASE_PLACEHOLDER


def format_notion_payload(feedback: WebhookPayload, database_id: str) -> dict[str, Any]:
    """Page-creation body for a feedback database."""

    return {
        "parent": {"database_id": database_id},
        "properties": {
            "Title": {"title": _rich_text(feedback.summary)},
            "Category": {"select": {"name": feedback.category}},
            "Sentiment": {"select": {"name": feedback.sentiment}},
            "Priority": {"select": {"name": feedback.priority}},
            "Transcript": {"rich_text": _rich_text(feedback.transcript)},
            "Audio URL": {"url": feedback.audio_url},
            "Feedback ID": {"rich_text": _rich_text(feedback.id)},
        },
    }


Renderer = Callable[[WebhookPayload, str], Any]


@dataclass(frozen=True)
class PlatformFormatter:
    """One row of the dispatch table: URL needles plus the renderer to use."""

    name: str
    needles: tuple[str, ...]
    render: Renderer

    def matches(self, lowered_url: str) -> bool:
        return any(needle in lowered_url for needle in self.needles)


PLATFORM_FORMATTERS: tuple[PlatformFormatter, ...] = (
    PlatformFormatter("slack", ("slack.com",), lambda p, _url: format_slack_payload(p)),
    PlatformFormatter("jira", ("atlassian.net", "jira"), lambda p, _url: format_jira_payload(p)),
    PlatformFormatter(
        "github",
        ("github.com", "api.github.com"),
        lambda p, _url: format_github_payload(p),
    ),
    PlatformFormatter(
        "notion",
        ("notion.com", "notion.so"),
        lambda p, url: format_notion_payload(p, notion_database_id(url)),
    ),
)

GENERIC_FORMATTER = PlatformFormatter(GENERIC_PLATFORM, (), lambda p, _url: p)


def resolve_formatter(webhook_url: str) -> PlatformFormatter:
    lowered = (webhook_url or "").lower()
    for formatter in PLATFORM_FORMATTERS:
        if formatter.matches(lowered):
            return formatter
    return GENERIC_FORMATTER


def detect_platform(webhook_url: str) -> str:
    return resolve_formatter(webhook_url).name


def format_payload(feedback: WebhookPayload, webhook_url: str) -> Any:
    """Shape ``feedback`` for the destination behind ``webhook_url``."""

    return resolve_formatter(webhook_url).render(feedback, webhook_url)


__all__ = [
    "GENERIC_PLATFORM",
    "NOTION_DATABASE_PLACEHOLDER",
    "PLATFORM_FORMATTERS",
    "PlatformFormatter",
    "detect_platform",
    "format_github_payload",
    "format_jira_payload",
    "format_notion_payload",
    "format_payload",
    "format_slack_payload",
    "notion_database_id",
    "resolve_formatter",
]
