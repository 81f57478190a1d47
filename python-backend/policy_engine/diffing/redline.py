"""Word-level tracked changes (redlines) with structural positions.

Unlike :mod:`policy_engine.diffing.lcs`, this walk does not look for a
minimal edit script. It compares both token streams in lockstep, which keeps
position bookkeeping simple and predictable for author-attributed changes.

Positions are ``{paragraph, sentence, word}`` addresses into the base text.
:func:`find_text_position` turns an address back into a character offset by
re-splitting the text on every call. The split is naive (sentence breaks on
``[.!?]+``, word breaks on whitespace), so offsets drift for text with
leading whitespace inside sentences, multi-character terminators or markup
containing punctuation.

The position cursor moves over equal words and, along the current sentence,
over inserted words. Deleted words never move it, so a sentence break inside
a deleted run is not counted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Literal, Optional, Sequence

import structlog
from jinja2 import Environment
from markupsafe import Markup, escape

from ..config_loader import get_setting
from ..models import DiffOptions, RedlineChange, RedlinePosition

logger = structlog.get_logger(__name__)

PARAGRAPH_BREAK = "\n\n"
SENTENCE_TERMINATORS = (".", "!", "?")

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WORD_SPLIT = re.compile(r"\s+")

WordOperationType = Literal["equal", "insert", "delete"]


@dataclass
class WordRun:
    type: WordOperationType
    words: List[str] = field(default_factory=list)


def tokenize_text(text: str) -> List[str]:
    """Split text into words, keeping paragraph breaks as their own tokens."""

    tokens: List[str] = []
    for paragraph in _PARAGRAPH_SPLIT.split(text or ""):
        words = paragraph.split()
        if not words:
            continue
        if tokens:
            tokens.append(PARAGRAPH_BREAK)
        tokens.extend(words)
    return tokens


def simple_word_diff(
    words_a: Sequence[str], words_b: Sequence[str], options: Optional[DiffOptions] = None
) -> List[WordRun]:
    """Single lockstep pass over both token streams.

    A stretch of mismatched positions becomes one delete run followed by one
    insert run. Whatever is left of the longer stream becomes a trailing
    delete or insert run.
    """

    ignore_case = bool(options and options.ignore_case)
    runs: List[WordRun] = []
    deleted: List[str] = []
    inserted: List[str] = []

    def push(run_type: WordOperationType, words: List[str]) -> None:
        if not words:
            return
        if runs and runs[-1].type == run_type:
            runs[-1].words.extend(words)
        else:
            runs.append(WordRun(run_type, list(words)))

    def flush() -> None:
        push("delete", deleted)
        push("insert", inserted)
        deleted.clear()
        inserted.clear()

    for index in range(max(len(words_a), len(words_b))):
        word_a = words_a[index] if index < len(words_a) else None
        word_b = words_b[index] if index < len(words_b) else None
        if word_a is not None and word_b is not None:
            same = word_a.lower() == word_b.lower() if ignore_case else word_a == word_b
            if same:
                flush()
                push("equal", [word_a])
                continue
        if word_a is not None:
            deleted.append(word_a)
        if word_b is not None:
            inserted.append(word_b)
    flush()
    return runs


def _comment(run: WordRun) -> str:
    label = "Addition" if run.type == "insert" else "Deletion"
    if len(run.words) == 1:
        return f'{label}: "{run.words[0]}"'
    return f"{label} of {len(run.words)} words"


def _timestamp() -> str:
    """UTC time with millisecond precision and a ``Z`` suffix."""

    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def find_text_position(text: str, position: RedlinePosition) -> int:
    """Character offset of a structural position, or -1 when out of range."""

    paragraphs = _PARAGRAPH_SPLIT.split(text)
    if position.paragraph >= len(paragraphs):
        return -1
    sentences = _SENTENCE_SPLIT.split(paragraphs[position.paragraph])
    if position.sentence >= len(sentences):
        return -1
    words = _WORD_SPLIT.split(sentences[position.sentence])
    if position.word >= len(words):
        return -1

    offset = sum(len(paragraph) + 2 for paragraph in paragraphs[: position.paragraph])
    offset += sum(len(sentence) + 1 for sentence in sentences[: position.sentence])
    offset += sum(len(word) + 1 for word in words[: position.word])
    return offset


def _apply_order(change: RedlineChange) -> tuple[int, int, int, int]:
    # On equal positions inserts sort before deletes; the reverse walk then
    # removes the old words before the new ones are placed.
    return (*change.position.sort_key(), 1 if change.type == "delete" else 0)


_PAGE = Environment(autoescape=True).from_string(
    """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <style>
        body { font-family: 'Times New Roman', serif; line-height: 1.6; margin: 2in; color: #333; }
        h1 { text-align: center; margin-bottom: 1in; }
        .redline-insert { background-color: #e8f5e9; color: #2e7d32; text-decoration: none; }
        .redline-delete { background-color: #ffebee; color: #d32f2f; text-decoration: line-through; }
        .redline-insert:hover, .redline-delete:hover { box-shadow: 0 0 4px rgba(0,0,0,0.3); cursor: help; }
        .metadata { background: #f5f5f5; padding: 20px; margin-bottom: 30px; border-left: 4px solid #2196f3; }
    </style>
    <script>
        document.addEventListener('DOMContentLoaded', function() {
            document.querySelectorAll('.redline-insert, .redline-delete').forEach(function(el) {
                var comment = el.getAttribute('data-comment');
                if (comment) {
                    el.title = el.getAttribute('data-author') + ': ' + comment;
                }
            });
        });
    </script>
</head>
<body>
    <h1>{{ title }}</h1>

    <div class="metadata">
        <strong>Redline Guide:</strong><br>
        <span class="redline-insert">Green text</span> = Additions<br>
        <span class="redline-delete">Red strikethrough</span> = Deletions<br>
        Hover over changes to see comments and author information.
    </div>

    {{ body }}

    <div style="margin-top: 3em; padding-top: 1em; border-top: 1px solid #ccc; font-size: 12px; color: #666;">
        Generated by Policy Engine &bull; {{ generated_at }}
    </div>
</body>
</html>
"""
)


_MARKUP = {
    "insert": Markup(
        '<ins class="redline-insert" data-author="{}" data-comment="{}">{}</ins>'
    ),
    "delete": Markup(
        '<del class="redline-delete" data-author="{}" data-comment="{}">{}</del>'
    ),
}


class PositionalWordDiffer:
    """Produces and applies author-attributed word-level tracked changes."""

    def __init__(self, author: Optional[str] = None) -> None:
        self.author = author or str(get_setting("diffing", "redline_author", "Policy Engine"))

    def generate_redline_changes(
        self,
        base_text: str,
        new_text: str,
        author: Optional[str] = None,
        options: Optional[DiffOptions] = None,
    ) -> List[RedlineChange]:
        author = author or self.author
        runs = simple_word_diff(tokenize_text(base_text), tokenize_text(new_text), options)

        changes: List[RedlineChange] = []
        paragraph = sentence = word = 0

        def advance(token: str) -> None:
            nonlocal paragraph, sentence, word
            if token.endswith(SENTENCE_TERMINATORS):
                sentence += 1
                word = 0
            elif token == PARAGRAPH_BREAK:
                paragraph += 1
                sentence = 0
                word = 0
            else:
                word += 1

        for run in runs:
            if run.type == "equal":
                for token in run.words:
                    advance(token)
                continue

            changes.append(
                RedlineChange(
                    type=run.type,
                    text=" ".join(run.words),
                    position=RedlinePosition(paragraph=paragraph, sentence=sentence, word=word),
                    author=author,
                    timestamp=_timestamp(),
                    comment=_comment(run),
                )
            )
            # Only inserted words move the cursor.
            if run.type == "insert":
                word += len(run.words)

        logger.debug("redline changes generated", count=len(changes), author=author)
        return changes

    def apply_redline_changes(self, base_text: str, changes: Sequence[RedlineChange]) -> str:
        """Apply inserts and deletes to the base text, last position first."""

        result = base_text
        for change in sorted(changes, key=_apply_order, reverse=True):
            offset = find_text_position(result, change.position)
            if offset < 0:
                logger.debug("redline position out of range", change_id=change.id)
                continue
            if change.type == "insert":
                result = result[:offset] + change.text + result[offset:]
            elif change.type == "delete":
                result = result[:offset] + result[offset + len(change.text) :]
        return result

    def render_redline_html(
        self,
        base_text: str,
        changes: Sequence[RedlineChange],
        title: Optional[str] = None,
    ) -> str:
        """Render the base text with inserts and deletes marked up as HTML."""

        title = title or str(get_setting("diffing", "redline_title", "Policy Redlines"))

        # Offsets are taken on the raw text; on a shared offset inserts come
        # before deletes.
        located = []
        for index, change in enumerate(changes):
            if change.type not in _MARKUP:
                continue
            offset = find_text_position(base_text, change.position)
            if offset < 0:
                continue
            located.append((offset, 1 if change.type == "delete" else 0, index, change))
        located.sort(key=lambda item: item[:3])

        pieces: List[str] = []
        cursor = 0
        for offset, _, _, change in located:
            offset = max(offset, cursor)
            pieces.append(escape(base_text[cursor:offset]))
            pieces.append(
                _MARKUP[change.type].format(change.author, change.comment or "", change.text)
            )
            cursor = offset
            if change.type == "delete":
                cursor = min(len(base_text), offset + len(change.text))
        pieces.append(escape(base_text[cursor:]))

        html = "".join(pieces)
        body = Markup("<p>" + html.replace(PARAGRAPH_BREAK, "</p><p>") + "</p>")
        return _PAGE.render(title=title, body=body, generated_at=_timestamp())
