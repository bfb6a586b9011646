"""Helpers for turning raw AI responses into structured resume data."""

import json
import re
from typing import Any, Dict, List

_BULLET_MARKER = re.compile(r"^[-•*→▪▸◦‣⁃]\s*")
_NUMBERING = re.compile(r"^\d+[.)]\s*")
_SENTENCE = re.compile(r"[^.!?]+[.!?]+")
_TRAILING_CONJUNCTION = re.compile(r"\s+(and|or)\s*$", re.IGNORECASE)


def extract_json(text: str) -> Dict[str, Any]:
    """Extract a JSON object from an AI response that may include fences or preamble.

    Raises:
        ValueError: If no JSON object can be extracted.
    """
    if not text:
        raise ValueError("Empty response text")
    text = text.strip()

    candidates = [text]
    for pattern in (r"```json\s*([\s\S]*?)\s*```", r"```\s*([\s\S]*?)\s*```"):
        match = re.search(pattern, text)
        if match:
            candidates.append(match.group(1))
    match = re.search(r"\{[\s\S]*\}", text)
    if match:
        candidates.append(match.group())

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise ValueError(
        f"Could not extract a JSON object from response. "
        f"Raw text (first 500 chars): {text[:500]}"
    )


def _format_bullet(text: str) -> str:
    cleaned = _TRAILING_CONJUNCTION.sub("", text.strip())
    cleaned = cleaned.replace("“", '"').replace("”", '"')
    cleaned = cleaned.replace("‘", "'").replace("’", "'")
    if cleaned[:1].islower():
        cleaned = cleaned[0].upper() + cleaned[1:]
    if cleaned and cleaned[-1] not in ".!?":
        cleaned += "."
    return cleaned


def convert_text_to_bullets(text: str) -> List[str]:
    """Split a paragraph-style description into bullet points.

    Tries newline, pipe, sentence and semicolon separators in that order and
    keeps the first one that yields more than one bullet.
    """
    if not text or not isinstance(text, str):
        return []

    if "\n" in text:
        lines = [line.strip() for line in re.split(r"\n+", text)]
        bullets = [
            _format_bullet(_NUMBERING.sub("", _BULLET_MARKER.sub("", line)))
            for line in lines
            if len(line) > 5
        ]
        if len(bullets) > 1:
            return bullets

    if " | " in text and len(text.split(" | ")) > 2:
        bullets = [_format_bullet(p) for p in text.split(" | ") if len(p.strip()) > 5]
        if len(bullets) > 1:
            return bullets

    sentences = _SENTENCE.findall(text)
    if len(sentences) > 1:
        bullets = [
            _format_bullet(s)
            for s in (s.strip() for s in sentences)
            if len(s.split()) > 3 or len(s) > 20
        ]
        if len(bullets) > 1:
            return bullets

    if ";" in text and len(text.split(";")) > 2:
        bullets = [_format_bullet(p) for p in text.split(";") if len(p.strip()) > 5]
        if len(bullets) > 1:
            return bullets

    if len(text) > 20:
        return [_format_bullet(text)]
    return [text]


def normalize_parsed_resume(data: Dict[str, Any]) -> Dict[str, Any]:
    """Make description fields consistent.

    Experience descriptions are always lists. Long project and volunteer
    descriptions become lists only when they split into several bullets.
    """
    for exp in data.get("experience") or []:
        if isinstance(exp, dict) and isinstance(exp.get("description"), str):
            exp["description"] = convert_text_to_bullets(exp["description"])

    for section in ("projects", "volunteer"):
        for entry in data.get(section) or []:
            description = entry.get("description") if isinstance(entry, dict) else None
            if isinstance(description, str) and len(description) > 100:
                bullets = convert_text_to_bullets(description)
                if len(bullets) > 1:
                    entry["description"] = bullets
    return data
