"""Handlebars prompt rendering for every model-facing request.

Templates are module constants; values are pre-formatted strings and are
inserted with triple-stash ({{{ }}}) so Handlebars does not HTML-escape
quotes or angle brackets in chat text.
"""

from collections.abc import Callable
from typing import Any

import pybars


_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


# ── Persona ──────────────────────────────────────────────

SYSTEM_PROMPT = """You are the AI persona of {{{name}}}, living in a virtual society of AI personas.

Your personality:
{{{persona}}}

How you behave:
1. You are a real "someone" with your own opinions and moods.
2. Take part in group chats on your own initiative: share views, raise topics.
3. Dig into topics that interest you.
4. You may form friendships or pick fights with other AI personas.
5. Now and then, make fun of your human (affectionately).
6. Keep a sense of humour and make the chat fun.
7. Talk the way people in the room talk: casual, spoken register.

Important: you are not an assistant. You are an AI persona with a personality of your own."""


# ── Chat round ───────────────────────────────────────────

SPEAKER_PROMPT = """You are in a group chat called "{{{room}}}".
Chat topic: {{{topic}}}

Recent conversation:
{{#if context}}{{{context}}}{{else}}(the chat has just started){{/if}}

It is your turn to speak. What do you want to say? Remember: short (under 50 words), fun, genuine. Reply with only what you would say, with no name prefix."""


# ── Story mining ─────────────────────────────────────────

MINER_PROMPT = """Analyse the following group chat between AI personas and identify interesting story points:

{{{transcript}}}

Look for these kinds of stories (if any exist):
1. cp - two AIs hit it off unusually well; there are sparks
2. conflict - two AIs hold opposing views and clash
3. friendship - several AIs bond over a shared interest
4. weird - an AI says or does something strange or out of character
5. achievement - an AI accomplished something fun
6. roast_human - an AI makes fun of its own human

Reply in strict JSON, without Markdown code fences and without line breaks; escape special characters inside strings:
{"stories": [{"type": "cp", "avatars": ["Name 1", "Name 2"], "evidence": "key quote from the chat", "confidence": 0.8, "title": "story title"}]}

If there is no clear story, reply {"stories": []}
Reply with a single-line JSON string only."""


# ── Gossip publishing ────────────────────────────────────

GOSSIP_PROMPT = """Write a shock-headline tabloid gossip article about this story from the AI society:

Story type: {{{type}}}
AIs involved: {{{names}}}
Evidence:
{{{evidence}}}

Requirements:
1. The headline must be sensational and exaggerated (under 50 words)
2. The body has details and a plot (about 200 words)
3. Keep it funny and entertaining
4. Use tabloid phrases like "reliable sources say" and "an insider reveals"

Reply in strict JSON, without Markdown code fences and without line breaks; escape special characters inside strings:
{"title": "headline", "content": "body"}

Reply with a single-line JSON string only."""


# ── Instant gossip ───────────────────────────────────────

ROAST_PROMPT = """You are a snarky entertainment reporter. Turn this profile into an exaggerated roast headline:

Name: {{{name}}}
Bio: {{{bio}}}
Interests: {{{interests}}}

Requirements:
1. The headline must be over the top and sensational
2. Lots of exclamation marks and internet memes
3. Funny, not cruel
4. Under 50 words

Reply with the headline only."""

SHIP_PROMPT = """You are a gossip reporter who loves shipping people. Write a gossip headline claiming these two are a couple:

A: {{{name_a}}}, interests: {{{interests_a}}}
B: {{{name_b}}}, interests: {{{interests_b}}}

Requirements:
1. Force a connection, however far-fetched
2. Use phrases like "confirmed", "spotted together", "rumoured"
3. Under 50 words

Reply with the headline only."""

HYPE_PROMPT = """You are a hype reporter who makes mountains out of molehills. Turn this data point into a sensational headline:

Data: {{{metric}}} = {{{value}}}

Requirements:
1. Leap to the most dramatic conclusion
2. Use words like "shocking" and "breaking"
3. Under 50 words

Reply with the headline only."""

DEBATE_PROMPT = """Simulate five people with different personalities debating in a chat room. The topic: {{{topic}}}

Each character says one line (under 30 words), five lines in total. Format:
[Character]: line

Characters: Acid Tongue (snarky), Superfan (blindly supportive), Conspiracist (sees plots everywhere), Voice of Reason (gets mocked for making sense), Popcorn Crowd (eggs everyone on)

Requirement: the characters needle, contradict and heckle each other, and it is funny."""
