"""
Agent Prompts - Prompt templates and reply cleanup

Contains:
- ACTION_PROMPT: Intent classification instruction
- PERSONA_PROMPT: Chat persona system message
- build_context_prompt(): Reference-context system message
- SEARCH_TERM_PROMPT: Search term reduction instruction
- ORDER_ID_PROMPT / NO_ORDER_ID: Order id extraction instruction and sentinel
- SUGGESTIONS_PROMPT: Suggestions for extracted page text
- PAGE_CHAT_PROMPT: One-shot chat grounded in caller-supplied page content
- clean_reply(): Strip characters outside the reply allow-list
"""

import re

ACTION_PROMPT = (
    'Given the following user input: "{input}", determine the most appropriate action '
    "from these options: {labels}. Note if you are not sure of the action, respond with "
    '"chat". Respond with only the action name.'
)

PERSONA_PROMPT = (
    "You are Sai Ren AI. Provide helpful, concise responses without special characters. "
    "Use simple language and keep answers brief."
)

CONTEXT_PROMPT = 'Based on the following context: "{context}", provide a contextual response.'

SEARCH_TERM_PROMPT = (
    "Extract the main search query from the following user input. "
    'Return only the extracted query, nothing else: "{input}"'
)

NO_ORDER_ID = "NO_ORDER_ID_FOUND"

ORDER_ID_PROMPT = (
    "Extract the order ID from the following text. If there's no clear order ID, "
    f'respond with "{NO_ORDER_ID}". Text: "{{input}}"'
)

SUGGESTIONS_PROMPT = (
    "Here is text extracted from a web page:\n\n{text}\n\n"
    "Summarize what the page offers and suggest three short questions a visitor might ask about it."
)

PAGE_CHAT_PROMPT = (
    "You are Sai Ren AI. Answer the user's question using the page content below. "
    "Keep answers brief, in simple language, without special characters.\n\n"
    'Page content: "{page_content}"'
)

_DISALLOWED_RE = re.compile(r"[^\w\s.,?!]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")


def build_context_prompt(context: str) -> str:
    return CONTEXT_PROMPT.format(context=context)


def clean_reply(text: str) -> str:
    """Keep word characters, whitespace and ``. , ? !``; collapse whitespace."""
    if not text:
        return ""
    text = _DISALLOWED_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()
