"""
Intent Classifier - Reduces free-form user input to one ActionLabel.

Sends the input and the closed label set to the completion service and
decodes the reply defensively. Fails closed: if the completion call errors,
the request is routed to chat instead of surfacing the failure.
"""

import logging

from errors import LLMError
from logging_config import log_action

from .actions import ActionLabel
from .prompts import ACTION_PROMPT

logger = logging.getLogger(__name__)


class IntentClassifier:
    """
    Classifies user input via the completion service.

    Usage:
        classifier = IntentClassifier(completion_client)
        label = await classifier.classify("where is order 42?")
    """

    def __init__(self, llm):
        self.llm = llm

    def build_prompt(self, user_input: str) -> str:
        return ACTION_PROMPT.format(input=user_input, labels=ActionLabel.prompt_list())

    async def classify(self, user_input: str) -> ActionLabel:
        try:
            raw = await self.llm.ask(self.build_prompt(user_input))
        except LLMError as e:
            logger.warning(f"Intent classification failed, defaulting to chat: {e}")
            log_action(logger, ActionLabel.default().value, raw="<error>", fallback=True)
            return ActionLabel.default()

        label = ActionLabel.parse(raw)
        if label is None:
            log_action(logger, ActionLabel.default().value, raw=raw, fallback=True)
            return ActionLabel.default()

        log_action(logger, label.value)
        return label
