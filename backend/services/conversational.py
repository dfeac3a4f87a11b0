"""
Natural-language replies for Ask results that delegate to a model.

`general_chat` and `muscle_group_exercises` results carry a context payload
instead of answer text. ConversationalResponder turns that context into a
prompt, asks the completion provider for a reply and cleans it up. If the
provider fails, a fixed fallback sentence is used.
"""

import json
import logging
import re
from dataclasses import replace
from typing import Any, Dict

from application.ports import CompletionProvider
from backend.ai.provider_errors import categorize_exception
from backend.services.ask_executor import AskResult
from backend.services.prompts import CONVERSATIONAL_RESPONSE_PROMPT

logger = logging.getLogger(__name__)

NO_CONTEXT_ANSWER = (
    "I'm here to help with your workouts! Ask me anything about exercises, "
    "your training history, or fitness in general."
)
DEFAULT_FALLBACK_ANSWER = (
    "I'm here to help with your workouts! Feel free to ask me about exercises, "
    "your training history, or what you should work on next."
)

_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
_GREETING = re.compile(r"^(hi|hello|hey)", re.IGNORECASE)


def needs_llm_response(result: AskResult) -> bool:
    return result.data.needs_llm_response


def build_user_prompt(context: Dict[str, Any]) -> str:
    """User message for the conversational model, built from an Ask context payload."""
    prompt = f'User\'s question: "{context.get("originalQuery", "")}"\n\n'

    if context.get("type") == "muscle_group_exercises":
        group = context.get("muscleGroup")
        prompt += f"The user is asking about exercises for: {group}\n\n"
        if context.get("suggestedExercises"):
            prompt += f"Good exercises for {group}: {', '.join(context['suggestedExercises'])}\n"
        if context.get("exercisesUserHasDone"):
            prompt += f"From their workout history, they've done: {', '.join(context['exercisesUserHasDone'])}\n"

    elif context.get("type") == "general_chat":
        prompt += f"Topic: {context.get('topic')}\n\n"
        user = context.get("userContext")
        if user:
            prompt += "User context:\n"
            total = user.get("totalWorkouts") or 0
            if total > 0:
                prompt += f"- They have logged {total} workout{'s' if total > 1 else ''}\n"
            days = user.get("daysSinceLastWorkout")
            if days is not None:
                if days == 0:
                    prompt += "- They worked out today\n"
                elif days == 1:
                    prompt += "- They worked out yesterday\n"
                else:
                    prompt += f"- Their last workout was {days} days ago\n"
            if user.get("recentExercises"):
                prompt += f"- Recent exercises: {', '.join(user['recentExercises'])}\n"

    prompt += "\nRespond naturally to their question."
    return prompt


def clean_response(text: str) -> str:
    """
    Strip artifacts from a model reply.

    Fenced code blocks are dropped. A reply that is a single JSON object is
    unwrapped to its `response`, `answer` or `text` field.
    """
    cleaned = _CODE_BLOCK.sub("", (text or "").strip())

    if cleaned.startswith("{") and cleaned.endswith("}"):
        try:
            parsed = json.loads(cleaned)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            unwrapped = parsed.get("response") or parsed.get("answer") or parsed.get("text")
            if isinstance(unwrapped, str):
                cleaned = unwrapped

    return cleaned.strip()


def fallback_response(context: Dict[str, Any]) -> str:
    """Deterministic reply used when the provider cannot be reached."""
    if context.get("type") == "muscle_group_exercises" and context.get("suggestedExercises"):
        return (
            f"Great exercises for {context.get('muscleGroup')}: "
            f"{', '.join(context['suggestedExercises'][:5])}. "
            "Try incorporating a few of these into your next workout!"
        )

    if context.get("type") == "general_chat":
        topic = (context.get("topic") or "").lower()
        if "greeting" in topic or _GREETING.match(context.get("originalQuery") or ""):
            return "Hey! 💪 Ready to crush a workout? Ask me anything about your training!"
        if "how are you" in topic:
            return "I'm doing great, thanks for asking! What can I help you with today?"

    return DEFAULT_FALLBACK_ANSWER


class ConversationalResponder:
    """
    Fill in answer text for delegated Ask results.

    Usage:
        responder = ConversationalResponder(provider)
        result = responder.respond(execute_ask_intent(intent, sessions))
    """

    def __init__(self, provider: CompletionProvider):
        self.provider = provider

    def respond(self, result: AskResult) -> AskResult:
        if not needs_llm_response(result):
            return result

        context = result.data.llm_context
        cleared = replace(result.data, needs_llm_response=False, llm_context=None)

        if not context:
            return AskResult(answer_text=NO_CONTEXT_ANSWER, data=cleared)

        try:
            raw_text = self.provider.complete(CONVERSATIONAL_RESPONSE_PROMPT, build_user_prompt(context))
        except Exception as e:
            error = categorize_exception(e)
            logger.warning(f"Conversational reply failed, using fallback: {error.code.value}")
            return AskResult(answer_text=fallback_response(context), data=cleared)

        return AskResult(answer_text=clean_response(raw_text), data=cleared)
