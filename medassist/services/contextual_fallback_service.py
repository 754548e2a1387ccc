from __future__ import annotations

import re
from dataclasses import dataclass

_PUNCTUATION = re.compile(r"[^\w\s']")


@dataclass(frozen=True, slots=True)
class ContextualRule:
    response: str
    # An empty trigger set matches every message; only the default rule uses it
    triggers: frozenset[str] = frozenset()

    def matches(self, normalized_message: str) -> bool:
        if not self.triggers:
            return True
        return any(trigger in normalized_message for trigger in self.triggers)


_CAPABILITIES = (
    "I can answer questions about common medications and supplements, dosing "
    "basics, missed doses, interactions, and how to use your medication schedule "
    "and history."
)

CONTEXTUAL_RULES: tuple[ContextualRule, ...] = (
    ContextualRule(
        triggers=frozenset({
            "hello", " hi ", " hey ", "good morning", "good afternoon", "good evening",
        }),
        response=(
            "Hello! I'm your AI health assistant. " + _CAPABILITIES
            + " What would you like to know?"
        ),
    ),
    ContextualRule(
        triggers=frozenset({"how are you"}),
        response=(
            "I'm doing well and ready to help! " + _CAPABILITIES
            + " How can I assist you today?"
        ),
    ),
    ContextualRule(
        triggers=frozenset({"thank", "thanks", "appreciate"}),
        response=(
            "You're welcome! I'm glad I could help. Remember to always consult your "
            "healthcare provider before making changes to your medications."
        ),
    ),
    ContextualRule(
        triggers=frozenset({"help", "what can you do", "capabilit", "what do you do"}),
        response=(
            "Here is what I can help with:\n"
            "- Dosing basics for common medicines like aspirin, ibuprofen, and acetaminophen\n"
            "- Vitamins and supplements such as vitamin D, vitamin C, iron, and magnesium\n"
            "- What to do about a missed dose\n"
            "- Drug, food, and alcohol interactions\n"
            "- Adding medications, reminders, and exporting your history\n"
            "Ask me about any of these topics."
        ),
    ),
    ContextualRule(
        response=(
            "I'm not sure I have a good answer for that yet. Could you be more specific? "
            "For example, ask about a particular medication, a supplement, or what to do "
            "if you missed a dose. For personal medical advice, please consult your "
            "healthcare provider."
        ),
    ),
)


def resolve_contextual_fallback(
    message: str,
    rules: tuple[ContextualRule, ...] = CONTEXTUAL_RULES,
) -> str:
    # Punctuation becomes space and the text is padded, so word triggers such
    # as " hi " match "Hi." or "hey?" but not "this" or "they"
    words = _PUNCTUATION.sub(" ", message.lower()).split()
    normalized = f" {' '.join(words)} "
    for rule in rules:
        if rule.matches(normalized):
            return rule.response
    # Only reachable with a custom rule set lacking an unconditional default
    return CONTEXTUAL_RULES[-1].response
