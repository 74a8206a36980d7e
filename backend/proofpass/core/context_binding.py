"""Context Binding — canonical context strings and context-id matching.

Invariants:
    - build_context_string is deterministic: same (event_id, name) -> same string
    - Format is "[proofpass.io][<event_id>]<event_name>", no normalization of the name
    - A presented context id matches only the event's stored id, byte for byte;
      alternate renderings of the same number (hex, padded, signed) do not match
"""

from proofpass.core.domain_types import PROOFPASS_CONTEXT_PREFIX, ContextId


def build_context_string(event_id: str, event_name: str) -> str:
    return f"{PROOFPASS_CONTEXT_PREFIX}[{event_id}]{event_name}"


def context_ids_match(presented: str | None, stored: ContextId | None) -> bool:
    """True iff both ids are set and textually identical."""
    if not presented or not stored:
        return False
    return presented == stored
