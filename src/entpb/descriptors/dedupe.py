from collections.abc import Iterable

from entpb import log
from entpb.descriptors.models import MessageDescriptor


def dedupe_messages(messages: Iterable[MessageDescriptor]) -> list[MessageDescriptor]:
    """Collapse messages to unique names, keeping the first occurrence of each name.

    Identity is the message name only: later messages with an already seen name are dropped
    without comparing their contents. Input order is preserved.
    """
    deduped: list[MessageDescriptor] = []
    seen: set[str] = set()
    for message in messages:
        if message.name in seen:
            log.debug(f"Dropping duplicate message '{message.name}'")
            continue
        seen.add(message.name)
        deduped.append(message)
    return deduped
