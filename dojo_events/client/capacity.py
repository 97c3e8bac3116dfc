from dataclasses import dataclass

from dojo_events.client.records import EventRecord

SOLD_OUT_LABEL = "Sold Out"
REGISTER_LABEL = "Add Participant"


@dataclass(frozen=True)
class Action:
    label: str
    enabled: bool


def is_sold_out(event: EventRecord) -> bool:
    return event.remaining_slots == 0


def registration_action(event: EventRecord) -> Action:
    if is_sold_out(event):
        return Action(SOLD_OUT_LABEL, enabled=False)
    return Action(REGISTER_LABEL, enabled=True)
