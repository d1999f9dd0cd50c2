from .polling import StatusPoller
from .race import AcceptFn, EventRace
from .session import PinProvider, ColdWalletSession, encode_pin
from .enrollment import SIGN_EVENTS, WAIT_FOR_EVENTS, CHECK_PIN_EVENTS, EnrollmentClient

__all__ = [
    "AcceptFn",
    "CHECK_PIN_EVENTS",
    "ColdWalletSession",
    "EnrollmentClient",
    "EventRace",
    "PinProvider",
    "SIGN_EVENTS",
    "StatusPoller",
    "WAIT_FOR_EVENTS",
    "encode_pin",
]
