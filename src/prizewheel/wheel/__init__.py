"""Rotation physics and winner resolution engine."""

from .prizes import PrizeSet, DEFAULT_PRIZES, MIN_PRIZES, MAX_PRIZES
from .rotation import RotationState
from .input import InputTranslator, PointerSample
from .resolver import resolve, POINTER_DEGREES
from .policy import SpinPolicy, DecayPolicy, TimedPolicy, build_policy

__all__ = [
    "PrizeSet",
    "DEFAULT_PRIZES",
    "MIN_PRIZES",
    "MAX_PRIZES",
    "RotationState",
    "InputTranslator",
    "PointerSample",
    "resolve",
    "POINTER_DEGREES",
    "SpinPolicy",
    "DecayPolicy",
    "TimedPolicy",
    "build_policy",
]
