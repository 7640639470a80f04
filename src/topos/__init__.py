"""
Topos structure on finite sets.

Subobject classifier Ω with characteristic arrows and canonical
subobjects, the power object Ω^X, and the capability bundle that exposes
the whole kernel as a flat record of operations.
"""

from src.topos.capabilities import FinSetCapabilities, finset_capabilities
from src.topos.classifier import (
    CharacteristicPullback,
    Classification,
    ComplementWitness,
    MonomorphismEqualizer,
    SubobjectClassifier,
    SubobjectEntry,
    SubobjectOrder,
    SubobjectWitness,
)
from src.topos.power_object import PowerObjectWitness, power_object

__all__ = [
    # Classifier
    "SubobjectClassifier",
    "SubobjectWitness",
    "CharacteristicPullback",
    "Classification",
    "SubobjectOrder",
    "SubobjectEntry",
    "ComplementWitness",
    "MonomorphismEqualizer",
    # Power object
    "PowerObjectWitness",
    "power_object",
    # Capabilities
    "FinSetCapabilities",
    "finset_capabilities",
]
