"""
Power Object P(X) = Ω^X

Подмножества X — элементы Ω^X (их характеристические последовательности).
Membership: evaluation Ω^X × X → Ω из exponential; подобъект ∈_X ↪ Ω^X × X —
pullback truth вдоль evaluation.

classify_relation: отношение R ↪ A × X даёт единственную стрелку A → P(X)
(curry χ_R), такую что R — pullback ∈_X вдоль (стрелка × id_X).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from src.core.config import KernelLimits
from src.core.domain.arrow import FinArrow
from src.core.domain.carrier import TRUE_INDEX, TRUTH_VALUES, FinObj
from src.core.domain.errors import IndexOutOfRange, ShapeMismatch
from src.limits.exponentials import ExponentialWitness, exponential
from src.limits.products import BinaryProductWitness
from src.topos.classifier import SubobjectClassifier, SubobjectWitness

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PowerObjectWitness:
    """Ω^X с membership."""

    base: FinObj
    exponential: ExponentialWitness
    classifier: SubobjectClassifier
    membership: SubobjectWitness

    @property
    def obj(self) -> FinObj:
        return self.exponential.obj

    @property
    def evaluation(self) -> FinArrow:
        """Ω^X × X → Ω."""
        return self.exponential.evaluation

    def subset_index(self, m: FinArrow) -> int:
        """
        Номер подмножества, классифицируемого мономорфизмом m: S ↪ X.

        Raises:
            ShapeMismatch: Если m не в X
            NotMonomorphism: Если m не инъективна
        """
        if m.target is not self.base:
            raise ShapeMismatch("subset_index: monomorphism must land in the base object")
        return self.exponential.index_of_function(self.classifier.characteristic(m))

    def subset_at(self, index: int) -> SubobjectWitness:
        """Канонический подобъект X для index-го элемента Ω^X."""
        return self.classifier.subobject_from_characteristic(self.exponential.function_at(index))

    def contains(self, subset_index: int, element_index: int) -> bool:
        """
        x ∈ S для S с номером subset_index.

        Raises:
            IndexOutOfRange: Если один из индексов вне диапазона
        """
        if subset_index < 0 or subset_index >= self.obj.size:
            raise IndexOutOfRange(f"contains: subset index {subset_index} out of range")
        if element_index < 0 or element_index >= self.base.size:
            raise IndexOutOfRange(f"contains: element index {element_index} out of range")
        return self.obj.elements[subset_index][element_index] == TRUE_INDEX

    def relation_product(self, ambient: FinObj) -> BinaryProductWitness:
        """Канонический A × X, над которым задаются отношения для classify_relation."""
        return self.exponential.product_with(ambient)

    def classify_relation(self, ambient: FinObj, relation: FinArrow) -> FinArrow:
        """
        Стрелка A → P(X), классифицирующая отношение R ↪ A × X.

        Raises:
            ShapeMismatch: Если relation не в канонический A × X
            NotMonomorphism: Если relation не инъективна
        """
        prod = self.relation_product(ambient)
        if relation.target is not prod.obj:
            raise ShapeMismatch("classify_relation: relation must land in the canonical product A × X")
        chi = self.classifier.characteristic(relation)
        return self.exponential.curry(ambient, chi)


def power_object(
    base: FinObj,
    classifier: Optional[SubobjectClassifier] = None,
    limits: Optional[KernelLimits] = None,
) -> PowerObjectWitness:
    """
    P(X) = Ω^X.

    Raises:
        CarrierTooLarge: Если 2^|X| превышает limits.max_exponential_size
    """
    classifier = classifier or SubobjectClassifier(limits=limits)
    witness = exponential(TRUTH_VALUES, base, limits)
    membership = classifier.subobject_from_characteristic(witness.evaluation)
    logger.debug(
        "power_object: |X|=%d -> %d subsets, membership %d",
        base.size,
        witness.obj.size,
        membership.subobject.size,
    )
    return PowerObjectWitness(
        base=base,
        exponential=witness,
        classifier=classifier,
        membership=membership,
    )
