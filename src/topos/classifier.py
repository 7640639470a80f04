"""
Subobject Classifier — Ω, characteristic arrows и канонические подобъекты

Ω = (false, true), truth: 1 → Ω выбирает true.

Закон классификатора: для любого мономорфизма m: X ↪ Y pullback truth
вдоль χ_m восстанавливает подобъект, изоморфный X. Изоморфизм строится
явно (compare_monics) сопоставлением domain-индексов с общими образами,
и оба round trip проверяются на тождественность.

Pullback берётся у внедрённого PullbackCalculator, поэтому классификатор
работает поверх любой реализации этой capability.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from src.core.config import KernelLimits
from src.core.domain.arrow import (
    FinArrow,
    compose,
    ensure_monic,
    equal_arrow,
    identity,
    initial_arrow,
    point,
    terminate,
)
from src.core.domain.carrier import FALSE_INDEX, TRUE_INDEX, TRUTH_VALUES, FinObj
from src.core.domain.errors import IndexOutOfRange, ShapeMismatch, SubobjectMismatch
from src.core.domain.results import Certification, FactorResult, IsoWitness, LeqResult
from src.limits.equalizers import EqualizerWitness, equalizer, factor_through_equalizer
from src.limits.exponentials import exponential
from src.limits.pullbacks import FinSetPullbackCalculator, PullbackCalculator, PullbackWitness

logger = logging.getLogger(__name__)


# =============================================================================
# WITNESSES
# =============================================================================


@dataclass(frozen=True)
class SubobjectWitness:
    """Подобъект: carrier + включение в ambient."""

    subobject: FinObj
    inclusion: FinArrow

    @property
    def ambient(self) -> FinObj:
        return self.inclusion.target


@dataclass(frozen=True)
class CharacteristicPullback:
    """Канонический pullback truth вдоль χ."""

    characteristic: FinArrow
    pullback: PullbackWitness
    certification: Certification
    calculator: PullbackCalculator

    @property
    def subobject(self) -> FinObj:
        return self.pullback.apex

    @property
    def inclusion(self) -> FinArrow:
        return self.pullback.to_domain

    def square_commutes(self) -> bool:
        return self.pullback.square_commutes()

    def factor_cone(self, apex: FinObj, to_ambient: FinArrow) -> FactorResult:
        """Медиатор для конуса apex → Y; нога в 1 — единственная стрелка apex → 1."""
        return self.calculator.factor_cone(self.pullback, apex, to_ambient, terminate(apex))


@dataclass(frozen=True)
class Classification:
    """Результат classify: χ_m, канонический подобъект и изоморфизм с dom m."""

    monic: FinArrow
    characteristic: FinArrow
    canonical: CharacteristicPullback
    iso: IsoWitness


@dataclass(frozen=True)
class SubobjectOrder:
    """Сравнение подобъектов в обе стороны; iso есть только при равенстве."""

    leq: LeqResult
    geq: LeqResult
    iso: Optional[IsoWitness] = None

    @property
    def equivalent(self) -> bool:
        return self.iso is not None


@dataclass(frozen=True)
class SubobjectEntry:
    """Элемент перечисления подобъектов: подобъект и его χ."""

    witness: SubobjectWitness
    characteristic: FinArrow


@dataclass(frozen=True)
class ComplementWitness:
    """Дополнение подобъекта, классифицируемое ¬ ∘ χ."""

    complement: SubobjectWitness
    characteristic: FinArrow


@dataclass(frozen=True)
class MonomorphismEqualizer:
    """
    Мономорфизм m: X ↪ Y как equalizer пары χ_m, true ∘ !: Y → Ω.

    iso.forward: X → E, iso.backward: E → X, где E — equalizer.
    """

    monomorphism: FinArrow
    characteristic: FinArrow
    truth_composite: FinArrow
    equalizer: EqualizerWitness
    iso: IsoWitness

    def factor(self, fork: FinArrow) -> FactorResult:
        """Единственный u: Z → X с m ∘ u = fork, если fork выравнивает χ_m и true ∘ !."""
        result = factor_through_equalizer(
            self.characteristic, self.truth_composite, self.equalizer.inclusion, fork
        )
        if not result.factored:
            return result
        return FactorResult.success(compose(self.iso.backward, result.mediator))


# =============================================================================
# CLASSIFIER
# =============================================================================


class SubobjectClassifier:
    """
    Subobject classifier Ω для FinSet.

    χ пересчитывается при каждом вызове за O(|Y|); между вызовами
    классификатор состояния не хранит.
    """

    def __init__(
        self,
        calculator: Optional[PullbackCalculator] = None,
        limits: Optional[KernelLimits] = None,
    ):
        self.limits = limits
        self.calculator = calculator or FinSetPullbackCalculator(limits)
        self.truth_values = TRUTH_VALUES
        self.truth_arrow = point(TRUTH_VALUES, TRUE_INDEX)
        self.false_arrow = point(TRUTH_VALUES, FALSE_INDEX)
        self.negation = self.characteristic(self.false_arrow)

    # -------------------------------------------------------------------------
    # χ и обратно
    # -------------------------------------------------------------------------

    def characteristic(self, m: FinArrow) -> FinArrow:
        """
        χ_m: Y → Ω, true ровно на image m.

        Raises:
            NotMonomorphism: Если m не инъективна
        """
        ensure_monic(m, "characteristic")
        hit = set(m.mapping)
        return FinArrow(
            source=m.target,
            target=TRUTH_VALUES,
            mapping=tuple(TRUE_INDEX if y in hit else FALSE_INDEX for y in m.target.indices()),
        )

    def _ensure_truth_valued(self, chi: FinArrow, context: str) -> None:
        if chi.target is not TRUTH_VALUES:
            raise ShapeMismatch(f"{context}: arrow must land in the truth-value object")
        for y, value in enumerate(chi.mapping):
            if value not in (FALSE_INDEX, TRUE_INDEX):
                raise IndexOutOfRange(f"{context}: truth index {value} at {y} is not a truth value")

    def characteristic_pullback(self, chi: FinArrow) -> CharacteristicPullback:
        """
        Pullback truth вдоль χ через внедрённый калькулятор, с сертификацией.

        Raises:
            ShapeMismatch: Если χ не стрелка в Ω
        """
        self._ensure_truth_valued(chi, "characteristic_pullback")
        witness = self.calculator.pullback(chi, self.truth_arrow)
        certification = self.calculator.certify(chi, self.truth_arrow, witness)
        logger.debug(
            "characteristic_pullback: ambient %d -> subobject %d (valid=%s)",
            chi.source.size,
            witness.apex.size,
            certification.valid,
        )
        return CharacteristicPullback(
            characteristic=chi,
            pullback=witness,
            certification=certification,
            calculator=self.calculator,
        )

    def subobject_from_characteristic(self, chi: FinArrow) -> SubobjectWitness:
        """Канонический подобъект, классифицируемый χ."""
        canonical = self.characteristic_pullback(chi)
        return SubobjectWitness(subobject=canonical.subobject, inclusion=canonical.inclusion)

    # -------------------------------------------------------------------------
    # Уникальность с точностью до изоморфизма
    # -------------------------------------------------------------------------

    def compare_monics(self, left: FinArrow, right: FinArrow) -> IsoWitness:
        """
        Изоморфизм dom(left) ≅ dom(right) для двух мономорфизмов с общей χ.

        forward сопоставляет каждому индексу left индекс right с тем же
        образом, backward — наоборот. Оба round trip обязаны быть тождествами.

        Raises:
            NotMonomorphism: Если одна из стрелок не инъективна
            ShapeMismatch: Если codomain различаются
            SubobjectMismatch: Если χ различаются или round trip не тождество
        """
        ensure_monic(left, "compare_monics")
        ensure_monic(right, "compare_monics")
        if left.target is not right.target:
            raise ShapeMismatch("compare_monics: monomorphisms must share a codomain")
        if not equal_arrow(self.characteristic(left), self.characteristic(right)):
            raise SubobjectMismatch("compare_monics: monomorphisms classify different subobjects")

        right_position = {y: j for j, y in enumerate(right.mapping)}
        left_position = {y: i for i, y in enumerate(left.mapping)}
        forward = FinArrow(
            source=left.source,
            target=right.source,
            mapping=tuple(right_position[y] for y in left.mapping),
        )
        backward = FinArrow(
            source=right.source,
            target=left.source,
            mapping=tuple(left_position[y] for y in right.mapping),
        )

        if not equal_arrow(compose(backward, forward), identity(left.source)):
            raise SubobjectMismatch("compare_monics: backward ∘ forward is not the identity")
        if not equal_arrow(compose(forward, backward), identity(right.source)):
            raise SubobjectMismatch("compare_monics: forward ∘ backward is not the identity")
        return IsoWitness(forward=forward, backward=backward)

    def classify(self, m: FinArrow) -> Classification:
        """
        Закон классификатора для m одним вызовом.

        Raises:
            NotMonomorphism: Если m не инъективна
            SubobjectMismatch: Если канонический подобъект не воспроизводит m
        """
        chi = self.characteristic(m)
        canonical = self.characteristic_pullback(chi)
        if not canonical.certification.valid:
            raise SubobjectMismatch(
                f"classify: canonical pullback failed certification: {canonical.certification.reason}"
            )

        iso = self.compare_monics(m, canonical.inclusion)
        if not equal_arrow(compose(canonical.inclusion, iso.forward), m):
            raise SubobjectMismatch("classify: inclusion ∘ iso does not reproduce the monomorphism")
        return Classification(monic=m, characteristic=chi, canonical=canonical, iso=iso)

    # -------------------------------------------------------------------------
    # Порядок на подобъектах
    # -------------------------------------------------------------------------

    def subobject_leq(self, left: FinArrow, right: FinArrow) -> LeqResult:
        """
        left ≤ right: left пропускается через right.

        Raises:
            NotMonomorphism: Если одна из стрелок не инъективна
            ShapeMismatch: Если codomain различаются
        """
        ensure_monic(left, "subobject_leq")
        ensure_monic(right, "subobject_leq")
        if left.target is not right.target:
            raise ShapeMismatch("subobject_leq: monomorphisms must share a codomain")

        right_position = {y: j for j, y in enumerate(right.mapping)}
        mapping = []
        for i, y in enumerate(left.mapping):
            if y not in right_position:
                return LeqResult(holds=False, reason=f"image {y} of index {i} is outside the larger subobject")
            mapping.append(right_position[y])
        mediator = FinArrow(source=left.source, target=right.source, mapping=tuple(mapping))
        return LeqResult(holds=True, mediator=mediator)

    def subobject_partial_order(self, left: FinArrow, right: FinArrow) -> SubobjectOrder:
        """Обе стороны сравнения; при left ≤ right ≤ left — изоморфизм (антисимметрия)."""
        leq = self.subobject_leq(left, right)
        geq = self.subobject_leq(right, left)
        iso = None
        if leq.holds and geq.holds:
            iso = IsoWitness(forward=leq.mediator, backward=geq.mediator)
        return SubobjectOrder(leq=leq, geq=geq, iso=iso)

    def intersection(self, left: FinArrow, right: FinArrow) -> SubobjectWitness:
        """
        Meet двух подобъектов: pullback мономорфизмов.

        Raises:
            NotMonomorphism: Если одна из стрелок не инъективна
            ShapeMismatch: Если codomain различаются
        """
        ensure_monic(left, "intersection")
        ensure_monic(right, "intersection")
        witness = self.calculator.pullback(left, right)
        return SubobjectWitness(subobject=witness.apex, inclusion=compose(left, witness.to_domain))

    # -------------------------------------------------------------------------
    # Решётка подобъектов
    # -------------------------------------------------------------------------

    def top(self, ambient: FinObj) -> SubobjectWitness:
        """Наибольший подобъект: id_Y."""
        return SubobjectWitness(subobject=ambient, inclusion=identity(ambient))

    def bottom(self, ambient: FinObj) -> SubobjectWitness:
        """Наименьший подобъект: 0 ↪ Y."""
        inclusion = initial_arrow(ambient)
        return SubobjectWitness(subobject=inclusion.source, inclusion=inclusion)

    def characteristic_complement(self, chi: FinArrow) -> FinArrow:
        """
        ¬ ∘ χ.

        Raises:
            ShapeMismatch: Если χ не стрелка в Ω
        """
        self._ensure_truth_valued(chi, "characteristic_complement")
        return compose(self.negation, chi)

    def complement(self, m: FinArrow) -> ComplementWitness:
        """
        Дополнение m: pullback truth вдоль ¬ ∘ χ_m.

        Raises:
            NotMonomorphism: Если m не инъективна
        """
        chi = self.characteristic_complement(self.characteristic(m))
        return ComplementWitness(complement=self.subobject_from_characteristic(chi), characteristic=chi)

    def list_subobjects(self, ambient: FinObj) -> List[SubobjectEntry]:
        """
        Все подобъекты Y в порядке элементов Ω^Y (тот же порядок, что у power object).

        Raises:
            CarrierTooLarge: Если 2^|Y| превышает limits.max_exponential_size
        """
        truth_functions = exponential(TRUTH_VALUES, ambient, self.limits)
        entries = []
        for index in truth_functions.obj.indices():
            chi = truth_functions.function_at(index)
            entries.append(SubobjectEntry(witness=self.subobject_from_characteristic(chi), characteristic=chi))
        logger.debug("list_subobjects: %d subobjects of %r", len(entries), ambient)
        return entries

    def monomorphism_equalizer(self, m: FinArrow) -> MonomorphismEqualizer:
        """
        m как equalizer χ_m и true ∘ !, с изоморфизмом на канонический equalizer.

        Raises:
            NotMonomorphism: Если m не инъективна
            SubobjectMismatch: Если m не выравнивает пару или iso не переносит включение на m
        """
        chi = self.characteristic(m)
        truth_composite = compose(self.truth_arrow, terminate(m.target))
        if not equal_arrow(compose(chi, m), compose(self.truth_arrow, terminate(m.source))):
            raise SubobjectMismatch("monomorphism_equalizer: monomorphism does not equalize χ and true ∘ !")

        eq = equalizer(chi, truth_composite)
        iso = self.compare_monics(m, eq.inclusion)
        if not equal_arrow(compose(eq.inclusion, iso.forward), m):
            raise SubobjectMismatch("monomorphism_equalizer: iso does not carry the equalizer inclusion onto m")
        return MonomorphismEqualizer(
            monomorphism=m,
            characteristic=chi,
            truth_composite=truth_composite,
            equalizer=eq,
            iso=iso,
        )
