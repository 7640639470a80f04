"""
Products / Coproducts — конечные декартовы произведения и размеченные суммы

Product: carrier из кортежей координат, перечисленных в фиксированном порядке
(первый множитель — старший). Размер = ∏ размеров множителей (может быть 0;
пустое произведение — одноэлементный терминальный объект).

Coproduct: carrier из пар (номер множителя, локальный индекс),
конкатенированных множитель за множителем.

Lookup координаты → индекс строится один раз и принадлежит объекту product,
поэтому tuple_into никогда не перевычисляет перечисление.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from src.core.config import DEFAULT_LIMITS, KernelLimits, ensure_within
from src.core.domain.arrow import FinArrow, identity, terminate
from src.core.domain.carrier import TERMINAL, FinObj, make_indexed_obj
from src.core.domain.errors import IndexOutOfRange, KernelContractViolation, ShapeMismatch

logger = logging.getLogger(__name__)


# =============================================================================
# WITNESSES
# =============================================================================


@dataclass(frozen=True)
class ProductWitness:
    """Product с проекциями."""

    obj: FinObj
    projections: Tuple[FinArrow, ...]
    factors: Tuple[FinObj, ...]


@dataclass(frozen=True)
class CoproductWitness:
    """Coproduct с инъекциями."""

    obj: FinObj
    injections: Tuple[FinArrow, ...]
    factors: Tuple[FinObj, ...]
    offsets: Tuple[int, ...]


@dataclass(frozen=True)
class BinaryProductWitness:
    """Бинарное произведение A × B с медиатором pair."""

    obj: FinObj
    proj1: FinArrow
    proj2: FinArrow

    @property
    def left(self) -> FinObj:
        return self.proj1.target

    @property
    def right(self) -> FinObj:
        return self.proj2.target

    def pair(self, domain: FinObj, f: FinArrow, g: FinArrow) -> FinArrow:
        """Медиатор ⟨f, g⟩: domain → A × B."""
        return tuple_into(domain, [f, g], self.obj)


# =============================================================================
# PRODUCT
# =============================================================================


def _enumerate_tuples(sizes: Sequence[int]) -> List[Tuple[int, ...]]:
    """Backtracking-перечисление кортежей; первый множитель — старший."""
    tuples: List[Tuple[int, ...]] = []
    prefix: List[int] = []

    def rec(k: int) -> None:
        if k == len(sizes):
            tuples.append(tuple(prefix))
            return
        for i in range(sizes[k]):
            prefix.append(i)
            rec(k + 1)
            prefix.pop()

    rec(0)
    return tuples


def product(objects: Sequence[FinObj], limits: Optional[KernelLimits] = None) -> ProductWitness:
    """
    Конечное декартово произведение.

    Args:
        objects: Множители (может быть пустым — тогда результат одноэлементный)
        limits: Ограничения размера (default: DEFAULT_LIMITS)

    Returns:
        ProductWitness с одной проекцией на каждый множитель

    Raises:
        CarrierTooLarge: Если ∏ размеров превышает limits.max_product_size
    """
    limits = limits or DEFAULT_LIMITS
    factors = tuple(objects)
    sizes = [factor.size for factor in factors]
    ensure_within(math.prod(sizes), limits.max_product_size, "product")

    tuples = _enumerate_tuples(sizes)
    obj = make_indexed_obj(tuples, label=f"Prod[{len(factors)}]")
    obj._factors = factors
    projections = tuple(
        FinArrow(source=obj, target=factor, mapping=tuple(t[k] for t in tuples))
        for k, factor in enumerate(factors)
    )
    logger.debug("product: %d factors %s -> %d tuples", len(factors), sizes, obj.size)
    return ProductWitness(obj=obj, projections=projections, factors=factors)


def tuple_into(domain: FinObj, legs: Sequence[FinArrow], product_obj: FinObj) -> FinArrow:
    """
    Медиатор ⟨legs⟩: domain → product_obj.

    Для каждого domain-индекса собирает кортеж образов по всем legs и находит
    его позицию через lookup объекта product.

    Args:
        domain: Общий domain всех legs
        legs: По одной стрелке на каждый множитель
        product_obj: Carrier, построенный функцией product

    Returns:
        Стрелка domain → product_obj

    Raises:
        KernelContractViolation: Если product_obj построен не функцией product
        ShapeMismatch: Если число legs, domain или codomain какого-либо leg
            не совпадает с множителями
        IndexOutOfRange: Если образ leg вне его codomain
    """
    factors = product_obj.factors
    if factors is None:
        raise KernelContractViolation(f"tuple_into: {product_obj!r} was not built by product")

    legs = list(legs)
    if len(legs) != len(factors):
        raise ShapeMismatch(
            f"tuple_into: expected {len(factors)} legs for the supplied product but received {len(legs)}"
        )
    for leg_ix, (leg, factor) in enumerate(zip(legs, factors)):
        if leg.source is not domain:
            raise ShapeMismatch(f"tuple_into: leg {leg_ix} domain mismatch")
        if leg.target is not factor:
            raise ShapeMismatch(f"tuple_into: leg {leg_ix} codomain is not factor {leg_ix}")

    mapping = []
    for position in domain.indices():
        coordinates = []
        for leg_ix, leg in enumerate(legs):
            image = leg.mapping[position]
            if image < 0 or image >= leg.target.size:
                raise IndexOutOfRange(
                    f"tuple_into: leg {leg_ix} image {image} out of bounds for its codomain"
                )
            coordinates.append(image)
        mapping.append(product_obj.index_of(tuple(coordinates)))

    return FinArrow(source=domain, target=product_obj, mapping=tuple(mapping))


def tuple_into_product(domain: FinObj, legs: Sequence[FinArrow], witness: ProductWitness) -> FinArrow:
    """tuple_into по ProductWitness."""
    return tuple_into(domain, legs, witness.obj)


def binary_product(left: FinObj, right: FinObj, limits: Optional[KernelLimits] = None) -> BinaryProductWitness:
    """A × B с проекциями и pair."""
    witness = product([left, right], limits)
    proj1, proj2 = witness.projections
    return BinaryProductWitness(obj=witness.obj, proj1=proj1, proj2=proj2)


def binary_product_witness(product_obj: FinObj) -> BinaryProductWitness:
    """
    Проекции уже построенного A × B, восстановленные по его кортежам.

    Raises:
        ShapeMismatch: Если product_obj не бинарный product
    """
    factors = product_obj.factors
    if factors is None or len(factors) != 2:
        raise ShapeMismatch(f"binary_product_witness: {product_obj!r} is not a binary product")
    left, right = factors
    return BinaryProductWitness(
        obj=product_obj,
        proj1=FinArrow(source=product_obj, target=left, mapping=tuple(a for a, _ in product_obj.elements)),
        proj2=FinArrow(source=product_obj, target=right, mapping=tuple(b for _, b in product_obj.elements)),
    )


@dataclass(frozen=True)
class ProductUnitWitness:
    """X × 1 ≅ X."""

    product: BinaryProductWitness
    forward: FinArrow
    backward: FinArrow


def product_unit_witness(obj: FinObj) -> ProductUnitWitness:
    """Правый унитор: forward = π₁, backward = ⟨id, !⟩."""
    witness = binary_product(obj, TERMINAL)
    backward = witness.pair(obj, identity(obj), terminate(obj))
    return ProductUnitWitness(product=witness, forward=witness.proj1, backward=backward)


# =============================================================================
# COPRODUCT
# =============================================================================


def coproduct(objects: Sequence[FinObj]) -> CoproductWitness:
    """
    Размеченная сумма.

    Args:
        objects: Слагаемые

    Returns:
        CoproductWitness; инъекции — сдвиги на offset слагаемого
    """
    factors = tuple(objects)
    tags: List[Tuple[int, int]] = []
    offsets: List[int] = []
    for tag, factor in enumerate(factors):
        offsets.append(len(tags))
        tags.extend((tag, i) for i in factor.indices())

    obj = make_indexed_obj(tags, label=f"Coprod[{len(factors)}]")
    injections = tuple(
        FinArrow(
            source=factor,
            target=obj,
            mapping=tuple(offset + i for i in factor.indices()),
        )
        for factor, offset in zip(factors, offsets)
    )
    logger.debug("coproduct: %d summands -> %d elements", len(factors), obj.size)
    return CoproductWitness(obj=obj, injections=injections, factors=factors, offsets=tuple(offsets))


def cotuple(coproduct_obj: FinObj, legs: Sequence[FinArrow], codomain: FinObj) -> FinArrow:
    """
    Медиатор [legs]: coproduct_obj → codomain.

    Каждый размеченный элемент (tag, i) отправляется в legs[tag][i].

    Raises:
        IndexOutOfRange: Если тег вне диапазона legs или i вне domain leg
        ShapeMismatch: Если codomain leg не совпадает с codomain
    """
    legs = list(legs)
    mapping = []
    for entry in coproduct_obj.elements:
        tag, local = entry
        if tag < 0 or tag >= len(legs):
            raise IndexOutOfRange(f"cotuple: missing leg for tag {tag}")
        leg = legs[tag]
        if leg.target is not codomain:
            raise ShapeMismatch(f"cotuple: leg {tag} codomain mismatch")
        if local >= leg.source.size:
            raise IndexOutOfRange(f"cotuple: leg {tag} domain too small for index {local}")
        mapping.append(leg.mapping[local])

    return FinArrow(source=coproduct_obj, target=codomain, mapping=tuple(mapping))
