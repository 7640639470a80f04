"""
Exponential Y^S — Cartesian closure конечных множеств

Carrier Y^S — все функции S → Y как последовательности индексов длины |S|,
перечисленные лексикографически (первая позиция старшая). Размер |Y|^|S|.

curry / uncurry работают над *каноническим* product X × S, который witness
строит для каждого X и помнит, пока его carrier жив. Поэтому
uncurry(X, curry(X, h)) == h и curry(X, uncurry(X, k)) == k побитово.
"""

import itertools
import logging
import weakref
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from src.core.config import DEFAULT_LIMITS, KernelLimits, ensure_within
from src.core.domain.arrow import FinArrow, point, point_index
from src.core.domain.carrier import FinObj, make_indexed_obj
from src.core.domain.errors import IndexOutOfRange, ShapeMismatch
from src.limits.products import BinaryProductWitness, binary_product, binary_product_witness

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExponentialWitness:
    """
    Exponential Y^S с evaluation: Y^S × S → Y.

    Attributes:
        obj: Carrier Y^S
        base: S
        codomain: Y
        product: Y^S × S
        evaluation: (k, s) ↦ k-я функция в точке s
    """

    obj: FinObj
    base: FinObj
    codomain: FinObj
    product: BinaryProductWitness
    evaluation: FinArrow
    limits: KernelLimits = field(default=DEFAULT_LIMITS, repr=False)

    # id(X) → carrier X × S; запись живёт, пока жив сам carrier (он держит X через factors)
    _products: "weakref.WeakValueDictionary[int, FinObj]" = field(
        default_factory=weakref.WeakValueDictionary, repr=False, compare=False, hash=False
    )

    # -------------------------------------------------------------------------
    # Функции как элементы
    # -------------------------------------------------------------------------

    def function_at(self, index: int) -> FinArrow:
        """
        Функция S → Y с номером index.

        Raises:
            IndexOutOfRange: Если index вне Y^S
        """
        if index < 0 or index >= self.obj.size:
            raise IndexOutOfRange(f"function_at: index {index} out of range for {self.obj!r}")
        return FinArrow(source=self.base, target=self.codomain, mapping=self.obj.elements[index])

    def index_of_function(self, function: Union[FinArrow, Sequence[int]]) -> int:
        """
        Номер функции в Y^S.

        Args:
            function: Стрелка S → Y или последовательность образов

        Raises:
            ShapeMismatch: Если стрелка не S → Y
            IndexOutOfRange: Если последовательность не функция S → Y
        """
        if isinstance(function, FinArrow):
            if function.source is not self.base or function.target is not self.codomain:
                raise ShapeMismatch("index_of_function: arrow must be base -> codomain")
            return self.obj.index_of(function.mapping)
        return self.obj.index_of(tuple(function))

    def name_of(self, function: FinArrow) -> FinArrow:
        """Имя функции: глобальный элемент 1 → Y^S."""
        return point(self.obj, self.index_of_function(function))

    def arrow_from_name(self, name: FinArrow) -> FinArrow:
        """Обратно к name_of."""
        return self.function_at(point_index(self.obj, name))

    # -------------------------------------------------------------------------
    # Curry / uncurry
    # -------------------------------------------------------------------------

    def product_with(self, obj: FinObj) -> BinaryProductWitness:
        """
        Канонический X × S для данного X (для X = Y^S это product evaluation).

        Пока вызывающий код держит carrier канонического product (например,
        как domain стрелки h), повторные вызовы возвращают тот же carrier.
        """
        if obj is self.obj:
            return self.product
        prod_obj = self._products.get(id(obj))
        if prod_obj is not None and prod_obj.factors[0] is obj:
            return binary_product_witness(prod_obj)
        witness = binary_product(obj, self.base, self.limits)
        self._products[id(obj)] = witness.obj
        return witness

    def curry(self, obj: FinObj, h: FinArrow) -> FinArrow:
        """
        λh: X → Y^S для h: X × S → Y.

        Raises:
            ShapeMismatch: Если h.source не канонический X × S или h.target не Y
        """
        prod = self.product_with(obj)
        if h.source is not prod.obj:
            raise ShapeMismatch("curry: arrow domain must be the canonical product X × S of this exponential")
        if h.target is not self.codomain:
            raise ShapeMismatch("curry: arrow codomain must be the exponential codomain")

        mapping = []
        for x in obj.indices():
            images = tuple(h.mapping[prod.obj.index_of((x, s))] for s in self.base.indices())
            mapping.append(self.obj.index_of(images))
        return FinArrow(source=obj, target=self.obj, mapping=tuple(mapping))

    def uncurry(self, obj: FinObj, k: FinArrow) -> FinArrow:
        """
        X × S → Y для k: X → Y^S.

        Raises:
            ShapeMismatch: Если k не X → Y^S
        """
        if k.source is not obj:
            raise ShapeMismatch("uncurry: arrow domain must be the supplied object")
        if k.target is not self.obj:
            raise ShapeMismatch("uncurry: arrow codomain must be this exponential object")

        prod = self.product_with(obj)
        functions = self.obj.elements
        mapping = tuple(functions[k.mapping[x]][s] for x, s in prod.obj.elements)
        return FinArrow(source=prod.obj, target=self.codomain, mapping=mapping)


def exponential(
    codomain: FinObj,
    base: FinObj,
    limits: Optional[KernelLimits] = None,
) -> ExponentialWitness:
    """
    Exponential codomain^base.

    Args:
        codomain: Y
        base: S
        limits: Ограничения размера

    Returns:
        ExponentialWitness

    Raises:
        CarrierTooLarge: Если |Y|^|S| или |Y^S × S| превышает лимиты
    """
    limits = limits or DEFAULT_LIMITS
    ensure_within(codomain.size ** base.size, limits.max_exponential_size, "exponential")

    functions = list(itertools.product(range(codomain.size), repeat=base.size))
    obj = make_indexed_obj(
        functions,
        label=f"{codomain.label or 'Y'}^{base.label or 'S'}",
    )
    prod = binary_product(obj, base, limits)
    evaluation = FinArrow(
        source=prod.obj,
        target=codomain,
        mapping=tuple(functions[k][s] for k, s in prod.obj.elements),
    )
    logger.debug("exponential: |Y|=%d, |S|=%d -> %d functions", codomain.size, base.size, obj.size)
    return ExponentialWitness(
        obj=obj,
        base=base,
        codomain=codomain,
        product=prod,
        evaluation=evaluation,
        limits=limits,
    )

