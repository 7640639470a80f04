"""
Тесты для capability bundle FinSet

Проверяет, что все операции доступны через bundle, разделяют limits и
классификатор, и дают те же результаты, что модули ядра.
"""

import pytest

from src.core.config import DEFAULT_LIMITS, KernelLimits
from src.core.domain import CarrierTooLarge, ShapeMismatch, make_arrow, make_obj
from src.limits.diagrams import FiniteDiagram
from src.topos.capabilities import FinSetCapabilities, finset_capabilities


@pytest.fixture
def caps():
    return finset_capabilities()


@pytest.fixture
def a():
    return make_obj(["a0", "a1"], label="A")


@pytest.fixture
def b():
    return make_obj(["b0", "b1", "b2"], label="B")


class TestFinSetCapabilities:
    """Тесты для finset_capabilities"""

    def test_default_limits(self, caps):
        """По умолчанию bundle использует DEFAULT_LIMITS"""
        assert isinstance(caps, FinSetCapabilities)
        assert caps.limits is DEFAULT_LIMITS

    def test_category_operations(self, caps, a, b):
        """compose, identity и equal доступны через bundle"""
        f = make_arrow(a, b, [0, 2])
        assert caps.equal(caps.compose(caps.identity(b), f), f)

    def test_limits_and_colimits(self, caps, a, b):
        """Пределы и копределы через bundle"""
        prod = caps.product([a, b])
        assert prod.obj.size == 6
        mediator = caps.tuple(a, [caps.identity(a), make_arrow(a, b, [1, 1])], prod.obj)
        assert mediator.mapping == (1, 4)

        coprod = caps.coproduct([a, b])
        assert caps.cotuple(coprod.obj, [make_arrow(a, a, [0, 0]), make_arrow(b, a, [1, 1, 1])], a).mapping == (
            0,
            0,
            1,
            1,
            1,
        )

        f = make_arrow(a, b, [0, 2])
        g = make_arrow(a, b, [0, 1])
        assert caps.equalize(f, g).obj.size == 1
        assert caps.coequalize(f, g).obj.size == 2

    def test_tuple_rejects_foreign_codomain(self, caps, a, b):
        """caps.tuple проверяет, что leg попадает именно в множитель"""
        prod = caps.product([a, b])
        impostor = make_obj(["u", "v", "w"])
        with pytest.raises(ShapeMismatch, match="codomain is not factor 1"):
            caps.tuple(a, [caps.identity(a), make_arrow(a, impostor, [1, 1])], prod.obj)

    def test_pullback_and_pushout(self, caps, a, b):
        """Pullback и pushout через bundle"""
        f = make_arrow(a, b, [0, 2])
        g = make_arrow(a, b, [2, 1])
        assert caps.pullback(f, g).apex.size == 1
        assert caps.pushout(f, g).apex.size == 4

    def test_exponential_round_trip(self, caps, a, b):
        """curry/uncurry через bundle"""
        witness = caps.exponential(b, a)
        prod = witness.product_with(a)
        h = make_arrow(prod.obj, b, [0, 1, 2, 2])
        k = caps.curry(witness, a, h)
        assert caps.equal(caps.uncurry(witness, a, k), h)

    def test_characteristic_and_power_object(self, caps, a, b):
        """Классификатор и power object разделяются bundle"""
        chi = caps.characteristic(make_arrow(a, b, [0, 2]))
        assert chi.mapping == (1, 0, 1)
        power = caps.power_object(b)
        assert power.classifier is caps.classifier
        assert power.obj.size == 8

    def test_finite_diagrams(self, caps, a, b):
        """Конечные пределы и копределы диаграмм через bundle"""
        diagram = FiniteDiagram(labels=("A", "B"), objects={"A": a, "B": b})
        assert caps.finite_limit(diagram).apex.size == 6
        assert caps.finite_colimit(diagram).apex.size == 5

    def test_limits_are_shared(self, a, b):
        """Ограничения bundle применяются ко всем операциям"""
        caps = finset_capabilities(KernelLimits(max_product_size=4, max_exponential_size=4))
        with pytest.raises(CarrierTooLarge):
            caps.product([a, b])
        with pytest.raises(CarrierTooLarge):
            caps.exponential(b, a)
        with pytest.raises(CarrierTooLarge):
            caps.power_object(b)
