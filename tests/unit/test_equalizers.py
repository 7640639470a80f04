"""
Тесты для Equalizer / Coequalizer

Проверяет:
1. Equalizer: сохранение порядка, включение, факторизацию fork
2. Coequalizer: классы эквивалентности, представители по первому появлению
3. Универсальные свойства (существование и единственность медиатора)
4. Структурированные отказы для некоммутирующих кандидатов
"""

import pytest

from src.core.domain import (
    ShapeMismatch,
    compose,
    equal_arrow,
    is_epic,
    is_monic,
    make_arrow,
    make_obj,
)
from src.limits.equalizers import (
    coequalizer,
    equalizer,
    factor_through_coequalizer,
    factor_through_equalizer,
)


@pytest.fixture
def x():
    return make_obj(["x0", "x1", "x2", "x3"], label="X")


@pytest.fixture
def y():
    return make_obj(["y0", "y1", "y2"], label="Y")


@pytest.fixture
def parallel_pair(x, y):
    f = make_arrow(x, y, [0, 1, 2, 2])
    g = make_arrow(x, y, [0, 2, 2, 1])
    return f, g


# =============================================================================
# EQUALIZER
# =============================================================================


class TestEqualizer:
    """Тесты для equalizer"""

    def test_agreement_subset(self, x, parallel_pair):
        """Equalizer — подмножество, где f и g совпадают"""
        f, g = parallel_pair
        witness = equalizer(f, g)
        assert witness.obj.size == 2
        assert witness.inclusion.mapping == (0, 2)
        assert witness.inclusion.target is x
        assert list(witness.obj.elements) == ["x0", "x2"]

    def test_inclusion_is_monic_and_equalizes(self, parallel_pair):
        """Включение monic и уравнивает пару"""
        f, g = parallel_pair
        inclusion = equalizer(f, g).inclusion
        assert is_monic(inclusion)
        assert equal_arrow(compose(f, inclusion), compose(g, inclusion))

    def test_equal_pair_gives_everything(self, x, parallel_pair):
        """Для f = g equalizer — весь domain"""
        f, _ = parallel_pair
        witness = equalizer(f, f)
        assert witness.obj.size == x.size

    def test_not_parallel(self, x, y, parallel_pair):
        """Непараллельная пара отклоняется"""
        f, _ = parallel_pair
        other = make_obj(["z"])
        h = make_arrow(x, other, [0, 0, 0, 0])
        with pytest.raises(ShapeMismatch, match="share a codomain"):
            equalizer(f, h)

    def test_factor_fork(self, parallel_pair):
        """Уравнивающая вилка факторизуется единственным образом"""
        f, g = parallel_pair
        w = make_obj(["w0", "w1", "w2"], label="W")
        fork = make_arrow(w, f.source, [2, 0, 2])
        witness = equalizer(f, g)

        result = factor_through_equalizer(f, g, witness.inclusion, fork)
        assert result.factored
        assert result.mediator.mapping == (1, 0, 1)
        assert equal_arrow(compose(witness.inclusion, result.mediator), fork)

    def test_factor_rejects_non_equalizing_fork(self, parallel_pair):
        """Неуравнивающая вилка не факторизуется"""
        f, g = parallel_pair
        w = make_obj(["w0"])
        fork = make_arrow(w, f.source, [1])
        result = factor_through_equalizer(f, g, equalizer(f, g).inclusion, fork)
        assert not result.factored
        assert result.mediator is None
        assert "does not equalize" in result.reason

    def test_factor_rejects_wrong_codomain(self, y, parallel_pair):
        """Вилка в чужой объект отклоняется"""
        f, g = parallel_pair
        fork = make_arrow(y, y, [0, 1, 2])
        result = factor_through_equalizer(f, g, equalizer(f, g).inclusion, fork)
        assert not result.factored
        assert "fork codomain" in result.reason


# =============================================================================
# COEQUALIZER
# =============================================================================


class TestCoequalizer:
    """Тесты для coequalizer"""

    def test_two_classes(self):
        """Codomain размера 4, объединение (0,2) и (1,3): ровно 2 класса"""
        domain = make_obj(["d0", "d1"])
        codomain = make_obj(["c0", "c1", "c2", "c3"])
        f = make_arrow(domain, codomain, [0, 1])
        g = make_arrow(domain, codomain, [2, 3])

        witness = coequalizer(f, g)
        assert witness.obj.size == 2
        assert witness.quotient.mapping == (0, 1, 0, 1)
        assert witness.representatives == (0, 1)

    def test_first_discovery_representatives(self):
        """Представители классов — первые найденные элементы"""
        domain = make_obj(["d0", "d1"])
        codomain = make_obj(["c0", "c1", "c2", "c3", "c4"])
        f = make_arrow(domain, codomain, [4, 3])
        g = make_arrow(domain, codomain, [1, 2])

        witness = coequalizer(f, g)
        assert witness.representatives == (0, 1, 2)
        assert witness.quotient.mapping == (0, 1, 2, 2, 1)
        assert list(witness.obj.elements) == [0, 1, 2]

    def test_transitive_closure(self, x, y):
        """Отношение замыкается транзитивно"""
        f = make_arrow(x, y, [0, 1, 0, 0])
        g = make_arrow(x, y, [1, 2, 0, 0])
        witness = coequalizer(f, g)
        assert witness.obj.size == 1
        assert is_epic(witness.quotient)

    def test_quotient_coequalizes(self, parallel_pair):
        """Фактор-отображение коуравнивает пару"""
        f, g = parallel_pair
        q = coequalizer(f, g).quotient
        assert equal_arrow(compose(q, f), compose(q, g))

    def test_not_parallel(self, x, y):
        """Непараллельная пара отклоняется"""
        f = make_arrow(x, y, [0, 0, 0, 0])
        g = make_arrow(y, y, [0, 1, 2])
        with pytest.raises(ShapeMismatch, match="share a domain"):
            coequalizer(f, g)

    def test_factor_cocone(self, parallel_pair):
        """Коуравнивающий коконус факторизуется"""
        f, g = parallel_pair
        witness = coequalizer(f, g)
        z = make_obj(["z0", "z1"])
        cocone = make_arrow(f.target, z, [1, 0, 0])

        result = factor_through_coequalizer(witness.quotient, cocone)
        assert result.factored
        assert equal_arrow(compose(result.mediator, witness.quotient), cocone)

    def test_factor_rejects_non_constant_cocone(self, parallel_pair):
        """Коконус, не постоянный на классе, отклоняется"""
        f, g = parallel_pair
        witness = coequalizer(f, g)
        z = make_obj(["z0", "z1"])
        cocone = make_arrow(f.target, z, [0, 0, 1])

        result = factor_through_coequalizer(witness.quotient, cocone)
        assert not result.factored
        assert "not constant" in result.reason
