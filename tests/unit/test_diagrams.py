"""
Тесты для Generic Diagram (Co)Limit Engine

Проверяет:
1. Валидацию FiniteDiagram (MalformedDiagram)
2. Пределы: пустая диаграмма, дискретная диаграмма (product),
   параллельная пара (equalizer), коспан (pullback)
3. Копределы: двойственные случаи
4. factor_cone / factor_cocone: медиатор и структурированные отказы
5. Сборку диаграммы из JSON контракта
"""

import pytest
from jsonschema import ValidationError as SchemaValidationError

from src.core.config import KernelLimits
from src.core.domain import (
    INITIAL,
    TERMINAL,
    CarrierTooLarge,
    MalformedDiagram,
    ShapeMismatch,
    compose,
    equal_arrow,
    make_arrow,
    make_obj,
)
from src.limits.diagrams import (
    DiagramArrow,
    FiniteDiagram,
    arrow_from_contract,
    diagram_from_contract,
    finite_colimit,
    finite_limit,
)


@pytest.fixture
def a():
    return make_obj(["a0", "a1", "a2"], label="A")


@pytest.fixture
def b():
    return make_obj(["b0", "b1"], label="B")


@pytest.fixture
def c():
    return make_obj(["c0", "c1"], label="C")


@pytest.fixture
def parallel_diagram(a, b):
    """A ⇉ B с f = [0, 1, 1], g = [0, 0, 1]"""
    f = make_arrow(a, b, [0, 1, 1])
    g = make_arrow(a, b, [0, 0, 1])
    return FiniteDiagram(
        labels=("A", "B"),
        objects={"A": a, "B": b},
        arrows=(
            DiagramArrow(name="f", source="A", target="B", arrow=f),
            DiagramArrow(name="g", source="A", target="B", arrow=g),
        ),
    )


@pytest.fixture
def cospan_diagram(a, b, c):
    """A → C ← B"""
    f = make_arrow(a, c, [0, 1, 1])
    g = make_arrow(b, c, [1, 1])
    return FiniteDiagram.from_hom_sets(
        ["A", "B", "C"],
        {"A": a, "B": b, "C": c},
        {("A", "C"): [f], ("B", "C"): [g]},
    )


# =============================================================================
# DIAGRAM MODEL
# =============================================================================


class TestFiniteDiagram:
    """Тесты для модели FiniteDiagram"""

    def test_from_hom_sets_names(self, cospan_diagram):
        """Стрелки из hom-sets получают имена по меткам"""
        names = [entry.name for entry in cospan_diagram.arrows]
        assert names == ["A->C#0", "B->C#0"]

    def test_objects_kept_by_identity(self, a, cospan_diagram):
        """Диаграмма хранит объекты по идентичности"""
        assert cospan_diagram.obj("A") is a

    def test_unknown_label(self, a, b):
        """Стрелка с неизвестной меткой отклоняется"""
        f = make_arrow(a, b, [0, 0, 0])
        with pytest.raises(MalformedDiagram, match="unknown target label"):
            FiniteDiagram(
                labels=("A",),
                objects={"A": a},
                arrows=(DiagramArrow(name="f", source="A", target="B", arrow=f),),
            )

    def test_arrow_object_mismatch(self, a, b):
        """Объекты стрелки должны совпадать с объектами меток"""
        twin = make_obj(["b0", "b1"])
        f = make_arrow(a, twin, [0, 0, 0])
        with pytest.raises(MalformedDiagram, match="codomain is not the object labelled 'B'"):
            FiniteDiagram(
                labels=("A", "B"),
                objects={"A": a, "B": b},
                arrows=(DiagramArrow(name="f", source="A", target="B", arrow=f),),
            )

    def test_labels_must_match_objects(self, a):
        """Метки и объекты должны совпадать"""
        with pytest.raises(MalformedDiagram, match="differ"):
            FiniteDiagram(labels=("A", "Z"), objects={"A": a})

    def test_duplicate_arrow_names(self, a):
        """Повторяющиеся имена стрелок отклоняются"""
        loop = make_arrow(a, a, [0, 1, 2])
        with pytest.raises(MalformedDiagram, match="duplicate structure arrow"):
            FiniteDiagram(
                labels=("A",),
                objects={"A": a},
                arrows=(
                    DiagramArrow(name="l", source="A", target="A", arrow=loop),
                    DiagramArrow(name="l", source="A", target="A", arrow=loop),
                ),
            )


# =============================================================================
# LIMITS
# =============================================================================


class TestFiniteLimit:
    """Тесты для finite_limit"""

    def test_empty_diagram_is_terminal(self):
        """Предел пустой диаграммы — терминальный объект"""
        witness = finite_limit(FiniteDiagram(labels=(), objects={}))
        assert witness.apex is TERMINAL

        x = make_obj(["x0", "x1"])
        result = witness.factor_cone(x, {})
        assert result.factored
        assert result.mediator.target is TERMINAL

    def test_discrete_diagram_is_product(self, a, b):
        """Предел дискретной диаграммы — product"""
        diagram = FiniteDiagram(labels=("A", "B"), objects={"A": a, "B": b})
        witness = finite_limit(diagram)
        assert witness.apex.size == 6
        assert witness.legs["A"].mapping == (0, 0, 1, 1, 2, 2)
        assert witness.legs["B"].mapping == (0, 1, 0, 1, 0, 1)

    def test_parallel_pair_is_equalizer(self, a, parallel_diagram):
        """Предел параллельной пары — equalizer"""
        witness = finite_limit(parallel_diagram)
        # f и g совпадают на a0 и a2
        assert witness.apex.size == 2
        assert witness.legs["A"].mapping == (0, 2)
        assert witness.legs["A"].target is a

    def test_legs_form_a_cone(self, parallel_diagram):
        """Legs предела образуют коммутирующий конус"""
        witness = finite_limit(parallel_diagram)
        for entry in parallel_diagram.arrows:
            assert equal_arrow(
                compose(entry.arrow, witness.legs[entry.source]),
                witness.legs[entry.target],
            )

    def test_cospan_is_pullback(self, cospan_diagram):
        """Предел cospan — pullback"""
        witness = finite_limit(cospan_diagram)
        # пары (a, b) с f(a) = g(b) = 1: a ∈ {1, 2}, b ∈ {0, 1}
        assert witness.apex.size == 4
        assert witness.legs["A"].mapping == (1, 1, 2, 2)
        assert witness.legs["B"].mapping == (0, 1, 0, 1)

    def test_factor_cone(self, a, parallel_diagram):
        """Коммутирующий конус факторизуется через предел"""
        witness = finite_limit(parallel_diagram)
        apex = make_obj(["p"])
        leg_a = make_arrow(apex, a, [2])
        leg_b = compose(parallel_diagram.arrows[0].arrow, leg_a)

        result = witness.factor_cone(apex, {"A": leg_a, "B": leg_b})
        assert result.factored
        assert result.mediator.mapping == (1,)
        assert equal_arrow(compose(witness.legs["A"], result.mediator), leg_a)

    def test_factor_cone_not_commuting(self, a, b, parallel_diagram):
        """Некоммутирующий конус не факторизуется"""
        witness = finite_limit(parallel_diagram)
        apex = make_obj(["p"])
        result = witness.factor_cone(apex, {"A": make_arrow(apex, a, [1]), "B": make_arrow(apex, b, [1])})
        assert not result.factored
        assert "does not commute with 'g'" in result.reason

    def test_factor_cone_wrong_shape(self, a, parallel_diagram):
        """Конус без нужных legs отклоняется"""
        witness = finite_limit(parallel_diagram)
        apex = make_obj(["p"])
        result = witness.factor_cone(apex, {"A": make_arrow(apex, a, [0])})
        assert not result.factored
        assert "missing leg for 'B'" in result.reason

    def test_arrow_limit(self, a, b, parallel_diagram):
        """Лимит числа стрелок диаграммы"""
        with pytest.raises(CarrierTooLarge, match="diagram arrows"):
            finite_limit(parallel_diagram, KernelLimits(max_diagram_arrows=1))


# =============================================================================
# COLIMITS
# =============================================================================


class TestFiniteColimit:
    """Тесты для finite_colimit"""

    def test_empty_diagram_is_initial(self):
        """Копредел пустой диаграммы — начальный объект"""
        witness = finite_colimit(FiniteDiagram(labels=(), objects={}))
        assert witness.apex is INITIAL

    def test_discrete_diagram_is_coproduct(self, a, b):
        """Копредел дискретной диаграммы — coproduct"""
        diagram = FiniteDiagram(labels=("A", "B"), objects={"A": a, "B": b})
        witness = finite_colimit(diagram)
        assert witness.apex.size == 5

    def test_parallel_pair_is_coequalizer(self, b, parallel_diagram):
        """Копредел параллельной пары — coequalizer"""
        witness = finite_colimit(parallel_diagram)
        # f(1) = 1, g(1) = 0 склеивают b0 и b1
        assert witness.apex.size == 1
        assert witness.legs["B"].source is b

    def test_legs_form_a_cocone(self, parallel_diagram):
        """Legs копредела образуют коммутирующий коконус"""
        witness = finite_colimit(parallel_diagram)
        for entry in parallel_diagram.arrows:
            assert equal_arrow(
                compose(witness.legs[entry.target], entry.arrow),
                witness.legs[entry.source],
            )

    def test_span_is_pushout(self, c):
        """Копредел span — pushout"""
        x = make_obj(["x0"])
        f = make_arrow(x, c, [0])
        g = make_arrow(x, c, [1])
        diagram = FiniteDiagram.from_hom_sets(["X", "C"], {"X": x, "C": c}, {("X", "C"): [f, g]})
        witness = finite_colimit(diagram)
        assert witness.apex.size == 1

    def test_factor_cocone(self, a, b, parallel_diagram):
        """Коммутирующий коконус факторизуется через копредел"""
        witness = finite_colimit(parallel_diagram)
        z = make_obj(["z0", "z1"])
        leg_b = make_arrow(b, z, [1, 1])
        leg_a = make_arrow(a, z, [1, 1, 1])

        result = witness.factor_cocone(z, {"A": leg_a, "B": leg_b})
        assert result.factored
        assert equal_arrow(compose(result.mediator, witness.legs["B"]), leg_b)

    def test_factor_cocone_not_commuting(self, a, b, parallel_diagram):
        """Некоммутирующий коконус не факторизуется"""
        witness = finite_colimit(parallel_diagram)
        z = make_obj(["z0", "z1"])
        leg_b = make_arrow(b, z, [0, 1])
        leg_a = make_arrow(a, z, [0, 1, 1])

        result = witness.factor_cocone(z, {"A": leg_a, "B": leg_b})
        assert not result.factored
        assert "does not commute with 'g'" in result.reason


# =============================================================================
# CONTRACTS
# =============================================================================


class TestDiagramContracts:
    """Сборка диаграмм и стрелок из JSON"""

    @pytest.fixture
    def document(self):
        return {
            "objects": [
                {"label": "A", "elements": ["a0", "a1", "a2"]},
                {"label": "B", "elements": ["b0", "b1"]},
            ],
            "arrows": [
                {"name": "f", "source": "A", "target": "B", "mapping": [0, 1, 1]},
                {"source": "A", "target": "B", "mapping": [0, 0, 1]},
            ],
        }

    def test_diagram_from_contract(self, document):
        """Диаграмма собирается из JSON-документа"""
        diagram = diagram_from_contract(document)
        assert diagram.labels == ("A", "B")
        assert [entry.name for entry in diagram.arrows] == ["f", "A->B#1"]
        assert finite_limit(diagram).apex.size == 2

    def test_schema_violation(self, document):
        """Документ, нарушающий схему, отклоняется"""
        del document["objects"][0]["elements"]
        with pytest.raises(SchemaValidationError):
            diagram_from_contract(document)

    def test_unknown_label_in_contract(self, document):
        """Ссылка на неизвестную метку в документе отклоняется"""
        document["arrows"][0]["target"] = "Z"
        with pytest.raises(MalformedDiagram, match="unknown label"):
            diagram_from_contract(document)

    def test_duplicate_label_in_contract(self, document):
        """Повторяющиеся метки в документе отклоняются"""
        document["objects"][1]["label"] = "A"
        with pytest.raises(MalformedDiagram, match="duplicate object label"):
            diagram_from_contract(document)

    def test_arrow_from_contract(self, a, b):
        """Стрелка собирается из JSON-документа"""
        arrow = arrow_from_contract({"domain_size": 3, "codomain_size": 2, "mapping": [1, 0, 1]}, a, b)
        assert arrow.mapping == (1, 0, 1)
        assert arrow.source is a

    def test_arrow_from_contract_size_mismatch(self, a, b):
        """Размеры документа должны совпадать с объектами"""
        with pytest.raises(ShapeMismatch, match="do not match"):
            arrow_from_contract({"domain_size": 2, "codomain_size": 2, "mapping": [1, 0]}, a, b)
