"""
Структурированные результаты проверок кандидатов.

Некоммутирующий конус или коконус — ожидаемый, проверяемый исход
(property-based проверки законов регулярно подают такие кандидаты),
поэтому он возвращается значением, а не исключением.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.domain.arrow import FinArrow


@dataclass(frozen=True)
class FactorResult:
    """Результат факторизации конуса/коконуса через (ко)предел."""

    factored: bool
    mediator: Optional[FinArrow] = None
    reason: str = ""

    @classmethod
    def success(cls, mediator: FinArrow) -> "FactorResult":
        return cls(factored=True, mediator=mediator)

    @classmethod
    def failure(cls, reason: str) -> "FactorResult":
        return cls(factored=False, reason=reason)


@dataclass(frozen=True)
class Certification:
    """Результат сертификации кандидата на роль pullback."""

    valid: bool
    reason: str = ""


@dataclass(frozen=True)
class LeqResult:
    """Результат сравнения подобъектов m1 ≤ m2."""

    holds: bool
    mediator: Optional[FinArrow] = None
    reason: str = ""


@dataclass(frozen=True)
class IsoWitness:
    """Пара взаимно обратных стрелок."""

    forward: FinArrow
    backward: FinArrow
