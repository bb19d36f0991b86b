# tests/core/engine/test_planner_invalid_graph.py
"""
Testes de validação de grafos inválidos no planner do engine.

Os testes asseguram que:
- dependências inexistentes são detectadas e rejeitadas
- ciclos explícitos entre etapas são identificados
- nenhuma ordenação parcial é produzida em grafos inválidos
"""
import pytest

try:
    from imagestage.core.engine.planner import CycleDetectedError, UnknownDependencyError, plan_execution
except Exception as e:
    plan_execution = None
    CycleDetectedError = None
    UnknownDependencyError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing planner errors. Implement:
- CycleDetectedError
- UnknownDependencyError
Import error: {_IMPORT_ERR}
""")


def test_cycle_detected(DummyStep):
    """
    Um ciclo invalida o grafo inteiro; nenhuma ordem é devolvida.
    """
    _require_imports()
    steps = [
        DummyStep(step_id="a", depends_on=["c"]),
        DummyStep(step_id="b", depends_on=["a"]),
        DummyStep(step_id="c", depends_on=["b"]),
    ]
    with pytest.raises(CycleDetectedError):
        plan_execution(steps)


def test_unknown_dependency(DummyStep):
    _require_imports()
    steps = [DummyStep(step_id="a", depends_on=["missing"])]
    with pytest.raises(UnknownDependencyError):
        plan_execution(steps)


def test_duplicate_ids_rejected(DummyStep):
    _require_imports()
    with pytest.raises(ValueError):
        plan_execution([DummyStep(step_id="a"), DummyStep(step_id="a")])
