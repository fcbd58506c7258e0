import pytest

from cukerunner.context import ContextManager, ScenarioScope


class Context1:
    def __init__(self):
        self.i = 0


class Context2:
    pass


@pytest.fixture
def manager():
    contexts = ContextManager()
    yield contexts
    contexts.purge_contexts()


def test_contexts_are_created_when_needed(manager):
    assert len(manager) == 0
    ScenarioScope(Context1, manager)
    assert len(manager) == 1
    ScenarioScope(Context2, manager)
    assert len(manager) == 2


def test_same_context_types_share_the_same_instance(manager):
    context1_a = ScenarioScope(Context1, manager)
    context1_b = ScenarioScope(Context1, manager)
    context1_a.i = 42
    assert context1_a.i == context1_b.i
    assert manager.get(Context1).i == 42


def test_the_same_context_is_not_created_twice(manager):
    assert len(manager) == 0
    ScenarioScope(Context1, manager)
    assert len(manager) == 1
    ScenarioScope(Context1, manager)
    assert len(manager) == 1


def test_contexts_are_purged_explicitly_only(manager):
    assert len(manager) == 0
    context1_a = ScenarioScope(Context1, manager)
    assert len(manager) == 1
    context2 = ScenarioScope(Context2, manager)
    assert len(manager) == 2
    del context2
    assert len(manager) == 2
    manager.purge_contexts()
    assert len(manager) == 0
    assert context1_a.i == 0


def test_purged_context_is_recreated_fresh(manager):
    ScenarioScope(Context1, manager).i = 5
    manager.purge_contexts()
    assert ScenarioScope(Context1, manager).i == 0


def test_missing_attribute_raises(manager):
    with pytest.raises(AttributeError):
        ScenarioScope(Context2, manager).missing