"""Tests for canonical layouts: idempotence, purity and rendering."""
import pytest

from hstyle.core.errors import RuleInternalError
from hstyle.core.linter.canonical import canonicalize, render_layout
from hstyle.core.linter.engine import evaluate
from hstyle.core.linter.models import Rule, Violation
from hstyle.core.linter.rules import get_rule
from hstyle.core.layout import compute_layout
from hstyle.core.syntax import Span

from helpers import CANONICAL, CASES, K, Tree, canonical_tree


def _always(node, layout):
    """Test rule that never accepts anything."""
    yield Violation(rule_id="always", span=node.span, message="always wrong")


def _identity_fix(node, layout):
    return layout


def _broken_fix(node, layout):
    raise RuntimeError("boom")


# ---------------------------------------------------------------------------
# Idempotence: a fixed layout re-checks clean and fixing again changes nothing
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("name", sorted(CASES))
def test_fixes_are_idempotent(name):
    source, tree = CASES[name]()

    for violation in evaluate(tree, source):
        rule = get_rule(violation.rule_id)
        fixed = canonicalize(violation)
        if rule.advisory:
            assert fixed is None
            continue

        assert rule.check(violation.node, fixed) == []
        assert rule.fix(violation.node, fixed) == fixed


def test_fix_does_not_touch_evaluated_layout():
    source, tree = CASES["sum_type"]()
    violation = [v for v in evaluate(tree, source) if v.rule_id == "sum-type-alignment"][0]
    original = violation.layout

    fixed = canonicalize(violation)

    assert fixed != original
    assert violation.layout is original
    assert original.first("=").position.line == 1


# ---------------------------------------------------------------------------
# Contract failures
# ---------------------------------------------------------------------------


def test_advisory_rule_has_no_fix():
    source, tree = CASES["rhs_let"]()
    violation = [v for v in evaluate(tree, source) if v.rule_id == "no-rhs-let"][0]

    assert canonicalize(violation) is None


def test_violation_without_context():
    violation = Violation(rule_id="if-alignment", span=Span.of(1, 0, 3, 9), message="x")

    with pytest.raises(ValueError):
        canonicalize(violation)


def test_non_idempotent_fix_is_internal_error():
    source, tree = CASES["if"]()
    rules = (Rule("always", "test", frozenset({K.IF}), _always, _identity_fix),)
    violation = evaluate(tree, source, rules)[0]

    with pytest.raises(RuleInternalError) as excinfo:
        canonicalize(violation, rules)

    assert excinfo.value.rule_id == "always"
    assert "idempotent" in excinfo.value.reason


def test_raising_fix_is_internal_error():
    source, tree = CASES["if"]()
    rules = (Rule("always", "test", frozenset({K.IF}), _always, _broken_fix),)
    violation = evaluate(tree, source, rules)[0]

    with pytest.raises(RuleInternalError) as excinfo:
        canonicalize(violation, rules)

    assert excinfo.value.rule_id == "always"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def test_render_unchanged_layout_reproduces_source():
    tree = canonical_tree()
    model = compute_layout(tree, CANONICAL)
    describe = tree.children[-1]

    lines = CANONICAL.split('\n')
    assert render_layout(describe, model[describe], CANONICAL) == '\n'.join(lines[25:32])


def test_render_leaf_is_empty():
    tree = canonical_tree()
    model = compute_layout(tree, CANONICAL)
    atom = tree.children[-1].children[0]

    assert atom.kind == K.ATOM
    assert render_layout(atom, model[atom], CANONICAL) == ""


def test_render_keeps_touching_tokens_together():
    source = "xs = [1,2]\n"
    t = Tree(source)
    xs = t(K.LIST, (1, "["), t(K.ATOM, (1, "1")), t(K.ATOM, (1, "2")), end=(1, "]"))

    model = compute_layout(xs, source)

    assert render_layout(xs, model[xs], source) == "     [1,2]"
