"""Style rules, in the order the style guide presents them."""
import logging
from typing import Optional

from hstyle.config import Config

from ...syntax import NodeKind
from ..models import Rule
from . import bindings, data, expressions, indentation, module

logger = logging.getLogger(__name__)

K = NodeKind

# Registry of all available rules. Order is part of the contract: it breaks
# ties between violations reported on the same node.
RULES: tuple[Rule, ...] = (
    # Indentation
    Rule("indent-no-tabs", "indentation", frozenset({K.MODULE}),
         indentation.no_tabs, indentation.fix_no_tabs),
    Rule("indent-two-spaces", "indentation",
         frozenset({K.DO_BLOCK, K.CASE, K.WHERE_BLOCK, K.LET_BLOCK}),
         indentation.two_space_indent, indentation.fix_two_space_indent),

    # Line length
    Rule("line-length", "line length",
         frozenset({K.APPLICATION, K.OPERATOR, K.LIST, K.TUPLE, K.RECORD_LITERAL}),
         indentation.line_length, indentation.fix_line_length,
         options=(("soft_limit", 80), ("hard_limit", 120))),

    # Module header
    Rule("module-header-doc", "module header", frozenset({K.MODULE_HEADER}),
         module.module_header_doc),
    Rule("module-header-layout", "module header", frozenset({K.MODULE_HEADER}),
         module.module_header_layout, module.fix_module_header_layout),

    # Exports
    Rule("export-list-layout", "exports", frozenset({K.EXPORT_LIST}),
         module.export_list_layout, module.fix_export_list_layout),

    # Imports
    Rule("import-order", "imports", frozenset({K.MODULE}),
         module.import_order, module.fix_import_order,
         options=(("local_prefixes", ()),)),

    # Declarations
    Rule("blank-line-between-declarations", "declarations", frozenset({K.MODULE}),
         module.blank_line_between_declarations, module.fix_blank_line_between_declarations),
    Rule("top-level-signature", "declarations", frozenset({K.MODULE}),
         module.top_level_signature),

    # Functions
    Rule("function-documentation", "functions", frozenset({K.SIGNATURE}),
         module.function_documentation),

    # Data types
    Rule("sum-type-alignment", "data types", frozenset({K.DATA}),
         data.sum_type_alignment, data.fix_sum_type_alignment),
    Rule("deriving-parens", "data types", frozenset({K.DERIVING}),
         data.deriving_parens, data.fix_deriving_parens),
    Rule("record-layout", "data types", frozenset({K.RECORD}),
         data.record_layout, data.fix_record_layout),
    Rule("record-field-alignment", "data types", frozenset({K.FIELD}),
         data.record_field_alignment, data.fix_record_field_alignment),

    # Expressions
    Rule("application-layout", "expressions", frozenset({K.APPLICATION}),
         expressions.application_layout, expressions.fix_application_layout),
    Rule("case-arrow-alignment", "expressions", frozenset({K.ALTERNATIVE}),
         expressions.case_arrow_alignment, expressions.fix_case_arrow_alignment),

    # Do notation
    Rule("let-binding-order", "do notation", frozenset({K.LET_BLOCK}),
         bindings.let_binding_order, bindings.fix_let_binding_order),

    # Operators
    Rule("operator-leading", "operators", frozenset({K.OPERATOR}),
         expressions.operator_leading, expressions.fix_operator_leading),

    # Composition
    Rule("prefer-composition", "composition", frozenset({K.OPERATOR}),
         expressions.prefer_composition),

    # Where clauses
    Rule("where-clause-layout", "where clauses", frozenset({K.DECLARATION}),
         bindings.where_clause_layout, bindings.fix_where_clause_layout),

    # Let
    Rule("no-rhs-let", "let", frozenset({K.DECLARATION}),
         bindings.no_rhs_let),

    # Space salvage
    Rule("space-salvage", "space salvage", frozenset({K.DECLARATION}),
         bindings.space_salvage, options=(("salvage_column", 40),)),

    # Collections
    Rule("collection-layout", "collections",
         frozenset({K.LIST, K.TUPLE, K.RECORD_LITERAL}),
         expressions.collection_layout, expressions.fix_collection_layout),

    # If
    Rule("if-alignment", "if", frozenset({K.IF}),
         expressions.if_alignment, expressions.fix_if_alignment),
)


def all_rules() -> tuple[Rule, ...]:
    """Every built-in rule in registry order."""
    return RULES


def rules_for(kind: NodeKind, rules: Optional[tuple[Rule, ...]] = None) -> tuple[Rule, ...]:
    """Rules that apply to ``kind``, in registry order."""
    return tuple(r for r in (RULES if rules is None else rules) if kind in r.applies_to)


def get_rule(rule_id: str, rules: Optional[tuple[Rule, ...]] = None) -> Rule:
    """Look a rule up by id. Raises KeyError for unknown ids."""
    for rule in RULES if rules is None else rules:
        if rule.id == rule_id:
            return rule
    raise KeyError(rule_id)


def build_rules(config: Config) -> tuple[Rule, ...]:
    """
    Bind configured options to the built-in rules and drop disabled ones.

    Args:
        config: Loaded configuration

    Returns:
        Ordered rule tuple for the evaluator
    """
    known = {r.id for r in RULES}
    for rule_id in config.disabled_rules:
        if rule_id not in known:
            logger.warning(f"Unknown rule in disable list: {rule_id}")

    return tuple(
        rule.configure(
            soft_limit=config.soft_limit,
            hard_limit=config.hard_limit,
            salvage_column=config.salvage_column,
            local_prefixes=tuple(config.local_prefixes),
        )
        for rule in RULES
        if rule.id not in config.disabled_rules
    )


__all__ = [
    "RULES", "all_rules", "rules_for", "get_rule", "build_rules",
    "bindings", "data", "expressions", "indentation", "module",
]
