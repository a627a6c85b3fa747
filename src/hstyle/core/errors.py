"""Fatal error taxonomy for a style-check run.

Violations are not errors. These exceptions abort evaluation of a single
source unit; other units in the same run keep going.
"""


class StyleCheckError(Exception):
    """Base class for fatal per-unit failures."""


class MalformedInputError(StyleCheckError):
    """The syntax tree does not agree with the source text it claims to describe."""


class RuleInternalError(StyleCheckError):
    """A rule broke its own contract (raised, or produced a non-idempotent fix).

    This is a tooling defect, never a problem with the code being checked.
    """

    def __init__(self, rule_id: str, reason: str):
        super().__init__(f"rule {rule_id!r}: {reason}")
        self.rule_id = rule_id
        self.reason = reason
