from typing import Optional


class GraphRagError(Exception):
    """Base class for every error raised while structuring a document."""


class ConfigurationError(GraphRagError):
    """Invalid or unknown configuration, raised before any element is processed."""


class RuleError(GraphRagError):
    """A pipeline rule could not produce valid output.

    ``upstream_rule`` is filled in by the executor with the name of the
    stage whose output the failing rule was reading.
    """

    def __init__(self, message: str, rule_name: str, element_index: Optional[int] = None,
                 upstream_rule: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.rule_name = rule_name
        self.element_index = element_index
        self.upstream_rule = upstream_rule

    def __str__(self) -> str:
        location = f" at element {self.element_index}" if self.element_index is not None else ""
        upstream = f" (input produced by {self.upstream_rule})" if self.upstream_rule else ""
        return f"{self.rule_name}{location}: {self.message}{upstream}"


class OrderingViolationError(RuleError):
    """Reading order went backwards and could not be repaired."""


class GraphAssemblyError(GraphRagError):
    """Assembly received something no rule should ever produce."""
