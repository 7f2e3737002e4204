"""Domain services for DocGate.

Services contain the validation and authorization logic shared by every
collection. They talk to storage only through the data service interface.
"""

from docgate.domain.services.policy_gate import Operation, PolicyGate
from docgate.domain.services.rule_engine import RuleEngine, compare, evaluate_requirement
from docgate.domain.services.sanitizer import apply_defaults, filter_by_props

__all__ = [
    "Operation",
    "PolicyGate",
    "RuleEngine",
    "apply_defaults",
    "compare",
    "evaluate_requirement",
    "filter_by_props",
]
