"""DocGate - policy-gated document collections.

Declarative collection schemas, a rule engine validating documents
against them, and a policy gate deciding who may create, read, update,
archive and delete, served over FastAPI.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
