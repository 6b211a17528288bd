from .config import CachedHashInitializer, Configuration, Rule
from .errors import ContractViolation, EqVerifyError, EvaluationError, MalformedTypeError, VerificationError
from .markers import Marker, entity, immutable, marked, nonnull
from .checker import FieldsChecker, verify
from .prefab import PrefabValues
from .results import CheckKind, CheckResult, CheckStats, violations
from .verifier import EqualsVerifier

__version__ = "0.1.0"
