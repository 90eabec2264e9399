"""Field resolution and template substitution.

Resolves `{{variable}}` placeholders against dynamically defined forms
and shape-shifting submission payloads.
"""

from formflow.strategies.field_resolution.catalog import CatalogLoader, extract_fields_from_form, to_camel_case
from formflow.strategies.field_resolution.engine import FieldResolutionEngine
from formflow.strategies.field_resolution.mapper import FieldMapper
from formflow.strategies.field_resolution.models import FieldCatalog, FieldDescriptor, SubmissionPayload
from formflow.strategies.field_resolution.payload import normalize_payload
from formflow.strategies.field_resolution.resolver import StableIdentityResolver
from formflow.strategies.field_resolution.scheduler import BatchScheduler
from formflow.strategies.field_resolution.special_fields import SemanticRole, SpecialFieldRecognizer
from formflow.strategies.field_resolution.substitution import VariableSubstitutionEngine, extract_variables
from formflow.strategies.field_resolution.system_variables import SystemVariableProvider

__all__ = [
    "BatchScheduler",
    "CatalogLoader",
    "FieldCatalog",
    "FieldDescriptor",
    "FieldMapper",
    "FieldResolutionEngine",
    "SemanticRole",
    "SpecialFieldRecognizer",
    "StableIdentityResolver",
    "SubmissionPayload",
    "SystemVariableProvider",
    "VariableSubstitutionEngine",
    "extract_fields_from_form",
    "extract_variables",
    "normalize_payload",
    "to_camel_case",
]
