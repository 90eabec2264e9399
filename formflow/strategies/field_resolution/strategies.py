"""Resolution strategies, strongest first.

Each strategy is a pure lookup over (request, catalog). default_strategies()
fixes the precedence: an earlier strategy always pre-empts a later, looser
one (a stable-id match is never shadowed by a similarity match).
"""

import re

from formflow.interfaces.resolution import BaseResolutionStrategy, ResolutionRequest, ResolutionResult
from formflow.strategies.field_resolution.catalog import to_camel_case
from formflow.strategies.field_resolution.models import FieldCatalog, FieldDescriptor
from formflow.strategies.field_resolution.special_fields import SemanticRole, find_role_value


def _field_value(request: ResolutionRequest, field: FieldDescriptor | None, strategy: str) -> ResolutionResult:
    if field is not None and field.id and request.payload.has(field.id):
        return ResolutionResult.hit(request.payload.get(field.id), strategy)
    return ResolutionResult.miss()


class MappedFieldsStrategy(BaseResolutionStrategy):
    """1. An upstream `__mappedFields` entry whose displayKey matches, ignoring case."""

    uses_catalog = False

    @property
    def name(self) -> str:
        return "mapped_fields"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        wanted = request.variable_name.lower()
        for entry in request.payload.mapped_fields:
            if entry.display_key.lower() == wanted:
                return ResolutionResult.hit(entry.value, self.name)
        return ResolutionResult.miss()


class DirectKeyStrategy(BaseResolutionStrategy):
    """2. The variable name is itself a payload key."""

    uses_catalog = False

    @property
    def name(self) -> str:
        return "direct_key"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        if request.payload.has(request.variable_name):
            return ResolutionResult.hit(request.payload.get(request.variable_name), self.name)
        return ResolutionResult.miss()


class StableIdStrategy(BaseResolutionStrategy):
    """3. A field whose stable id equals the variable name, read under its current id."""

    @property
    def name(self) -> str:
        return "stable_id"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        field = catalog.find(lambda f: f.stable_id == request.variable_name)
        return _field_value(request, field, self.name)


class CustomMappingStrategy(BaseResolutionStrategy):
    """4. A field whose author-supplied mapping equals the variable name."""

    @property
    def name(self) -> str:
        return "custom_mapping"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        field = catalog.find(lambda f: f.mapping == request.variable_name)
        return _field_value(request, field, self.name)


class LabelStrategy(BaseResolutionStrategy):
    """5. A field whose label equals the variable name (ignoring case) or camelCases to it."""

    @property
    def name(self) -> str:
        return "label"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        wanted = request.variable_name

        def matches(field: FieldDescriptor) -> bool:
            if not field.label:
                return False
            return field.label.lower() == wanted.lower() or to_camel_case(field.label) == wanted

        return _field_value(request, catalog.find(matches), self.name)


class SemanticRoleStrategy(BaseResolutionStrategy):
    """6. The variable names a semantic role (email, phone, name, ...)."""

    @property
    def name(self) -> str:
        return "semantic_role"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        role = SemanticRole.from_variable(request.variable_name)
        if role is None:
            return ResolutionResult.miss()

        found = find_role_value(role, catalog, request.payload)
        if found is None:
            return ResolutionResult.miss()
        return ResolutionResult.hit(found[0], self.name)


class CanonicalAliasStrategy(BaseResolutionStrategy):
    """7. Common literal spellings of first name, last name and lead id."""

    uses_catalog = False

    # (variable spellings, literal payload keys, key substrings)
    ALIASES: tuple[tuple[frozenset[str], tuple[str, ...], tuple[str, ...]], ...] = (
        (
            frozenset({"firstname", "first_name", "fname"}),
            ("first_name", "firstname", "fname", "first-name", "givenName"),
            ("first_name", "firstname", "fname"),
        ),
        (
            frozenset({"lastname", "last_name", "lname"}),
            ("last_name", "lastname", "lname", "last-name", "surname", "familyName"),
            ("last_name", "lastname", "lname"),
        ),
        (
            frozenset({"leadid", "lead_id"}),
            ("lead_id", "leadid", "lead-id", "id", "submission_id", "submissionId"),
            (),
        ),
    )

    @property
    def name(self) -> str:
        return "canonical_alias"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        wanted = request.variable_name.lower()
        payload = request.payload

        for spellings, literal_keys, substrings in self.ALIASES:
            if wanted not in spellings:
                continue

            for key in literal_keys:
                if payload.has(key):
                    return ResolutionResult.hit(payload.get(key), self.name)

            for key in payload.values:
                key_lower = key.lower()
                if substrings:
                    if any(s in key_lower for s in substrings):
                        return ResolutionResult.hit(payload.get(key), self.name)
                elif "lead" in key_lower and "id" in key_lower:
                    return ResolutionResult.hit(payload.get(key), self.name)

        return ResolutionResult.miss()


def _overlaps(a: str, b: str) -> bool:
    """True when either string contains the other, ignoring case. Empty strings never overlap."""
    if not a or not b:
        return False
    a, b = a.lower(), b.lower()
    return a in b or b in a


class SimilarityStrategy(BaseResolutionStrategy):
    """8. A field id/key or payload key that contains the variable name, or vice versa."""

    @property
    def name(self) -> str:
        return "similarity"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        wanted = request.variable_name

        field = catalog.find(
            lambda f: request.payload.has(f.id) and (_overlaps(f.id, wanted) or _overlaps(f.key or "", wanted))
        )
        if field is not None:
            return ResolutionResult.hit(request.payload.get(field.id), self.name)

        for key in request.payload.values:
            if _overlaps(key, wanted):
                return ResolutionResult.hit(request.payload.get(key), self.name)

        return ResolutionResult.miss()


_CAMEL_HUMP = re.compile(r"([A-Z])")


def to_snake_case(name: str) -> str:
    """'firstName' -> 'first_name'."""
    return _CAMEL_HUMP.sub(r"_\1", name).lower().lstrip("_")


class CommonPrefixStrategy(BaseResolutionStrategy):
    """9. The variable name behind a UI-library prefix such as 'inquiry_form_'."""

    uses_catalog = False

    PREFIXES = ("inquiry_form_", "form_", "field_", "input_")

    @property
    def name(self) -> str:
        return "common_prefix"

    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        wanted = request.variable_name
        for prefix in self.PREFIXES:
            candidates = dict.fromkeys(
                (prefix + wanted, prefix + wanted.lower(), prefix + to_snake_case(wanted))
            )
            for key in candidates:
                if request.payload.has(key):
                    return ResolutionResult.hit(request.payload.get(key), self.name)
        return ResolutionResult.miss()


def default_strategies() -> list[BaseResolutionStrategy]:
    """Return a fresh strategy chain in precedence order."""
    return [
        MappedFieldsStrategy(),
        DirectKeyStrategy(),
        StableIdStrategy(),
        CustomMappingStrategy(),
        LabelStrategy(),
        SemanticRoleStrategy(),
        CanonicalAliasStrategy(),
        SimilarityStrategy(),
        CommonPrefixStrategy(),
    ]
