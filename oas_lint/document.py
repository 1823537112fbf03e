"""OpenAPI document model.

A thin, typed view over the composed YAML node tree. Every model object keeps
its key node, its value node and a back-reference to its parent, so findings
can be anchored to source positions and canonical JSON paths can be rebuilt by
walking parents up to the root.

Objects are created by oas_lint.loader and are treated as immutable once the
loader returns; the only mutable state is the per-node list of findings that
rules attach for tool integration.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from functools import cached_property
from typing import TYPE_CHECKING, Any, Iterator

import yaml

from oas_lint.yaml_nodes import (
    decode_node,
    find_key,
    is_mapping,
    is_null,
    is_scalar,
    is_sequence,
    mapping_items,
    scalar_text,
)

if TYPE_CHECKING:
    from oas_lint.findings import Finding


HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

COMPONENT_TYPES = (
    "schemas",
    "parameters",
    "requestBodies",
    "responses",
    "examples",
    "headers",
    "links",
    "securitySchemes",
)

# Swagger 2.0 keeps its reusable objects at the document root under other names
SWAGGER_COMPONENT_SECTIONS = {
    "schemas": "definitions",
    "parameters": "parameters",
    "responses": "responses",
    "securitySchemes": "securityDefinitions",
}

_FINDINGS_LOCK = threading.Lock()


def quoted_segment(name: str) -> str:
    return f"['{name}']"


def index_segment(index: int) -> str:
    return f"[{index}]"


def is_extension_key(name: str) -> bool:
    """Vendor extensions start with x- (either case)."""
    return name.startswith("x-") or name.startswith("X-")


# =============================================================================
# Base node
# =============================================================================


class ModelNode:
    """Base class for every object in the document model.

    Attributes:
        document: Owning Document.
        parent: Owning model node (None for the document root).
        key_node: YAML node of the key this object sits under, if any.
        value_node: YAML node holding this object's content.
        segment: JSON path segment appended to the parent's path.
    """

    def __init__(
        self,
        document: Document | None,
        parent: ModelNode | None,
        key_node: yaml.Node | None,
        value_node: yaml.Node | None,
        segment: str,
    ) -> None:
        self.document = document
        self.parent = parent
        self.key_node = key_node
        self.value_node = value_node
        self.segment = segment
        self.findings: list[Finding] = []

    def json_path(self) -> str:
        """Canonical JSON path of this node, e.g. $.components.schemas['Pet']."""
        base = self.parent.json_path() if self.parent is not None else "$"
        return base + self.segment

    @property
    def anchor_node(self) -> yaml.Node | None:
        """Node to report against: the key when there is one, else the value."""
        return self.key_node if self.key_node is not None else self.value_node

    @property
    def key_text(self) -> str | None:
        return scalar_text(self.key_node)

    def field(self, name: str) -> tuple[yaml.Node | None, yaml.Node | None]:
        return find_key(self.value_node, name)

    def has(self, name: str) -> bool:
        return self.field(name)[0] is not None

    def key_node_for(self, name: str) -> yaml.Node | None:
        return self.field(name)[0]

    def text(self, name: str) -> str | None:
        return scalar_text(self.field(name)[1])

    def value(self, name: str) -> Any:
        return decode_node(self.field(name)[1])

    def flag(self, name: str) -> bool:
        return self.value(name) is True

    @property
    def description(self) -> str | None:
        return self.text("description")

    @property
    def extensions(self) -> dict[str, Any]:
        return {
            key.value: decode_node(value)
            for key, value in mapping_items(self.value_node)
            if is_scalar(key) and is_extension_key(key.value)
        }

    def add_finding(self, finding: Finding) -> None:
        with _FINDINGS_LOCK:
            self.findings.append(finding)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.json_path()}>"


class Reference(ModelNode):
    """A `$ref` slot for non-schema objects (parameters, examples, ...).

    The target is filled in by the loader once the whole tree exists.
    """

    def __init__(self, document, parent, key_node, value_node, segment, ref: str) -> None:
        super().__init__(document, parent, key_node, value_node, segment)
        self.ref = ref
        self.target: ModelNode | None = None


def deref(obj: ModelNode | None) -> ModelNode | None:
    """Follow a Reference to its target; other objects pass through."""
    if isinstance(obj, Reference):
        return obj.target
    return obj


# =============================================================================
# Schemas
# =============================================================================


class SchemaProxy(ModelNode):
    """A slot that holds a schema: inline, by `$ref`, or a boolean schema.

    Inline schemas are owned by their proxy. Referenced schemas are owned by
    whatever slot defines them; the proxy only points at them, so every `$ref`
    to the same definition yields the same Schema object.
    """

    def __init__(
        self,
        document,
        parent,
        key_node,
        value_node,
        segment,
        ref: str | None = None,
        boolean: bool | None = None,
    ) -> None:
        super().__init__(document, parent, key_node, value_node, segment)
        self.ref = ref
        self.boolean = boolean
        self.owned: Schema | None = None
        self.target: Schema | None = None

    @property
    def schema(self) -> Schema | None:
        return self.owned if self.owned is not None else self.target

    @property
    def is_reference(self) -> bool:
        return self.owned is None and (self.ref is not None or self.target is not None)


class Schema(ModelNode):
    """A schema object. Its JSON path is the path of its owning proxy."""

    def __init__(self, document, parent, key_node, value_node) -> None:
        super().__init__(document, parent, key_node, value_node, "")
        self.properties: dict[str, SchemaProxy] = {}
        self.pattern_properties: dict[str, SchemaProxy] = {}
        self.dependent_schemas: dict[str, SchemaProxy] = {}
        self.items: SchemaProxy | None = None
        self.prefix_items: list[SchemaProxy] = []
        self.additional_properties: SchemaProxy | None = None
        self.not_: SchemaProxy | None = None
        self.contains: SchemaProxy | None = None
        self.if_: SchemaProxy | None = None
        self.then: SchemaProxy | None = None
        self.else_: SchemaProxy | None = None
        self.all_of: list[SchemaProxy] = []
        self.any_of: list[SchemaProxy] = []
        self.one_of: list[SchemaProxy] = []

    @property
    def name(self) -> str | None:
        """Name of the slot this schema is defined under (property or component name)."""
        return self.parent.key_text if self.parent is not None else None

    @cached_property
    def type(self) -> list[str]:
        _, node = self.field("type")
        if is_scalar(node) and not is_null(node):
            return [node.value]
        if is_sequence(node):
            return [item.value for item in node.value if is_scalar(item)]
        return []

    @cached_property
    def required(self) -> list[str]:
        _, node = self.field("required")
        if not is_sequence(node):
            return []
        return [item.value for item in node.value if is_scalar(item)]

    @cached_property
    def dependent_required(self) -> dict[str, list[str]]:
        _, node = self.field("dependentRequired")
        result: dict[str, list[str]] = {}
        for key, value in mapping_items(node):
            if not is_scalar(key):
                continue
            names = [item.value for item in value.value if is_scalar(item)] if is_sequence(value) else []
            result[key.value] = names
        return result

    @cached_property
    def enum(self) -> list[Any]:
        values = self.value("enum")
        return values if isinstance(values, list) else []

    @property
    def extensible_enum(self) -> list[Any]:
        values = self.value("x-extensible-enum")
        return values if isinstance(values, list) else []

    @property
    def has_const(self) -> bool:
        return self.has("const")

    @property
    def has_default(self) -> bool:
        return self.has("default")

    @property
    def example(self) -> yaml.Node | None:
        """The `example` value node, None when absent or null."""
        _, node = self.field("example")
        return None if is_null(node) else node

    @property
    def examples(self) -> list[yaml.Node]:
        """Entries of the `examples` keyword (array form, or values of a mapping)."""
        _, node = self.field("examples")
        if is_sequence(node):
            return list(node.value)
        if is_mapping(node):
            return [value for _, value in node.value]
        return []

    @property
    def has_example(self) -> bool:
        return self.example is not None or len(self.examples) > 0

    def number(self, name: str) -> int | float | None:
        """Numeric keyword value; booleans (3.0 exclusive bounds) are not numbers."""
        value = self.value(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value

    @property
    def nullable(self) -> bool:
        return self.flag("nullable")

    @property
    def read_only(self) -> bool:
        return self.flag("readOnly")

    @property
    def write_only(self) -> bool:
        return self.flag("writeOnly")

    @property
    def deprecated(self) -> bool:
        return self.flag("deprecated")

    def combinators(self) -> Iterator[tuple[str, list[SchemaProxy]]]:
        yield "allOf", self.all_of
        yield "anyOf", self.any_of
        yield "oneOf", self.one_of

    def is_polymorphic(self) -> bool:
        return bool(self.all_of or self.any_of or self.one_of)

    def children(self) -> Iterator[SchemaProxy]:
        """Every schema slot directly below this schema, in a stable order."""
        yield from self.properties.values()
        yield from self.pattern_properties.values()
        yield from self.dependent_schemas.values()
        for proxy in (self.items, self.additional_properties, self.not_, self.contains,
                      self.if_, self.then, self.else_):
            if proxy is not None:
                yield proxy
        yield from self.prefix_items
        yield from self.all_of
        yield from self.any_of
        yield from self.one_of


# =============================================================================
# Examples, parameters, headers, media types
# =============================================================================


class Example(ModelNode):
    """An Example object (`summary`, `value`, `externalValue`)."""

    @property
    def summary(self) -> str | None:
        return self.text("summary")

    @property
    def example_value(self) -> yaml.Node | None:
        """Node under the `value` key (None when absent)."""
        return self.field("value")[1]

    @property
    def has_value(self) -> bool:
        return self.has("value")

    @property
    def external_value(self) -> str | None:
        return self.text("externalValue")


class ExampleHolder(ModelNode):
    """Shared shape of objects that carry `schema`, `example` and `examples`."""

    container_label = "object"

    def __init__(self, document, parent, key_node, value_node, segment) -> None:
        super().__init__(document, parent, key_node, value_node, segment)
        self.schema_proxy: SchemaProxy | None = None
        self.examples: dict[str, Example | Reference] = {}
        self.content: dict[str, MediaType] = {}

    @property
    def schema(self) -> Schema | None:
        return self.schema_proxy.schema if self.schema_proxy is not None else None

    @property
    def example(self) -> yaml.Node | None:
        _, node = self.field("example")
        return None if is_null(node) else node

    def example_entries(self) -> list[tuple[str, Example]]:
        """Named examples with references resolved; unresolved entries are skipped."""
        entries = []
        for name, entry in self.examples.items():
            example = deref(entry)
            if isinstance(example, Example):
                entries.append((name, example))
        return entries

    @property
    def has_examples(self) -> bool:
        return self.example is not None or len(self.examples) > 0

    def content_has_examples(self) -> bool:
        return any(media_type.has_examples for media_type in self.content.values())


class Parameter(ExampleHolder):
    container_label = "parameter"

    @property
    def name(self) -> str | None:
        return self.text("name")

    @property
    def location(self) -> str | None:
        return self.text("in")

    @property
    def declared_type(self) -> str:
        """First schema type, or the Swagger 2.0 inline `type`; '' when unknown."""
        schema = self.schema
        if schema is not None and schema.type:
            return schema.type[0]
        return self.text("type") or ""


class Header(ExampleHolder):
    container_label = "header"

    @property
    def name(self) -> str | None:
        return self.key_text


class MediaType(ExampleHolder):
    container_label = "media type"

    @property
    def name(self) -> str | None:
        return self.key_text


# =============================================================================
# Operations and paths
# =============================================================================


class RequestBody(ModelNode):
    def __init__(self, document, parent, key_node, value_node, segment) -> None:
        super().__init__(document, parent, key_node, value_node, segment)
        self.content: dict[str, MediaType] = {}


class Response(ModelNode):
    def __init__(self, document, parent, key_node, value_node, segment) -> None:
        super().__init__(document, parent, key_node, value_node, segment)
        self.content: dict[str, MediaType] = {}
        self.headers: dict[str, Header | Reference] = {}
        # Swagger 2.0 responses carry their schema directly
        self.schema_proxy: SchemaProxy | None = None


class Operation(ModelNode):
    def __init__(self, document, parent, key_node, value_node, segment) -> None:
        super().__init__(document, parent, key_node, value_node, segment)
        self.parameters: list[Parameter | Reference] = []
        self.request_body: RequestBody | Reference | None = None
        self.responses: dict[str, Response | Reference] = {}

    @property
    def method(self) -> str | None:
        return self.key_text

    @property
    def operation_id(self) -> str | None:
        return self.text("operationId")

    def resolved_parameters(self) -> list[Parameter]:
        return [p for p in map(deref, self.parameters) if isinstance(p, Parameter)]


class PathItem(ModelNode):
    def __init__(self, document, parent, key_node, value_node, segment) -> None:
        super().__init__(document, parent, key_node, value_node, segment)
        self.parameters: list[Parameter | Reference] = []
        self.operations: dict[str, Operation] = {}

    @property
    def path(self) -> str | None:
        return self.key_text

    def resolved_parameters(self) -> list[Parameter]:
        return [p for p in map(deref, self.parameters) if isinstance(p, Parameter)]


class Components(ModelNode):
    """Reusable objects, keyed by component type then name.

    For Swagger 2.0 the sections live at the document root, so this node has
    an empty path segment and each section keeps its 2.0 name.
    """

    def __init__(self, document, parent, key_node, value_node, segment) -> None:
        super().__init__(document, parent, key_node, value_node, segment)
        self.sections: dict[str, dict[str, ModelNode]] = {t: {} for t in COMPONENT_TYPES}
        self.section_names: dict[str, str] = {t: t for t in COMPONENT_TYPES}
        self.section_key_nodes: dict[str, yaml.Node] = {}

    @property
    def schemas(self) -> dict[str, SchemaProxy]:
        return self.sections["schemas"]  # type: ignore[return-value]

    @property
    def parameters(self) -> dict[str, ModelNode]:
        return self.sections["parameters"]


# =============================================================================
# Reference index
# =============================================================================


class ReferenceIndex:
    """Index of every reference in a document.

    Maps YAML nodes to the model objects built for them, resolves local JSON
    pointers, and keeps the reverse map target -> referring slots that the
    path locator uses to enumerate every location of a shared schema.
    """

    # Chains of `$ref` -> `$ref` longer than this are treated as broken
    MAX_CHAIN = 40

    def __init__(self, document: Document) -> None:
        self._document = document
        self._by_node: dict[int, ModelNode] = {}
        self._referrers: dict[int, list[ModelNode]] = defaultdict(list)
        self.references: list[SchemaProxy | Reference] = []

    def register(self, obj: ModelNode) -> None:
        if obj.value_node is not None:
            self._by_node.setdefault(id(obj.value_node), obj)

    def lookup_node(self, node: yaml.Node | None) -> ModelNode | None:
        if node is None:
            return None
        return self._by_node.get(id(node))

    def add_reference(self, slot: SchemaProxy | Reference) -> None:
        self.references.append(slot)

    def add_referrer(self, target: ModelNode, slot: ModelNode) -> None:
        self._referrers[id(target)].append(slot)

    def referrers(self, target: ModelNode) -> list[ModelNode]:
        """Slots that reach `target` by reference (not its owning slot)."""
        return list(self._referrers.get(id(target), ()))

    def find_pointer(self, ref: str) -> yaml.Node | None:
        """Walk a local JSON pointer (#/a/b~1c) through the node tree."""
        if not ref.startswith("#"):
            return None
        pointer = ref[1:]
        node = self._document.value_node
        if pointer in ("", "/"):
            return node
        for raw in pointer.lstrip("/").split("/"):
            token = raw.replace("~1", "/").replace("~0", "~")
            if is_mapping(node):
                _, node = find_key(node, token)
            elif is_sequence(node) and token.isdigit() and int(token) < len(node.value):
                node = node.value[int(token)]
            else:
                return None
            if node is None:
                return None
        return node

    def resolve(self, ref: str) -> ModelNode | None:
        """Resolve a reference to the model object it names, following chains."""
        seen: set[str] = set()
        current = ref
        while len(seen) < self.MAX_CHAIN:
            if current in seen:
                return None
            seen.add(current)
            obj = self.lookup_node(self.find_pointer(current))
            if isinstance(obj, SchemaProxy) and obj.owned is None and obj.ref is not None:
                current = obj.ref
                continue
            if isinstance(obj, Reference):
                current = obj.ref
                continue
            return obj
        return None


# =============================================================================
# Document
# =============================================================================


class Document(ModelNode):
    """Root of the model.

    Attributes:
        origin: Absolute path of the source file (None for in-memory text).
        version: Value of `openapi` (or `swagger`), e.g. "3.0.3".
        paths: URL template -> PathItem, in document order.
        components: Reusable objects.
        index: Reference index.
        schemas: Every distinct schema, as enumerated by the schema walker.
        parameters, headers, media_types, examples, operations: every
            distinct object of that kind, wherever it is defined.
    """

    def __init__(self, root_node: yaml.Node, origin: str | None = None) -> None:
        super().__init__(None, None, None, root_node, "")
        self.document = self
        self.origin = origin
        self.paths: dict[str, PathItem] = {}
        self.components = Components(self, self, None, None, "")
        self.index = ReferenceIndex(self)
        self.schemas: list[Schema] = []
        self.parameters: list[Parameter] = []
        self.headers: list[Header] = []
        self.media_types: list[MediaType] = []
        self.examples: list[Example] = []
        self.operations: list[Operation] = []
        self.request_bodies: list[RequestBody] = []
        self.responses: list[Response] = []

    def json_path(self) -> str:
        return "$"

    @cached_property
    def version(self) -> str:
        return self.text("openapi") or self.text("swagger") or ""

    @property
    def is_swagger(self) -> bool:
        return self.version.startswith("2")

    @property
    def is_oas30(self) -> bool:
        return self.version.startswith("3.0")

    @property
    def is_oas31(self) -> bool:
        return self.version.startswith("3.1")

    def example_holders(self) -> list[ExampleHolder]:
        """Every parameter, header and media type, in that order."""
        return [*self.parameters, *self.headers, *self.media_types]

    @cached_property
    def tags(self) -> list[Any]:
        tags = self.value("tags")
        return tags if isinstance(tags, list) else []
