"""Document Loader - Builds the document model from OpenAPI YAML or JSON.

The text is composed (not constructed) with PyYAML so that every model object
keeps its source nodes. Building happens in two phases:

1. The owned tree is built top-down. Each object is registered in the
   reference index under its value node before its children are built, so a
   YAML alias back to an ancestor finds the ancestor instead of recursing.
2. Local `$ref` slots are resolved against the index. Chained references are
   followed; external references stay unresolved.

Swagger 2.0 documents are read with their own section names (`definitions`,
top-level `parameters`/`responses`, `securityDefinitions`) and body
parameters / responses that carry a `schema` directly.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from oas_lint.document import (
    COMPONENT_TYPES,
    HTTP_METHODS,
    SWAGGER_COMPONENT_SECTIONS,
    Components,
    Document,
    Example,
    ExampleHolder,
    Header,
    MediaType,
    ModelNode,
    Operation,
    Parameter,
    PathItem,
    Reference,
    RequestBody,
    Response,
    Schema,
    SchemaProxy,
    index_segment,
    quoted_segment,
)
from oas_lint.walker import walk_schemas
from oas_lint.yaml_nodes import (
    decode_scalar,
    find_key,
    is_mapping,
    is_scalar,
    is_sequence,
    key_string,
    mapping_items,
    scalar_text,
)

logger = logging.getLogger(__name__)

# Schema keywords holding a name -> schema mapping, and the attribute they fill
_SCHEMA_MAPS = {
    "properties": "properties",
    "patternProperties": "pattern_properties",
    "dependentSchemas": "dependent_schemas",
}

# Schema keywords holding a list of schemas
_SCHEMA_LISTS = {
    "allOf": "all_of",
    "anyOf": "any_of",
    "oneOf": "one_of",
    "prefixItems": "prefix_items",
}

# Schema keywords holding a single schema
_SCHEMA_SLOTS = {
    "items": "items",
    "additionalProperties": "additional_properties",
    "not": "not_",
    "contains": "contains",
    "if": "if_",
    "then": "then",
    "else": "else_",
}


class DocumentError(Exception):
    """Error loading or parsing an OpenAPI document."""

    pass


def load_document(path: Path | str) -> Document:
    """Load an OpenAPI document from a YAML or JSON file.

    Args:
        path: Path to the document.

    Returns:
        Fully built Document whose origin is the absolute file path.

    Raises:
        DocumentError: If the file cannot be read or is not an OpenAPI mapping.
    """
    path = Path(path)
    if not path.exists():
        raise DocumentError(f"OpenAPI document not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"Cannot read OpenAPI document {path}: {e}") from e
    return parse_document(text, origin=str(path.resolve()))


def parse_document(text: str, origin: str | None = None) -> Document:
    """Build a Document from YAML or JSON text.

    Args:
        text: Document source.
        origin: File identity recorded on the document and on findings.

    Raises:
        DocumentError: If the text is not valid YAML or not a mapping.
    """
    label = origin or "<string>"
    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise DocumentError(f"Invalid YAML in {label}: {e}") from e
    if not is_mapping(root):
        raise DocumentError(f"OpenAPI document {label} must be a mapping")

    document = Document(root, origin)
    _DocumentBuilder(document).build()
    logger.debug(
        "Loaded %s (version %s): %d paths, %d schemas",
        label,
        document.version or "unknown",
        len(document.paths),
        len(document.schemas),
    )
    return document


class _DocumentBuilder:
    """Builds the model tree for one document."""

    def __init__(self, document: Document) -> None:
        self.document = document
        self.index = document.index
        self._pending: list[SchemaProxy | Reference] = []

    def build(self) -> None:
        self._build_components()
        self._build_paths()
        self._resolve_references()
        self.document.schemas = walk_schemas(self.document)

    # -------------------------------------------------------------------------
    # Components
    # -------------------------------------------------------------------------

    def _build_components(self) -> None:
        document = self.document
        root = document.value_node
        if document.is_swagger:
            components = Components(document, document, None, root, "")
            sections = SWAGGER_COMPONENT_SECTIONS
        else:
            key_node, value_node = find_key(root, "components")
            components = Components(document, document, key_node, value_node, ".components")
            sections = {t: t for t in COMPONENT_TYPES}
        document.components = components

        for component_type, section_name in sections.items():
            components.section_names[component_type] = section_name
            section_key, section_node = find_key(components.value_node, section_name)
            if section_key is None:
                continue
            components.section_key_nodes[component_type] = section_key
            entries = components.sections[component_type]
            for name_key, entry_node in mapping_items(section_node):
                name = key_string(name_key)
                segment = f".{section_name}{quoted_segment(name)}"
                obj = self._build_component(component_type, components, name_key, entry_node, segment)
                if obj is not None:
                    entries[name] = obj

    def _build_component(self, component_type, parent, key_node, value_node, segment) -> ModelNode | None:
        if component_type == "schemas":
            return self.schema_proxy(parent, key_node, value_node, segment)
        if component_type == "parameters":
            return self.parameter(parent, key_node, value_node, segment)
        if component_type == "requestBodies":
            return self.request_body(parent, key_node, value_node, segment)
        if component_type == "responses":
            return self.response(parent, key_node, value_node, segment)
        if component_type == "examples":
            return self.example(parent, key_node, value_node, segment)
        if component_type == "headers":
            return self.header(parent, key_node, value_node, segment)
        # links and security schemes are only inspected for descriptions
        if not is_mapping(value_node):
            return None
        ref = self._ref_of(value_node)
        if ref is not None:
            return self.reference(parent, key_node, value_node, segment, ref)
        obj = ModelNode(self.document, parent, key_node, value_node, segment)
        self.index.register(obj)
        return obj

    # -------------------------------------------------------------------------
    # Paths and operations
    # -------------------------------------------------------------------------

    def _build_paths(self) -> None:
        document = self.document
        _, paths_node = find_key(document.value_node, "paths")
        for key_node, value_node in mapping_items(paths_node):
            if not is_mapping(value_node):
                continue
            path = key_string(key_node)
            item = PathItem(document, document, key_node, value_node, f".paths{quoted_segment(path)}")
            self.index.register(item)
            document.paths[path] = item
            item.parameters = self.parameter_list(item, value_node)

            for method_key, operation_node in mapping_items(value_node):
                method = scalar_text(method_key)
                if method not in HTTP_METHODS or not is_mapping(operation_node):
                    continue
                item.operations[method] = self.operation(item, method_key, operation_node, f".{method}")

    def operation(self, parent, key_node, value_node, segment) -> Operation:
        op = Operation(self.document, parent, key_node, value_node, segment)
        self.index.register(op)
        self.document.operations.append(op)
        op.parameters = self.parameter_list(op, value_node)

        body_key, body_node = find_key(value_node, "requestBody")
        if body_key is not None:
            op.request_body = self.request_body(op, body_key, body_node, ".requestBody")

        _, responses_node = find_key(value_node, "responses")
        for code_key, response_node in mapping_items(responses_node):
            code = key_string(code_key)
            response = self.response(op, code_key, response_node, f".responses{quoted_segment(code)}")
            if response is not None:
                op.responses[code] = response
        return op

    def parameter_list(self, parent: ModelNode, owner_node: yaml.Node) -> list[Parameter | Reference]:
        _, params_node = find_key(owner_node, "parameters")
        if not is_sequence(params_node):
            return []
        params = []
        for i, param_node in enumerate(params_node.value):
            param = self.parameter(parent, None, param_node, f".parameters{index_segment(i)}")
            if param is not None:
                params.append(param)
        return params

    def request_body(self, parent, key_node, value_node, segment) -> RequestBody | Reference | None:
        if not is_mapping(value_node):
            return None
        ref = self._ref_of(value_node)
        if ref is not None:
            return self.reference(parent, key_node, value_node, segment, ref)
        body = RequestBody(self.document, parent, key_node, value_node, segment)
        self.index.register(body)
        self.document.request_bodies.append(body)
        body.content = self.content(body, value_node)
        return body

    def response(self, parent, key_node, value_node, segment) -> Response | Reference | None:
        if not is_mapping(value_node):
            return None
        ref = self._ref_of(value_node)
        if ref is not None:
            return self.reference(parent, key_node, value_node, segment, ref)
        response = Response(self.document, parent, key_node, value_node, segment)
        self.index.register(response)
        self.document.responses.append(response)
        response.content = self.content(response, value_node)
        if self.document.is_swagger:
            schema_key, schema_node = find_key(value_node, "schema")
            response.schema_proxy = self.schema_proxy(response, schema_key, schema_node, ".schema")

        _, headers_node = find_key(value_node, "headers")
        for name_key, header_node in mapping_items(headers_node):
            name = key_string(name_key)
            header = self.header(response, name_key, header_node, f".headers{quoted_segment(name)}")
            if header is not None:
                response.headers[name] = header
        return response

    # -------------------------------------------------------------------------
    # Parameters, headers, media types, examples
    # -------------------------------------------------------------------------

    def parameter(self, parent, key_node, value_node, segment) -> Parameter | Reference | None:
        if not is_mapping(value_node):
            return None
        ref = self._ref_of(value_node)
        if ref is not None:
            return self.reference(parent, key_node, value_node, segment, ref)
        param = Parameter(self.document, parent, key_node, value_node, segment)
        self.index.register(param)
        self.document.parameters.append(param)
        self._fill_holder(param)
        return param

    def header(self, parent, key_node, value_node, segment) -> Header | Reference | None:
        if not is_mapping(value_node):
            return None
        ref = self._ref_of(value_node)
        if ref is not None:
            return self.reference(parent, key_node, value_node, segment, ref)
        header = Header(self.document, parent, key_node, value_node, segment)
        self.index.register(header)
        self.document.headers.append(header)
        self._fill_holder(header)
        return header

    def content(self, parent: ModelNode, owner_node: yaml.Node) -> dict[str, MediaType]:
        _, content_node = find_key(owner_node, "content")
        media_types: dict[str, MediaType] = {}
        for type_key, media_node in mapping_items(content_node):
            if not is_mapping(media_node):
                continue
            name = key_string(type_key)
            media_type = MediaType(self.document, parent, type_key, media_node, f".content{quoted_segment(name)}")
            self.index.register(media_type)
            self.document.media_types.append(media_type)
            self._fill_holder(media_type)
            media_types[name] = media_type
        return media_types

    def _fill_holder(self, holder: ExampleHolder) -> None:
        node = holder.value_node
        schema_key, schema_node = find_key(node, "schema")
        holder.schema_proxy = self.schema_proxy(holder, schema_key, schema_node, ".schema")

        _, examples_node = find_key(node, "examples")
        # Swagger 2.0 `examples` are raw values keyed by mime type, not Example objects
        if not self.document.is_swagger:
            for name_key, example_node in mapping_items(examples_node):
                name = key_string(name_key)
                example = self.example(holder, name_key, example_node, f".examples{quoted_segment(name)}")
                if example is not None:
                    holder.examples[name] = example

        if not isinstance(holder, MediaType):
            holder.content = self.content(holder, node)

    def example(self, parent, key_node, value_node, segment) -> Example | Reference | None:
        if not is_mapping(value_node):
            return None
        ref = self._ref_of(value_node)
        if ref is not None:
            return self.reference(parent, key_node, value_node, segment, ref)
        example = Example(self.document, parent, key_node, value_node, segment)
        self.index.register(example)
        self.document.examples.append(example)
        return example

    # -------------------------------------------------------------------------
    # Schemas
    # -------------------------------------------------------------------------

    def schema_proxy(self, parent, key_node, value_node, segment) -> SchemaProxy | None:
        """Build the schema slot for a node (inline, `$ref`, alias or boolean)."""
        if value_node is None:
            return None
        if is_scalar(value_node):
            value = decode_scalar(value_node)
            if isinstance(value, bool):
                return SchemaProxy(self.document, parent, key_node, value_node, segment, boolean=value)
            return None
        if not is_mapping(value_node):
            return None

        existing = self.index.lookup_node(value_node)
        if isinstance(existing, Schema):
            # YAML alias of a schema that is already built
            proxy = SchemaProxy(self.document, parent, key_node, value_node, segment)
            proxy.target = existing
            self.index.add_reference(proxy)
            self.index.add_referrer(existing, proxy)
            return proxy

        ref = self._ref_of(value_node)
        if ref is not None:
            proxy = SchemaProxy(self.document, parent, key_node, value_node, segment, ref=ref)
            self.index.register(proxy)
            self.index.add_reference(proxy)
            self._pending.append(proxy)
            return proxy

        proxy = SchemaProxy(self.document, parent, key_node, value_node, segment)
        schema = Schema(self.document, proxy, key_node, value_node)
        proxy.owned = schema
        self.index.register(schema)
        self._build_schema_children(schema)
        return proxy

    def _build_schema_children(self, schema: Schema) -> None:
        for key_node, value_node in mapping_items(schema.value_node):
            keyword = scalar_text(key_node)
            if keyword in _SCHEMA_MAPS:
                target = getattr(schema, _SCHEMA_MAPS[keyword])
                for name_key, child_node in mapping_items(value_node):
                    name = key_string(name_key)
                    proxy = self.schema_proxy(schema, name_key, child_node, f".{keyword}{quoted_segment(name)}")
                    if proxy is not None:
                        target[name] = proxy
            elif keyword in _SCHEMA_LISTS and is_sequence(value_node):
                self._build_schema_list(schema, keyword, value_node, getattr(schema, _SCHEMA_LISTS[keyword]))
            elif keyword == "items" and is_sequence(value_node):
                # Tuple form of `items` (pre 2020-12)
                self._build_schema_list(schema, keyword, value_node, schema.prefix_items)
            elif keyword in _SCHEMA_SLOTS:
                proxy = self.schema_proxy(schema, key_node, value_node, f".{keyword}")
                setattr(schema, _SCHEMA_SLOTS[keyword], proxy)

    def _build_schema_list(self, schema, keyword, value_node, target: list[SchemaProxy]) -> None:
        for i, child_node in enumerate(value_node.value):
            proxy = self.schema_proxy(schema, None, child_node, f".{keyword}{index_segment(i)}")
            if proxy is not None:
                target.append(proxy)

    # -------------------------------------------------------------------------
    # References
    # -------------------------------------------------------------------------

    def reference(self, parent, key_node, value_node, segment, ref: str) -> Reference:
        slot = Reference(self.document, parent, key_node, value_node, segment, ref)
        self.index.register(slot)
        self.index.add_reference(slot)
        self._pending.append(slot)
        return slot

    @staticmethod
    def _ref_of(node: yaml.Node) -> str | None:
        return scalar_text(find_key(node, "$ref")[1])

    def _resolve_references(self) -> None:
        unresolved = 0
        for slot in self._pending:
            target = self.index.resolve(slot.ref)
            if isinstance(slot, SchemaProxy) and not isinstance(target, Schema):
                target = None
            if target is None:
                unresolved += 1
                continue
            slot.target = target
            self.index.add_referrer(target, slot)
        if unresolved:
            logger.debug("%d references left unresolved", unresolved)
