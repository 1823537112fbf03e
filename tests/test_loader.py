"""Tests for the document loader and model."""

import pytest

from oas_lint.document import Parameter, Reference, deref
from oas_lint.loader import DocumentError, load_document, parse_document
from oas_lint.yaml_nodes import column_of, line_of
from tests.conftest import parse_yaml

PETSTORE = """
    openapi: 3.0.3
    info:
      title: Pets
      version: "1"
    paths:
      /pets/{petId}:
        parameters:
          - name: petId
            in: path
            required: true
            schema:
              type: integer
        get:
          parameters:
            - $ref: '#/components/parameters/Limit'
          responses:
            '200':
              description: ok
              content:
                application/json:
                  schema:
                    $ref: '#/components/schemas/Pet'
    components:
      parameters:
        Limit:
          name: limit
          in: query
          schema:
            type: integer
      schemas:
        Pet:
          type: object
          properties:
            id:
              type: integer
            owner:
              $ref: '#/components/schemas/Owner'
        Owner:
          type: object
          properties:
            name:
              type: string
"""


# =============================================================================
# Test: Version detection
# =============================================================================


class TestVersion:
    def test_openapi_30(self):
        document = parse_yaml(PETSTORE)
        assert document.version == "3.0.3"
        assert document.is_oas30
        assert not document.is_oas31
        assert not document.is_swagger

    def test_openapi_31(self):
        document = parse_yaml("openapi: 3.1.0\npaths: {}\n")
        assert document.is_oas31

    def test_swagger(self):
        document = parse_yaml('swagger: "2.0"\npaths: {}\n')
        assert document.version == "2.0"
        assert document.is_swagger

    def test_missing_version_is_empty(self):
        document = parse_yaml("paths: {}\n")
        assert document.version == ""


# =============================================================================
# Test: Paths, operations and parameters
# =============================================================================


class TestPaths:
    def test_path_items_and_operations(self):
        document = parse_yaml(PETSTORE)
        assert list(document.paths) == ["/pets/{petId}"]
        item = document.paths["/pets/{petId}"]
        assert list(item.operations) == ["get"]
        assert item.json_path() == "$.paths['/pets/{petId}']"
        assert item.operations["get"].json_path() == "$.paths['/pets/{petId}'].get"

    def test_path_level_parameter(self):
        document = parse_yaml(PETSTORE)
        param = document.paths["/pets/{petId}"].parameters[0]
        assert isinstance(param, Parameter)
        assert param.name == "petId"
        assert param.location == "path"
        assert param.declared_type == "integer"
        assert param.json_path() == "$.paths['/pets/{petId}'].parameters[0]"
        assert param.schema_proxy.json_path() == "$.paths['/pets/{petId}'].parameters[0].schema"

    def test_referenced_parameter_resolves_to_component(self):
        document = parse_yaml(PETSTORE)
        slot = document.paths["/pets/{petId}"].operations["get"].parameters[0]
        assert isinstance(slot, Reference)
        assert slot.target is document.components.parameters["Limit"]
        assert deref(slot).name == "limit"

    def test_every_parameter_is_listed_once(self):
        document = parse_yaml(PETSTORE)
        assert sorted(p.name for p in document.parameters) == ["limit", "petId"]


# =============================================================================
# Test: Schemas and references
# =============================================================================


class TestSchemas:
    def test_media_type_schema_resolves_to_component(self):
        document = parse_yaml(PETSTORE)
        response = document.paths["/pets/{petId}"].operations["get"].responses["200"]
        media_type = response.content["application/json"]
        assert media_type.schema is document.components.schemas["Pet"].schema

    def test_property_reference(self):
        document = parse_yaml(PETSTORE)
        pet = document.components.schemas["Pet"].schema
        owner = document.components.schemas["Owner"].schema
        assert pet.properties["owner"].is_reference
        assert pet.properties["owner"].schema is owner

    def test_schema_path_equals_slot_path(self):
        document = parse_yaml(PETSTORE)
        pet = document.components.schemas["Pet"].schema
        assert pet.json_path() == "$.components.schemas['Pet']"
        assert pet.properties["id"].schema.json_path() == "$.components.schemas['Pet'].properties['id']"

    def test_referrers_are_recorded(self):
        document = parse_yaml(PETSTORE)
        owner = document.components.schemas["Owner"].schema
        referrers = document.index.referrers(owner)
        assert [r.json_path() for r in referrers] == ["$.components.schemas['Pet'].properties['owner']"]

    def test_escaped_pointer(self):
        document = parse_yaml(
            """
            openapi: 3.1.0
            paths: {}
            components:
              schemas:
                a/b:
                  type: string
                User:
                  type: object
                  properties:
                    code:
                      $ref: '#/components/schemas/a~1b'
            """
        )
        user = document.components.schemas["User"].schema
        assert user.properties["code"].schema is document.components.schemas["a/b"].schema

    def test_external_reference_stays_unresolved(self):
        document = parse_yaml(
            """
            openapi: 3.1.0
            paths: {}
            components:
              schemas:
                User:
                  $ref: 'other.yaml#/User'
            """
        )
        proxy = document.components.schemas["User"]
        assert proxy.ref == "other.yaml#/User"
        assert proxy.schema is None

    def test_yaml_alias_cycle(self):
        document = parse_yaml(
            """
            openapi: 3.0.0
            paths: {}
            components:
              schemas:
                Node: &node
                  type: object
                  properties:
                    child: *node
            """
        )
        node = document.components.schemas["Node"].schema
        assert node.properties["child"].schema is node
        assert document.schemas == [node]

    def test_boolean_schema(self):
        document = parse_yaml(
            """
            openapi: 3.1.0
            paths: {}
            components:
              schemas:
                Open:
                  type: object
                  additionalProperties: false
            """
        )
        schema = document.components.schemas["Open"].schema
        assert schema.additional_properties.boolean is False
        assert schema.additional_properties.schema is None

    def test_source_positions(self):
        document = parse_yaml(
            """
            openapi: 3.1.0
            paths: {}
            components:
              schemas:
                Foo:
                  type: string
            """
        )
        proxy = document.components.schemas["Foo"]
        assert line_of(proxy.key_node) == 5
        assert column_of(proxy.key_node) == 5


# =============================================================================
# Test: Swagger 2.0
# =============================================================================


class TestSwagger:
    SPEC = """
        swagger: "2.0"
        info:
          title: Pets
          version: "1"
        paths:
          /pets:
            post:
              parameters:
                - name: body
                  in: body
                  schema:
                    $ref: '#/definitions/Pet'
              responses:
                '200':
                  description: ok
                  schema:
                    $ref: '#/definitions/Pet'
        definitions:
          Pet:
            type: object
    """

    def test_definitions_are_component_schemas(self):
        document = parse_yaml(self.SPEC)
        pet = document.components.schemas["Pet"].schema
        assert pet.json_path() == "$.definitions['Pet']"
        assert document.components.section_names["schemas"] == "definitions"

    def test_body_parameter_and_response_schema(self):
        document = parse_yaml(self.SPEC)
        pet = document.components.schemas["Pet"].schema
        operation = document.paths["/pets"].operations["post"]
        assert operation.parameters[0].schema is pet
        assert operation.responses["200"].schema_proxy.schema is pet


# =============================================================================
# Test: Errors
# =============================================================================


class TestErrors:
    def test_invalid_yaml(self):
        with pytest.raises(DocumentError, match="Invalid YAML"):
            parse_document("openapi: [3.0\n")

    def test_not_a_mapping(self):
        with pytest.raises(DocumentError, match="must be a mapping"):
            parse_document("- a\n- b\n")

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentError, match="not found"):
            load_document(tmp_path / "missing.yaml")

    def test_origin_is_absolute_path(self, write_yaml):
        path = write_yaml("openapi: 3.1.0\npaths: {}\n")
        document = load_document(path)
        assert document.origin == str(path.resolve())
