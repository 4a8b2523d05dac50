"""Load property schemas from YAML files.

Each ``*.yaml`` file declares one entity type:

    schema:
      entity: Submission
      properties:
        - name: title
        - name: abstract
          tiers: [full]
        - name: submittedOn
          source: dateSubmitted
        - name: authors
          related:
            entity: Author
            source: authorIds
            many: true
            tier: summary

Properties default to both tiers, except related properties, which
default to the full tier only.
"""

from pathlib import Path
from typing import Any

import yaml

from pressroom.core.errors import SchemaRegistrationError
from pressroom.serialization.schema import (
    FULL_ONLY,
    SUMMARY_AND_FULL,
    Property,
    PropertySchema,
    attribute,
    related,
)


class SchemaLoader:
    """Loads PropertySchemas from <path>/*.yaml files."""

    def __init__(self, schemas_path: Path):
        self.schemas_path = schemas_path
        self.schemas: dict[str, PropertySchema] = {}

    def load_all(self) -> None:
        """Load all schemas. A missing directory loads nothing."""
        if not self.schemas_path.exists():
            return

        for yaml_file in sorted(self.schemas_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
            if data and "schema" in data:
                schema = self._parse_schema(data["schema"], yaml_file.name)
                if schema.entity_type in self.schemas:
                    raise SchemaRegistrationError(
                        f"{yaml_file.name}: schema for '{schema.entity_type}' is declared twice"
                    )
                self.schemas[schema.entity_type] = schema

    def _parse_schema(self, data: dict, file_name: str) -> PropertySchema:
        entity_type = data.get("entity")
        if not entity_type:
            raise SchemaRegistrationError(f"{file_name}: schema has no 'entity'")
        properties = [
            self._parse_property(entry, entity_type, file_name)
            for entry in data.get("properties", [])
        ]
        return PropertySchema(entity_type, properties)

    def _parse_property(self, entry: dict[str, Any], entity_type: str, file_name: str) -> Property:
        name = entry.get("name")
        if not name:
            raise SchemaRegistrationError(f"{file_name}: {entity_type} property has no 'name'")

        try:
            rel = entry.get("related")
            if rel:
                return related(
                    name,
                    entity_type=rel["entity"],
                    source=rel.get("source", name),
                    many=bool(rel.get("many", False)),
                    tier=rel.get("tier", "summary"),
                    tiers=entry.get("tiers", FULL_ONLY),
                )
            return attribute(
                name,
                source=entry.get("source"),
                tiers=entry.get("tiers", SUMMARY_AND_FULL),
                default=entry.get("default"),
            )
        except (KeyError, ValueError) as e:
            raise SchemaRegistrationError(
                f"{file_name}: invalid property '{name}' on {entity_type}: {e}"
            ) from e

    def get_schema(self, entity_type: str) -> PropertySchema | None:
        return self.schemas.get(entity_type)

    def list_schemas(self) -> list[PropertySchema]:
        return list(self.schemas.values())
