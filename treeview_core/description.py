"""
Graph description decoding - YAML text to typed node/edge records.

The description is a mapping with two ordered lists:

    nodes:
      - id: root
        label: "# Title"
    edges:
      - id: e1
        source: root
        target: child

Unknown fields are ignored. Anything else that does not fit raises
MalformedDescriptionError so a load fails as a whole instead of producing
half-built nodes.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError


class DescriptionError(Exception):
    """Base class for description load failures."""


class DescriptionUnavailableError(DescriptionError):
    """The description could not be read or fetched."""


class MalformedDescriptionError(DescriptionError):
    """The description was read but does not have the expected shape."""


class NodeRecord(BaseModel):
    """A node as written in the description."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    label: str


class EdgeRecord(BaseModel):
    """An edge as written in the description."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    source: str
    target: str


class GraphDescription(BaseModel):
    """The decoded description: ordered node and edge records."""
    model_config = ConfigDict(extra="ignore")

    nodes: list[NodeRecord]
    edges: list[EdgeRecord]


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


def parse_description(text: str) -> GraphDescription:
    """
    Decode a YAML graph description.

    Args:
        text: The YAML document

    Returns:
        The typed GraphDescription

    Raises:
        MalformedDescriptionError: if the YAML is invalid or the document
            lacks the nodes/edges lists or their required fields
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedDescriptionError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise MalformedDescriptionError(
            f"Expected a mapping with 'nodes' and 'edges', got {type(data).__name__}"
        )

    try:
        return GraphDescription.model_validate(data)
    except ValidationError as e:
        raise MalformedDescriptionError(_format_validation_error(e)) from e


def load_description(file_path: str | Path) -> GraphDescription:
    """Read and decode a description file."""
    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DescriptionUnavailableError(f"Cannot read description {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise MalformedDescriptionError(f"Description {path} is not valid UTF-8: {e}") from e
    return parse_description(text)
