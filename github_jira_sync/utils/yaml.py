"""Contains utility functions for working with YAML files."""

import json
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

yaml = YAML(typ="safe")


def load_yaml_file(path: Path) -> Any:
    """Loads a YAML file and returns its content."""
    with open(path, encoding="utf-8") as f:
        return yaml.load(f)


def load_payload_file(path: Path) -> Any:
    """Loads a JSON or YAML payload file, picking the parser from the file extension."""
    if path.suffix.lower() == ".json":
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    return load_yaml_file(path)


def create_yaml_dumper() -> YAML:
    """Creates a properly configured YAML object for dumping store files."""
    yaml_dumper = YAML()
    yaml_dumper.default_flow_style = False
    yaml_dumper.explicit_start = True
    yaml_dumper.indent(mapping=2, sequence=4, offset=2)  # type: ignore[attr-defined]
    yaml_dumper.width = 4096  # Prevent line wrapping for long shared secrets
    return yaml_dumper


def dump_yaml_to_file(data: Any, file_path: Path) -> None:
    """Dumps data to a YAML file."""
    yaml_dumper = create_yaml_dumper()
    with open(file_path, "w", encoding="utf-8") as f:
        yaml_dumper.dump(data, f)  # type: ignore[misc]
