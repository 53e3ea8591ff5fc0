from pathlib import Path

import yaml
from pydantic import ValidationError

from waypoint.rules.models import Rules

FENCE_OPEN = "```yaml"
FENCE = "```"


def _fenced_yaml(content: str) -> str | None:
    """
    Body of the first ```yaml block, or None when the text has no such block.

    Raises ValueError if the block is never closed or holds nothing but
    blank lines.
    """
    body: list[str] | None = None

    for line in content.splitlines():
        stripped = line.strip()
        if body is None:
            if stripped.startswith(FENCE_OPEN):
                body = []
            continue
        if stripped.startswith(FENCE):
            if not any(b.strip() for b in body):
                raise ValueError("Rules file has an empty ```yaml block")
            return "\n".join(body)
        body.append(line)

    if body is not None:
        raise ValueError("Rules file has an unterminated ```yaml block")
    return None


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.

    The file is either plain YAML or markdown carrying the rules in a
    ```yaml fenced block. An empty plain file yields the default rules.

    Raises FileNotFoundError if file missing.
    Raises ValueError if the fence, YAML or schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    fenced = _fenced_yaml(content)
    source = content if fenced is None else fenced

    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        return Rules.model_validate(data or {})
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e
