"""Load the OpenAPI document and the generator configuration.

Documents come from a local JSON/YAML file or an http(s) URL.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import yaml

from .models import Config


def _parse(text: str, name: str) -> dict[str, Any]:
    if name.lower().endswith(".json"):
        return json.loads(text)
    return yaml.safe_load(text)


def load_spec(source: str | Path, client: httpx.Client | None = None) -> dict[str, Any]:
    """Load the OpenAPI document from a path or URL."""
    source = str(source)
    if source.startswith(("http://", "https://")):
        if client is None:
            with httpx.Client(timeout=30, follow_redirects=True) as owned:
                response = owned.get(source)
        else:
            response = client.get(source)
        response.raise_for_status()
        return _parse(response.text, httpx.URL(source).path)

    with open(source, encoding="utf-8") as f:
        return _parse(f.read(), source)


def load_config(path: str | Path) -> Config:
    """Load a Config from a JSON or YAML file."""
    with open(path, encoding="utf-8") as f:
        data = _parse(f.read(), str(path))
    return Config.model_validate(data or {})
