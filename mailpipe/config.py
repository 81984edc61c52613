"""Run configuration: YAML on disk, checked by JSON Schema, read into typed stage specs."""

from __future__ import annotations

import os
import json
import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

import yaml
from jsonschema import validate, Draft202012Validator
from jsonschema.exceptions import ValidationError
from pydantic import BaseModel, Field, TypeAdapter

from mailpipe.errors import ConfigError
from mailpipe.utils import STDIO_PATH, load_file


class FilterSpec(BaseModel):
    type: Literal["filter"]
    field: Literal["from", "to", "body"]
    op: Literal["equals", "not_equals", "contains", "startswith", "endswith", "matches"]
    value: str
    negate: bool = False


class DuplicateSpec(BaseModel):
    type: Literal["duplicate"]
    to: str


class SinkSpec(BaseModel):
    type: Literal["sink"]
    path: str


StageSpec = Annotated[Union[FilterSpec, DuplicateSpec, SinkSpec], Field(discriminator="type")]

_STAGES_ADAPTER = TypeAdapter(List[StageSpec])


class RunConfig(BaseModel):
    input: str
    encoding: str = "utf-8"
    pipeline: List[StageSpec] = Field(default_factory=list)


def validate_config(cfg: dict):
    here = os.path.dirname(os.path.abspath(__file__))
    schema_path = os.path.join(here, "schemas", "config.schema.json")
    schema = json.loads(load_file(schema_path))
    try:
        validate(instance=cfg, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ConfigError(f"Config validation error: {e.message} at {list(e.path)}") from e

    # Each feed has one owner: a sink may not reuse the input file or another sink's file.
    input_path = cfg["input"]
    owners: Dict[str, str] = {}
    if input_path != STDIO_PATH:
        owners[os.path.abspath(input_path)] = "input"
    for idx, stage in enumerate(cfg.get("pipeline") or []):
        if stage.get("type") == "filter" and stage.get("op") == "matches":
            try:
                re.compile(stage["value"])
            except re.error as e:
                raise ConfigError(f"Config validation error: bad regex {stage['value']!r} ({e}) at ['pipeline', {idx}]") from e
        if stage.get("type") != "sink":
            continue
        path = stage["path"]
        key = path if path == STDIO_PATH else os.path.abspath(path)
        if key in owners:
            raise ConfigError(f"Config validation error: sink path {path!r} already used by {owners[key]} at ['pipeline', {idx}]")
        owners[key] = f"pipeline[{idx}]"


def parse_stages(raw: List[Dict[str, Any]]) -> List[StageSpec]:
    return _STAGES_ADAPTER.validate_python(raw)


def load_config(path: str, overrides: Optional[Dict[str, Any]] = None) -> RunConfig:
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    if not isinstance(cfg, dict):
        raise ConfigError(f"Config validation error: expected a mapping in {path}")
    apply_overrides(cfg, overrides)
    validate_config(cfg)
    return RunConfig(
        input=cfg["input"],
        encoding=cfg.get("encoding", "utf-8"),
        pipeline=parse_stages(cfg.get("pipeline") or []),
    )


def apply_overrides(cfg: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> None:
    if not overrides:
        return
    if overrides.get("input") is not None:
        cfg["input"] = overrides["input"]
    if overrides.get("encoding") is not None:
        cfg["encoding"] = overrides["encoding"]
