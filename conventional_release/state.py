"""Handoff between the compute and publish phases.

The compute phase writes two things:

- Step outputs (GITHUB_OUTPUT) for later steps and jobs of the workflow.
- Action state (GITHUB_STATE), which the runner exposes to the post step as
  ``STATE_<name>`` environment variables.

Values are plain ``name=value`` lines. Structured values are JSON encoded,
which keeps them on a single line. The publish phase validates the state
with the Handoff model instead of trusting it.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from .console import debug
from .exceptions import InvalidVersionFormat, StateError
from .models import VersionPlan
from .versions import SemanticVersion

STATE_KEYS = ("tag", "version", "released", "changelog")


class Handoff(BaseModel):
    """What the publish phase needs from the compute phase.

    Attributes:
        tag: Tag to create the release for.
        version: Version string, without prefix.
        released: Whether a release should be created at all.
        changelog: Commit subject lines for the release body.
    """

    tag: str
    version: str
    released: bool
    changelog: list[str]

    @field_validator("tag")
    @classmethod
    def _non_empty_tag(cls, value: str) -> str:
        if not value:
            raise ValueError("tag must not be empty")
        return value

    @field_validator("version")
    @classmethod
    def _valid_version(cls, value: str) -> str:
        try:
            SemanticVersion.parse(value)
        except InvalidVersionFormat as e:
            raise ValueError(str(e)) from e
        return value


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def plan_outputs(plan: VersionPlan, tag_prefix: str) -> dict[str, str]:
    """Step outputs for a plan, in the order they are written."""
    version = plan.next_version
    return {
        "tag": plan.tag,
        "version": version.format(),
        "version-major": str(version.major),
        "version-minor": str(version.minor),
        "version-patch": str(version.patch),
        "tag-prefix": tag_prefix,
        "released": _format_bool(plan.released),
    }


def plan_state(plan: VersionPlan) -> dict[str, str]:
    """Serialized handoff for the publish phase."""
    return {
        "tag": plan.tag,
        "version": plan.next_version.format(),
        "released": json.dumps(plan.released),
        "changelog": json.dumps(plan.changelog),
    }


def _write_values(output_path: str | Path | None, values: Mapping[str, str]) -> None:
    if output_path is None:
        for name, value in values.items():
            print(f"{name}={value}")
        return
    with open(output_path, "a") as fh:
        for name, value in values.items():
            fh.write(f"{name}={value}\n")


def write_outputs(output_path: str | Path | None, plan: VersionPlan, tag_prefix: str) -> None:
    """Append step outputs to the GITHUB_OUTPUT file (stdout when None)."""
    values = plan_outputs(plan, tag_prefix)
    debug(f"state: outputs {values}")
    _write_values(output_path, values)


def save_state(state_path: str | Path | None, plan: VersionPlan) -> None:
    """Append the handoff to the GITHUB_STATE file (stdout when None)."""
    values = plan_state(plan)
    debug(f"state: saving tag: {plan.tag}, released: {plan.released}, "
          f"changelog entries: {len(plan.changelog)}")
    _write_values(state_path, values)


def load_handoff(environ: Mapping[str, str] | None = None) -> Handoff:
    """Read and validate the handoff from STATE_* environment variables.

    Raises:
        StateError: If a key is missing, not valid JSON where JSON is
                    expected, or fails validation.
    """
    env = os.environ if environ is None else environ

    raw: dict[str, str] = {}
    for key in STATE_KEYS:
        value = env.get(f"STATE_{key}")
        if value is None:
            raise StateError(f"state {key!r} not found; did the compute phase run?")
        debug(f"state: {key} = {value}")
        raw[key] = value

    try:
        released = json.loads(raw["released"])
        changelog = json.loads(raw["changelog"])
    except json.JSONDecodeError as e:
        raise StateError(f"state is not valid JSON: {e}") from e

    if not isinstance(released, bool):
        raise StateError(f"state 'released' must be true or false, got {raw['released']!r}")

    try:
        return Handoff(
            tag=raw["tag"],
            version=raw["version"],
            released=released,
            changelog=changelog,
        )
    except ValidationError as e:
        raise StateError(f"Invalid state: {e}") from e
