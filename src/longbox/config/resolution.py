"""Resolution engine settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_unit_float, optional_env_var

DEFAULT_CANDIDATE_CONFIDENCE: Final[float] = 0.9
DEFAULT_POLICY_NAME: Final[str] = "default"


@dataclass(frozen=True, slots=True)
class ResolutionConfig:
    """Knobs for candidate extraction and policy lookup.

    ``default_confidence`` is stamped on extracted candidates whose source
    document does not state its own confidence. ``policy_name`` selects the
    stored policy document the CLI threads into every call.
    """

    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE
    policy_name: str = DEFAULT_POLICY_NAME


def get_resolution_config() -> ResolutionConfig:
    return ResolutionConfig(
        default_confidence=optional_env_unit_float(
            "LONGBOX_DEFAULT_CONFIDENCE", DEFAULT_CANDIDATE_CONFIDENCE
        ),
        policy_name=optional_env_var("LONGBOX_POLICY_NAME") or DEFAULT_POLICY_NAME,
    )
