"""
Configuration for pair mapping.

Parameter groups:
A. Index (4): k, circular_marker, window_extension, header_mode
B. Distance filter (2): min_distance, max_distance
C. Windowed coverage (3): size, margin, step
D. Output (2): prefix, depth_threshold
"""

import json
from dataclasses import asdict, dataclass, field
from typing import Literal, Optional, Tuple

import yaml

DEFAULT_K = 21
DEFAULT_PROGRESS_INTERVAL = 1_000_000

HEADER_MODES = ("underscore", "truncate")


@dataclass
class IndexParams:
    """A. Reference indexing"""
    k: int = DEFAULT_K
    circular_marker: str = "topology=circular"
    window_extension: int = 2000            # bases appended to circular replicons
    # "underscore": spaces in FASTA headers become "_" (keeps annotations in the id)
    # "truncate": id stops at the first space
    header_mode: Literal["underscore", "truncate"] = "underscore"


@dataclass
class DistanceParams:
    """B. Valid end-to-end distance, open interval (min, max)"""
    min_distance: int = 20
    max_distance: int = 2000

    @property
    def valid_range(self) -> Tuple[int, int]:
        return self.min_distance, self.max_distance


@dataclass
class WindowParams:
    """C. Windowed coverage export"""
    size: int = 120
    margin: int = 10
    step: int = 10


@dataclass
class OutputParams:
    """D. Output files"""
    prefix: str = "pairmap"
    depth_threshold: int = 0                # export positions with depth > threshold


@dataclass
class MappingConfig:
    """Complete mapping configuration"""
    index: IndexParams = field(default_factory=IndexParams)
    distance: DistanceParams = field(default_factory=DistanceParams)
    window: WindowParams = field(default_factory=WindowParams)
    output: OutputParams = field(default_factory=OutputParams)

    # Tie-break seed (None = nondeterministic)
    seed: Optional[int] = None
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL

    @property
    def k(self) -> int:
        return self.index.k

    @property
    def valid_range(self) -> Tuple[int, int]:
        return self.distance.valid_range

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> 'MappingConfig':
        """Create from a (possibly partial) dict; missing keys keep defaults."""
        config = cls()
        d = d or {}
        if not isinstance(d, dict):
            raise ValueError(f"Config must be a mapping, got {type(d).__name__}")

        sections = [
            ("index", IndexParams),
            ("distance", DistanceParams),
            ("window", WindowParams),
            ("output", OutputParams),
        ]
        for name, params_cls in sections:
            if name not in d:
                continue
            try:
                setattr(config, name, params_cls(**(d[name] or {})))
            except TypeError as e:
                raise ValueError(f"Invalid '{name}' section in config: {e}") from e
        if "seed" in d:
            config.seed = d["seed"]
        if "progress_interval" in d:
            config.progress_interval = d["progress_interval"]

        return config

    @classmethod
    def from_yaml(cls, path: str) -> 'MappingConfig':
        with open(path, 'r') as f:
            d = yaml.safe_load(f)
        return cls.from_dict(d)

    def to_yaml(self, path: str):
        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_json(cls, path: str) -> 'MappingConfig':
        with open(path, 'r') as f:
            d = json.load(f)
        return cls.from_dict(d)

    def to_json(self, path: str):
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_file(cls, path: str) -> 'MappingConfig':
        """Load YAML (.yaml/.yml) or JSON (anything else)."""
        if str(path).endswith(('.yaml', '.yml')):
            return cls.from_yaml(path)
        return cls.from_json(path)

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> list:
        """Check parameter consistency, returning a list of problems."""
        problems = []

        if self.index.k < 1:
            problems.append(f"index.k must be >= 1 (got {self.index.k})")
        if self.index.window_extension < 0:
            problems.append("index.window_extension must be >= 0")
        if self.index.header_mode not in HEADER_MODES:
            problems.append(f"unknown index.header_mode: {self.index.header_mode}")

        if self.distance.min_distance < 0:
            problems.append("distance.min_distance must be >= 0")
        if self.distance.max_distance - self.distance.min_distance < 2:
            problems.append(
                f"distance range ({self.distance.min_distance}, "
                f"{self.distance.max_distance}) is empty"
            )

        if self.window.size <= 0:
            problems.append("window.size must be > 0")
        if self.window.step <= 0:
            problems.append("window.step must be > 0")
        if self.window.margin < 0:
            problems.append("window.margin must be >= 0")
        elif 2 * self.window.margin > self.window.size:
            problems.append("window.margin is too large for window.size")

        if self.output.depth_threshold < 0:
            problems.append("output.depth_threshold must be >= 0")
        if not self.output.prefix:
            problems.append("output.prefix must not be empty")

        if self.progress_interval <= 0:
            problems.append("progress_interval must be > 0")

        return problems


def get_default_config() -> MappingConfig:
    """Default configuration"""
    return MappingConfig()
