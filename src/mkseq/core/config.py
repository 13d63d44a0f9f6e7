"""
Transformation configuration for mkseq.
Handles loading, validation, and storage of all transformation options.
"""

import math

import yaml
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Tuple

from .sequence import BEARING_REF_MAGNETIC_NORTH, BEARING_REF_TRUE_NORTH, SPEED_UNITS
from ..errors import ConfigurationError
from ..utils.logger import LOG_LEVELS


# Options that may not be enabled together
EXCLUSIVE_OPTIONS: Tuple[Tuple[str, str], ...] = (
    ("center", "interpolate_linear"),
    ("center", "smooth"),
    ("interpolate_linear", "smooth"),
)

# Sub-options and the option they depend on
REQUIRED_OPTIONS: Dict[str, str] = {
    "smooth.altitude": "smooth",
    "smooth.harmonic": "smooth",
    "smooth.speed": "smooth",
    "smooth.time": "smooth",
    "timestamp.overwrite": "timestamp",
}


@dataclass
class SmoothingConfig:
    """Windowed smoothing configuration."""
    enabled: bool = False
    nodes: int = 0  # window size, 0 = whole sequence
    altitude: bool = False  # also average altitudes in the window
    harmonic: bool = False  # weight neighbours by 1 / (distance in steps + 1)
    speed: bool = False  # also average speeds in the window
    time: bool = False  # also average time stamps in the window


@dataclass
class CenteringConfig:
    """Panorama centering configuration."""
    enabled: bool = False
    degrees: float = 0.0  # bearing of the first photo
    degrees_ref: str = BEARING_REF_TRUE_NORTH  # T (true north) or M (magnetic north)


@dataclass
class AltitudeConfig:
    """Altitude policy: keep (filling gaps with value) or strip."""
    keep: bool = False
    value: float = 0.0  # meters, negative = below sea level


@dataclass
class TimestampConfig:
    """GPS time stamp synthesis configuration."""
    enabled: bool = False
    overwrite: bool = False  # always use the file modification time
    utc: bool = False  # EXIF time stamps are UTC instead of local time


@dataclass
class SpeedConfig:
    """Fixed speed written to every photo."""
    enabled: bool = False
    value: float = 0.0
    unit: str = "K"  # K (km/h), M (mph), N (knots)


@dataclass
class TransformationConfig:
    """Main configuration class for a sequencing run."""

    # Position transforms (mutually exclusive)
    smooth: SmoothingConfig = field(default_factory=SmoothingConfig)
    interpolate_linear: bool = False
    center: CenteringConfig = field(default_factory=CenteringConfig)

    normalize_bearing: bool = True
    altitude: AltitudeConfig = field(default_factory=AltitudeConfig)
    timestamp: TimestampConfig = field(default_factory=TimestampConfig)
    speed: SpeedConfig = field(default_factory=SpeedConfig)
    area_information: Optional[str] = None
    preserve_timestamp: bool = False  # give outputs the modification time of their photo

    # Logging
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    log_file: Optional[str] = None

    def __post_init__(self):
        self.validate()

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'TransformationConfig':
        """
        Build configuration from a plain dictionary (as loaded from YAML).

        Raises:
            ConfigurationError: If keys are unknown or options conflict
        """
        data = dict(data or {})
        try:
            return cls(
                smooth=SmoothingConfig(**(data.pop('smooth', None) or {})),
                center=CenteringConfig(**(data.pop('center', None) or {})),
                altitude=AltitudeConfig(**(data.pop('altitude', None) or {})),
                timestamp=TimestampConfig(**(data.pop('timestamp', None) or {})),
                speed=SpeedConfig(**(data.pop('speed', None) or {})),
                **data
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'TransformationConfig':
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Validated TransformationConfig instance
        """
        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {yaml_path}")

        return cls.from_dict(data)

    def to_dict(self) -> dict:
        return {
            'smooth': asdict(self.smooth),
            'interpolate_linear': self.interpolate_linear,
            'center': asdict(self.center),
            'normalize_bearing': self.normalize_bearing,
            'altitude': asdict(self.altitude),
            'timestamp': asdict(self.timestamp),
            'speed': asdict(self.speed),
            'area_information': self.area_information,
            'preserve_timestamp': self.preserve_timestamp,
            'log_level': self.log_level,
            'log_file': self.log_file,
        }

    def to_yaml(self, yaml_path: str):
        """
        Save configuration to YAML file.

        Args:
            yaml_path: Path to output YAML file
        """
        with open(yaml_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def option_states(self) -> Dict[str, bool]:
        """Flat view of every boolean option, keyed by dotted name."""
        states = {
            'smooth': self.smooth.enabled,
            'interpolate_linear': self.interpolate_linear,
            'center': self.center.enabled,
            'normalize_bearing': self.normalize_bearing,
            'altitude.keep': self.altitude.keep,
            'timestamp': self.timestamp.enabled,
            'speed': self.speed.enabled,
        }
        for name in ('altitude', 'harmonic', 'speed', 'time'):
            states[f'smooth.{name}'] = getattr(self.smooth, name)
        for name in ('overwrite', 'utc'):
            states[f'timestamp.{name}'] = getattr(self.timestamp, name)
        return states

    def validate(self) -> bool:
        """
        Validate option combinations and enumerated values.

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        states = self.option_states()

        for first, second in EXCLUSIVE_OPTIONS:
            if states[first] and states[second]:
                raise ConfigurationError(
                    f"Options '{first}' and '{second}' are mutually exclusive",
                    flag=first,
                    value=second
                )

        for option, required in REQUIRED_OPTIONS.items():
            if states[option] and not states[required]:
                raise ConfigurationError(
                    f"Option '{option}' requires '{required}' to be enabled",
                    flag=option
                )

        if self.center.degrees_ref not in (BEARING_REF_TRUE_NORTH, BEARING_REF_MAGNETIC_NORTH):
            raise ConfigurationError(
                f"center degrees_ref must be T or M, got {self.center.degrees_ref!r}",
                flag='center.degrees_ref',
                value=self.center.degrees_ref
            )

        if self.speed.unit not in SPEED_UNITS:
            raise ConfigurationError(
                f"speed unit must be one of {', '.join(SPEED_UNITS)}, got {self.speed.unit!r}",
                flag='speed.unit',
                value=self.speed.unit
            )

        if not isinstance(self.smooth.nodes, int) or isinstance(self.smooth.nodes, bool):
            raise ConfigurationError(
                f"smooth nodes must be an integer, got {self.smooth.nodes!r}",
                flag='smooth.nodes',
                value=self.smooth.nodes
            )

        for flag, value in (
            ('center.degrees', self.center.degrees),
            ('altitude.value', self.altitude.value),
            ('speed.value', self.speed.value),
        ):
            if not _is_finite_number(value):
                raise ConfigurationError(
                    f"{flag} must be a finite number, got {value!r}",
                    flag=flag,
                    value=value
                )

        if str(self.log_level).upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {self.log_level}",
                flag='log_level',
                value=self.log_level
            )

        return True

    def __str__(self) -> str:
        enabled = [name for name, state in self.option_states().items() if state]
        return f"options: {', '.join(enabled) or 'none'}; nodes: {self.smooth.nodes}"


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _split_suffix(text: str, suffixes: str, default: str, flag: str) -> Tuple[str, str]:
    text = text.strip()
    if text and text[-1].isalpha():
        suffix = text[-1].upper()
        if suffix not in suffixes:
            raise ConfigurationError(
                f"Invalid unit {text[-1]!r} in argument {text!r} of {flag}; "
                f"expected one of {', '.join(suffixes)}",
                flag=flag,
                value=text
            )
        return text[:-1], suffix
    return text, default


def parse_number(text: str, flag: str) -> float:
    """
    Parse a free-text numeric argument.

    Raises:
        ConfigurationError: Naming the flag and the raw value
    """
    try:
        value = float(str(text).strip())
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid number {text!r} for {flag}", flag=flag, value=text
        ) from e

    if not math.isfinite(value):
        raise ConfigurationError(
            f"Invalid number {text!r} for {flag}: must be finite", flag=flag, value=text
        )
    return value


def parse_nodes(text: str, flag: str = "--smooth") -> int:
    """Parse a smoothing window size (a whole number)."""
    try:
        return int(str(text).strip())
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid natural number {text!r} for {flag}", flag=flag, value=text
        ) from e


def parse_bearing(text: str, flag: str = "--center") -> Tuple[float, str]:
    """
    Parse a bearing with optional reference suffix, e.g. "45", "45T", "10.5M".

    Returns:
        Tuple of (degrees, reference)
    """
    number, ref = _split_suffix(
        str(text),
        BEARING_REF_TRUE_NORTH + BEARING_REF_MAGNETIC_NORTH,
        BEARING_REF_TRUE_NORTH,
        flag
    )
    return parse_number(number, flag), ref


def parse_speed(text: str, flag: str = "--speed") -> Tuple[float, str]:
    """
    Parse a speed with optional unit suffix, e.g. "30", "30K", "12N".

    Returns:
        Tuple of (value, unit)
    """
    number, unit = _split_suffix(str(text), "".join(SPEED_UNITS), "K", flag)
    return parse_number(number, flag), unit


def create_default_config(output_path: str = "config.yaml") -> TransformationConfig:
    """
    Create and save a default configuration file.

    Args:
        output_path: Path to save configuration

    Returns:
        Default TransformationConfig instance
    """
    config = TransformationConfig(
        smooth=SmoothingConfig(enabled=True, nodes=5),
    )
    config.to_yaml(output_path)
    return config
