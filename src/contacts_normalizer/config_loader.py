from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # type: ignore[import-untyped]

from .normalization import CaseStyle, NormalizationRules, PhoneFormat
from .readers import DEFAULT_MAX_FILE_SIZE_BYTES, ReaderLimits

RULE_TOGGLES = (
    "remove_accents",
    "combine_names",
    "prefer_primary_phone",
    "include_all_phones",
    "include_emails",
    "include_address",
    "include_organization",
)


@dataclass
class RulesConfig:
    phone_format: str = PhoneFormat.INTERNATIONAL_PARENS.value
    case: str = CaseStyle.CAPITALIZE.value
    remove_accents: bool = False
    combine_names: bool = True
    prefer_primary_phone: bool = True
    include_all_phones: bool = True
    include_emails: bool = True
    include_address: bool = True
    include_organization: bool = True


@dataclass
class LimitsConfig:
    max_file_size_mb: float = DEFAULT_MAX_FILE_SIZE_BYTES / (1024 * 1024)
    max_rows: Optional[int] = None


@dataclass
class OutputsConfig:
    dir: Path


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    format: Optional[str] = None


@dataclass
class AppConfig:
    rules_config: RulesConfig
    limits_config: LimitsConfig
    outputs: OutputsConfig
    logging: LoggingConfig

    def rules(self) -> NormalizationRules:
        cfg = self.rules_config
        return NormalizationRules(
            phone_format=PhoneFormat.parse(cfg.phone_format),
            case_style=CaseStyle.parse(cfg.case),
            remove_accents=cfg.remove_accents,
            combine_names=cfg.combine_names,
            prefer_primary_phone=cfg.prefer_primary_phone,
            include_all_phones=cfg.include_all_phones,
            include_emails=cfg.include_emails,
            include_address=cfg.include_address,
            include_organization=cfg.include_organization,
        )

    def limits(self) -> ReaderLimits:
        return ReaderLimits(
            max_file_size_bytes=int(self.limits_config.max_file_size_mb * 1024 * 1024),
            max_rows=self.limits_config.max_rows,
        )


def _load_yaml(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _first_set(*values: Any) -> Any:
    """First value that is not None; explicit zeros and ``False`` count as set."""
    return next((value for value in values if value is not None), None)


def _flag(args: argparse.Namespace, name: str, section: Dict[str, Any], default: bool) -> bool:
    value = getattr(args, name, None)
    if value is not None:
        return bool(value)
    value = _first_set(section.get(name), default)
    if not isinstance(value, bool):
        raise ValueError(f"rules.{name} must be true or false, got {value!r}")
    return value


def _non_negative(name: str, value: Any) -> Any:
    if value is not None and value < 0:
        raise ValueError(f"limits.{name} must not be negative, got {value!r}")
    return value


def load_app_config(args: argparse.Namespace) -> AppConfig:
    config_data = _load_yaml(getattr(args, "config", None))
    rules_cfg = config_data.get("rules", {}) or {}
    limits_cfg = config_data.get("limits", {}) or {}
    outputs_cfg = config_data.get("outputs", {}) or {}
    logging_cfg = config_data.get("logging", {}) or {}

    defaults = RulesConfig()
    rules = RulesConfig(
        phone_format=_first_set(
            getattr(args, "phone_format", None),
            rules_cfg.get("phone_format"),
            defaults.phone_format,
        ),
        case=_first_set(getattr(args, "case", None), rules_cfg.get("case"), defaults.case),
        **{name: _flag(args, name, rules_cfg, getattr(defaults, name)) for name in RULE_TOGGLES},
    )
    # fail fast on bad tokens instead of at normalization time
    PhoneFormat.parse(rules.phone_format)
    CaseStyle.parse(rules.case)

    limits = LimitsConfig(
        max_file_size_mb=_non_negative(
            "max_file_size_mb",
            _first_set(
                getattr(args, "max_file_size_mb", None),
                limits_cfg.get("max_file_size_mb"),
                LimitsConfig.max_file_size_mb,
            ),
        ),
        max_rows=_non_negative(
            "max_rows", _first_set(getattr(args, "max_rows", None), limits_cfg.get("max_rows"))
        ),
    )

    outputs_dir = Path(
        _first_set(getattr(args, "out_dir", None), outputs_cfg.get("dir")) or os.getcwd()
    )

    arg_level = getattr(args, "log_level", None)
    effective_level = str(_first_set(arg_level, logging_cfg.get("level"), "WARNING")).upper()

    return AppConfig(
        rules_config=rules,
        limits_config=limits,
        outputs=OutputsConfig(dir=outputs_dir),
        logging=LoggingConfig(level=effective_level, format=logging_cfg.get("format")),
    )
