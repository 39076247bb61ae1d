"""
CIE Core Config Runtime - Extraction Options and Runtime Settings

This module provides the read-only option object consumed by clause detection
and proposition generation, the word-list dictionaries it refers to, and the
process-wide runtime settings loaded from ``settings.json``.
"""

from __future__ import annotations
import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Any, Iterable, Set, Union
from functools import lru_cache
import threading

from cie_core.models import Token
from cie_core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

RESOURCES_DIR = Path(__file__).parent / "resources"

DICTIONARY_FILES: Dict[str, str] = {
    "copular": "copular.dict",
    "ext_copular": "ext-copular.dict",
    "not_ext_copular": "not-ext-copular.dict",
    "complex_transitive": "complex-transitive.dict",
    "adverbs_ignore": "adverbs-ignore.dict",
    "adverbs_include": "adverbs-include.dict",
    "adverbs_conj": "adverbs-conj.dict",
}


class Dictionary:
    """
    A set of words read from a plain-text word list.

    One entry per line; surrounding whitespace is trimmed and a line is an
    entry only if its first character is a letter. Membership of a token is
    tested on its lemma.
    """

    def __init__(self, words: Optional[Iterable[str]] = None, name: str = ""):
        self.name = name
        self.words: Set[str] = set(words or [])

    @classmethod
    def from_lines(cls, lines: Iterable[str], name: str = "") -> "Dictionary":
        words = set()
        for line in lines:
            line = line.strip()
            if line and line[0].isalpha():
                words.add(line)
        return cls(words, name)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Dictionary":
        """Load a dictionary file"""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"dictionary file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            dictionary = cls.from_lines(f, name=path.stem)
        logger.debug(f"Loaded dictionary {path.name}: {len(dictionary)} entries")
        return dictionary

    def contains(self, token: Union[Token, str, None]) -> bool:
        """Test a token by lemma, or a plain word"""
        if token is None:
            return False
        if isinstance(token, Token):
            return token.lemma in self.words
        return token in self.words

    def __contains__(self, item) -> bool:
        return self.contains(item)

    def __len__(self) -> int:
        return len(self.words)

    def __eq__(self, other) -> bool:
        return isinstance(other, Dictionary) and self.words == other.words

    def __repr__(self) -> str:
        return f"Dictionary({self.name!r}, {len(self.words)} words)"


@lru_cache(maxsize=None)
def _packaged_words(key: str) -> frozenset:
    return frozenset(Dictionary.load(RESOURCES_DIR / DICTIONARY_FILES[key]).words)


def packaged_dictionary(key: str) -> Dictionary:
    """One of the dictionaries shipped with the package"""
    if key not in DICTIONARY_FILES:
        raise ConfigurationError(f"unknown dictionary '{key}'")
    return Dictionary(_packaged_words(key), name=key)


def _dictionary_field(key: str):
    return field(default_factory=lambda: packaged_dictionary(key), repr=False)


@dataclass
class ExtractionOptions:
    """Options controlling clause detection and proposition generation"""
    nary: bool = False
    min_optional_args: int = 0
    max_optional_args: int = 1

    process_cc_verbs: bool = True
    process_cc_non_verbs: bool = True
    process_appositions: bool = True
    apposition_verb: str = "is"
    process_possessives: bool = True
    possessive_verb: str = "has"
    process_partmods: bool = True

    conservative_sva: bool = True
    conservative_svoa: bool = False
    lemmatize: bool = False

    max_recursion_depth: int = 64

    copular: Dictionary = _dictionary_field("copular")
    ext_copular: Dictionary = _dictionary_field("ext_copular")
    not_ext_copular: Dictionary = _dictionary_field("not_ext_copular")
    complex_transitive: Dictionary = _dictionary_field("complex_transitive")
    adverbs_ignore: Dictionary = _dictionary_field("adverbs_ignore")
    adverbs_include: Dictionary = _dictionary_field("adverbs_include")
    adverbs_conj: Dictionary = _dictionary_field("adverbs_conj")

    def __post_init__(self):
        if self.min_optional_args < 0:
            raise ConfigurationError("min_optional_args must not be negative")
        if self.max_optional_args < 0:
            raise ConfigurationError("max_optional_args must not be negative")
        if self.max_recursion_depth < 1:
            raise ConfigurationError("max_recursion_depth must be positive")

    @classmethod
    def default(cls) -> "ExtractionOptions":
        return cls()

    @classmethod
    def option_names(cls) -> List[str]:
        """Scalar option names, in declaration order"""
        return [f.name for f in fields(cls) if f.name not in DICTIONARY_FILES]

    @classmethod
    def from_dict(
        cls,
        options: Optional[Dict[str, Any]] = None,
        dictionaries: Optional[Dict[str, str]] = None
    ) -> "ExtractionOptions":
        """
        Build options from a mapping of option values and dictionary paths.

        Unknown keys and values of the wrong type raise ConfigurationError.
        """
        kwargs: Dict[str, Any] = {}
        defaults = {f.name: f.default for f in fields(cls) if f.name not in DICTIONARY_FILES}

        for key, value in (options or {}).items():
            if key not in defaults:
                raise ConfigurationError(f"unknown option '{key}'")
            expected = type(defaults[key])
            if expected is int and isinstance(value, bool):
                raise ConfigurationError(f"option '{key}' expects int, got bool")
            if not isinstance(value, expected):
                raise ConfigurationError(
                    f"option '{key}' expects {expected.__name__}, got {type(value).__name__}"
                )
            kwargs[key] = value

        for key, path in (dictionaries or {}).items():
            if key not in DICTIONARY_FILES:
                raise ConfigurationError(f"unknown dictionary '{key}'")
            kwargs[key] = Dictionary.load(path)

        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ExtractionOptions":
        """Load options from a JSON settings file"""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"configuration file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"{path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a JSON object")

        base_dir = path.parent
        dictionaries = {
            key: str(base_dir / value) if not Path(value).is_absolute() else value
            for key, value in data.get("dictionaries", {}).items()
        }
        return cls.from_dict(data.get("extraction", {}), dictionaries)

    def replace(self, **changes) -> "ExtractionOptions":
        """Copy with some options changed; dictionaries are shared"""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key in changes:
            if key not in values:
                raise ConfigurationError(f"unknown option '{key}'")
        values.update(changes)
        return ExtractionOptions(**values)

    def is_copular(self, token: Token) -> bool:
        return self.copular.contains(token)

    def is_ext_copular(self, token: Token) -> bool:
        return self.ext_copular.contains(token)

    def is_not_ext_copular(self, token: Token) -> bool:
        return self.not_ext_copular.contains(token)

    def is_complex_transitive(self, token: Token) -> bool:
        return self.complex_transitive.contains(token)

    def describe(self, prefix: str = "# ") -> str:
        """Human-readable listing of the effective options"""
        lines = []
        for name in self.option_names():
            value = getattr(self, name)
            if isinstance(value, bool):
                value = str(value).lower()
            lines.append(f"{prefix}{name} = {value}")
        for key in DICTIONARY_FILES:
            lines.append(f"{prefix}{key} = {len(getattr(self, key))} entries")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = {name: getattr(self, name) for name in self.option_names()}
        result["dictionaries"] = {
            key: sorted(getattr(self, key).words) for key in DICTIONARY_FILES
        }
        return result


class RuntimeConfig:
    """Process-wide runtime settings"""

    _instance: Optional["RuntimeConfig"] = None
    _lock = threading.Lock()

    def __new__(cls, *args, **kwargs):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self, config_dir: Optional[Path] = None):
        if self._initialized:
            return

        self.config_dir = Path(
            config_dir or os.environ.get("CIE_CONFIG_DIR") or Path.home() / ".clausal_ie"
        )
        self._settings: Dict[str, Any] = {}
        self._options: Optional[ExtractionOptions] = None

        self._load_settings()

        self._initialized = True
        logger.info(f"RuntimeConfig initialized: config_dir={self.config_dir}")

    @property
    def settings_file(self) -> Path:
        return self.config_dir / "settings.json"

    def _load_settings(self):
        """Load settings from config file"""
        if self.settings_file.exists():
            try:
                with open(self.settings_file, "r", encoding="utf-8") as f:
                    self._settings = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load settings: {e}")

        extraction = self._settings.setdefault("extraction", {})
        for name in ExtractionOptions.option_names():
            extraction.setdefault(name, getattr(ExtractionOptions, name))

        self._settings.setdefault("dictionaries", {})

        self._settings.setdefault("parser", {
            "default_engine": "stanza",
            "language": "en",
            "use_gpu": False,
            "download_models": True
        })

        self._settings.setdefault("server", {
            "host": "127.0.0.1",
            "port": 8000,
            "debug": False
        })

    def save_settings(self):
        """Save settings to config file"""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")

    def get_setting(self, section: str, key: str, default: Any = None) -> Any:
        """Get a setting value"""
        return self._settings.get(section, {}).get(key, default)

    def set_setting(self, section: str, key: str, value: Any):
        """Set a setting value"""
        if section not in self._settings:
            self._settings[section] = {}
        self._settings[section][key] = value
        if section in ("extraction", "dictionaries"):
            self._options = None

    def build_options(self) -> ExtractionOptions:
        """Extraction options from the current settings"""
        if self._options is None:
            dictionaries = {
                key: str(self.config_dir / path) if not Path(path).is_absolute() else path
                for key, path in self._settings.get("dictionaries", {}).items()
            }
            self._options = ExtractionOptions.from_dict(
                self._settings.get("extraction", {}), dictionaries
            )
        return self._options

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "config_dir": str(self.config_dir),
            "settings": self._settings
        }

    @classmethod
    def reset(cls):
        """Drop the singleton so the next access reloads settings"""
        with cls._lock:
            cls._instance = None


def get_runtime_config() -> RuntimeConfig:
    """Get the singleton runtime configuration instance"""
    return RuntimeConfig()


def get_setting(section: str, key: str, default: Any = None) -> Any:
    """Get a setting value"""
    return get_runtime_config().get_setting(section, key, default)


def load_options(path: Optional[Union[str, Path]] = None) -> ExtractionOptions:
    """Options from an explicit JSON file, else from the runtime settings"""
    if path:
        return ExtractionOptions.from_file(path)
    return get_runtime_config().build_options()
