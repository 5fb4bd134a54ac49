"""Quote style detection for composed import statements.

The quote character is picked by a cascade that stops at the first definitive
answer:

1. An explicit quote style in the settings
2. The nearest Prettier config (``singleQuote``), then the nearest ESLint config
   (the ``quotes`` rule)
3. The quote character used most in the current document
4. The style detected by the previous resolution in this session
5. Double quotes

Formatter config files are not parsed. Instead we look for a few literal
renderings of the key/value pair that make sense for the file's syntax. Unusual
formatting can be missed, but a match is never a guess.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from enum import Enum, auto
from pathlib import Path

from .errors import UnsupportedConfigFileTypeError
from .locator import find_file_upwards_cached
from .models import QuoteStyle, QuoteStyleInputs

logger = logging.getLogger(__name__)

FALLBACK_QUOTE_STYLE = QuoteStyle.DOUBLE

PRETTIER_CONFIG_FILE_NAMES = (
    ".prettierrc",
    ".prettierrc.json",
    ".prettierrc.js",
    ".prettierrc.cjs",
    ".prettierrc.mjs",
    ".prettierrc.yaml",
    ".prettierrc.yml",
    ".prettierrc.toml",
    "prettier.config.js",
    "prettier.config.cjs",
    "prettier.config.mjs",
)
ESLINT_CONFIG_FILE_NAMES = (
    ".eslintrc",
    ".eslintrc.json",
    ".eslintrc.js",
    ".eslintrc.cjs",
    ".eslintrc.yaml",
    ".eslintrc.yml",
    "eslint.config.js",
    "eslint.config.cjs",
    "eslint.config.mjs",
)
FORMATTER_CONFIG_FILE_NAMES = PRETTIER_CONFIG_FILE_NAMES + ESLINT_CONFIG_FILE_NAMES

ESLINT_SEVERITIES = ("error", "warn", "2", "1")


class ConfigFileType(Enum):
    """Syntax family of a formatter config file."""

    JSON = auto()
    JS = auto()
    YAML = auto()
    TOML = auto()


_SUFFIX_TYPES: Mapping[str, tuple[ConfigFileType, ...]] = {
    ".json": (ConfigFileType.JSON,),
    ".js": (ConfigFileType.JS,),
    ".cjs": (ConfigFileType.JS,),
    ".mjs": (ConfigFileType.JS,),
    ".yaml": (ConfigFileType.YAML,),
    ".yml": (ConfigFileType.YAML,),
    ".toml": (ConfigFileType.TOML,),
}

# .prettierrc and .eslintrc may hold JSON or YAML
_EXTENSIONLESS_TYPES = (ConfigFileType.JSON, ConfigFileType.YAML)


def config_file_types(path: Path) -> tuple[ConfigFileType, ...]:
    """Return the syntax families to try for a formatter config file.

    Raises:
        UnsupportedConfigFileTypeError: The file extension is not one we can scan.
    """
    if path.name in (".prettierrc", ".eslintrc"):
        return _EXTENSIONLESS_TYPES
    types = _SUFFIX_TYPES.get(path.suffix)
    if types is None:
        raise UnsupportedConfigFileTypeError(path)
    return types


def _render(value: str | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _severity_arrays(value: str, quote_chars: Sequence[str]) -> list[str]:
    forms: list[str] = []
    for severity in ESLINT_SEVERITIES:
        for q in quote_chars:
            rendered_severity = severity if severity.isdigit() else f"{q}{severity}{q}"
            forms.append(f"[{rendered_severity}, {q}{value}{q}]")
    return forms


def _contains_pair(text: str, key_forms: Sequence[str], value_forms: Sequence[str]) -> bool:
    for key_form in key_forms:
        for value_form in value_forms:
            if f"{key_form} {value_form}" in text or f"{key_form}{value_form}" in text:
                return True
    return False


def _json_has_property(text: str, key: str, value: str | bool) -> bool:
    rendered = _render(value)
    value_forms = [rendered if isinstance(value, bool) else f'"{rendered}"', f"'{rendered}'"]
    if isinstance(value, str):
        value_forms += _severity_arrays(rendered, ('"',))
    return _contains_pair(text, [f'"{key}":'], value_forms)


def _js_has_property(text: str, key: str, value: str | bool) -> bool:
    rendered = _render(value)
    value_forms = [rendered, f"'{rendered}'", f'"{rendered}"', f"`{rendered}`"]
    if isinstance(value, str):
        value_forms += _severity_arrays(rendered, ("'", '"'))
    key_forms = [key, f"{key}:", f'"{key}":', f"'{key}':"]
    return _contains_pair(text, key_forms, value_forms)


def _yaml_has_property(text: str, key: str, value: str | bool) -> bool:
    rendered = _render(value)
    value_forms = [
        rendered,
        f"'{rendered}'",
        f'"{rendered}"',
        f"| {rendered}",
        f"| '{rendered}'",
        f'| "{rendered}"',
    ]
    if isinstance(value, str):
        value_forms += _severity_arrays(rendered, ("", "'", '"'))
    key_forms = [f"{key}:", f'"{key}":', f"'{key}':"]
    return _contains_pair(text, key_forms, value_forms)


def _toml_has_property(text: str, key: str, value: str | bool) -> bool:
    rendered = _render(value)
    value_forms = [
        rendered,
        f"'{rendered}'",
        f'"{rendered}"',
        f"[{rendered}]",
        f"[ '{rendered}' ]",
        f'[ "{rendered}" ]',
    ]
    if isinstance(value, str):
        value_forms += _severity_arrays(rendered, ('"', "'"))
    key_forms = [f"{key} =", f'"{key}" =', f"'{key}' ="]
    return _contains_pair(text, key_forms, value_forms)


PROPERTY_CHECKERS: Mapping[ConfigFileType, Callable[[str, str, str | bool], bool]] = {
    ConfigFileType.JSON: _json_has_property,
    ConfigFileType.JS: _js_has_property,
    ConfigFileType.YAML: _yaml_has_property,
    ConfigFileType.TOML: _toml_has_property,
}


def config_has_property(
    text: str, file_types: Sequence[ConfigFileType], key: str, value: str | bool
) -> bool:
    """Check whether config text sets key to value in any of the given syntaxes.

    Examples:
        >>> config_has_property('{"singleQuote": true}', [ConfigFileType.JSON], "singleQuote", True)
        True
        >>> config_has_property("quotes: ['error', 'single']", [ConfigFileType.JS], "quotes", "single")
        True
    """
    return any(PROPERTY_CHECKERS[file_type](text, key, value) for file_type in file_types)


def _prettier_quote_style(text: str, file_types: Sequence[ConfigFileType]) -> QuoteStyle | None:
    if config_has_property(text, file_types, "singleQuote", True):
        return QuoteStyle.SINGLE
    if config_has_property(text, file_types, "singleQuote", False):
        return QuoteStyle.DOUBLE
    return None


def _eslint_quote_style(text: str, file_types: Sequence[ConfigFileType]) -> QuoteStyle | None:
    for style in (QuoteStyle.SINGLE, QuoteStyle.DOUBLE, QuoteStyle.BACKTICK):
        if config_has_property(text, file_types, "quotes", style.value):
            return style
    return None


_FORMATTER_LOOKUPS: tuple[
    tuple[str, tuple[str, ...], Callable[[str, Sequence[ConfigFileType]], QuoteStyle | None]], ...
] = (
    ("prettier", PRETTIER_CONFIG_FILE_NAMES, _prettier_quote_style),
    ("eslint", ESLINT_CONFIG_FILE_NAMES, _eslint_quote_style),
)


def quote_style_from_config_file(
    path: Path, reader: Callable[[str, Sequence[ConfigFileType]], QuoteStyle | None]
) -> QuoteStyle | None:
    """Read one formatter config file and extract the quote style it states, if any.

    Raises:
        UnsupportedConfigFileTypeError: The file extension is not one we can scan.
        OSError: The file cannot be read.
    """
    file_types = config_file_types(path)
    text = path.read_text(encoding="utf-8")
    return reader(text, file_types)


def find_workspace_quote_style(working_dir: Path) -> QuoteStyle | None:
    """Look for a quote style stated by the nearest Prettier or ESLint config file.

    Prettier is consulted first. If the nearest Prettier config does not state
    ``singleQuote`` (or there is none), the nearest ESLint config is consulted
    for its ``quotes`` rule.

    Returns:
        The stated quote style, or None when no config states a recognized one.
        An unreadable config file is logged and that tool is skipped.
    """
    for tool, file_names, reader in _FORMATTER_LOOKUPS:
        config_file = find_file_upwards_cached(file_names, working_dir)
        if config_file is None:
            logger.debug("No %s config found above %s", tool, working_dir)
            continue

        try:
            style = quote_style_from_config_file(config_file, reader)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read %s config %s: %s", tool, config_file, e)
            continue

        if style is not None:
            logger.info("Quote style from %s config %s: %s", tool, config_file, style)
            return style
        logger.debug("%s config %s does not state a quote style", tool, config_file)

    return None


def detect_quote_style_in_code(text: str) -> QuoteStyle | None:
    """Guess the quote style of a document from quote character frequencies.

    Single quotes and backticks need a strict majority over both other characters.
    Double quotes win ties. Returns None when single quotes and backticks tie
    above double quotes.

    Examples:
        >>> detect_quote_style_in_code("const a = 'x'")
        <QuoteStyle.SINGLE: 'single'>
        >>> detect_quote_style_in_code("")
        <QuoteStyle.DOUBLE: 'double'>
    """
    single = text.count("'")
    double = text.count('"')
    backtick = text.count("`")

    if single > double and single > backtick:
        return QuoteStyle.SINGLE
    if backtick > double and backtick > single:
        return QuoteStyle.BACKTICK
    if double >= single and double >= backtick:
        return QuoteStyle.DOUBLE
    return None


def resolve_quote_style(document_text: str, inputs: QuoteStyleInputs) -> QuoteStyle:
    """Run the quote style cascade for one resolution."""
    if inputs.configured is not None:
        return inputs.configured
    if inputs.workspace is not None:
        return inputs.workspace

    detected = detect_quote_style_in_code(document_text)
    if detected is not None:
        return detected
    if inputs.last_found is not None:
        return inputs.last_found
    return FALLBACK_QUOTE_STYLE
