"""Core data models for namespace import suggestions."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

type DependencyMap = Mapping[str, str]  # package name -> declared version range, e.g. "^4.17.0"

ANY_VERSION_RANGE = "*"


class QuoteStyle(StrEnum):
    """Quote character used around the module specifier of an import."""

    SINGLE = "single"
    DOUBLE = "double"
    BACKTICK = "backtick"


QUOTE_CHARACTERS: Mapping[QuoteStyle, str] = {
    QuoteStyle.SINGLE: "'",
    QuoteStyle.DOUBLE: '"',
    QuoteStyle.BACKTICK: "`",
}


class CompletionKind(StrEnum):
    """Completion item category hint shown by the editor next to a suggestion."""

    TEXT = "Text"
    METHOD = "Method"
    FUNCTION = "Function"
    CONSTRUCTOR = "Constructor"
    FIELD = "Field"
    VARIABLE = "Variable"
    CLASS = "Class"
    INTERFACE = "Interface"
    MODULE = "Module"
    PROPERTY = "Property"
    UNIT = "Unit"
    VALUE = "Value"
    ENUM = "Enum"
    KEYWORD = "Keyword"
    SNIPPET = "Snippet"
    CONSTANT = "Constant"
    STRUCT = "Struct"


@dataclass(frozen=True)
class ImportRule:
    """A configured potential namespace import.

    Examples:
        {name: "z", source: "zod"} -> import * as z from "zod", gated on any installed zod
        {name: "z", source: "zod/v4", dependency: "zod@^3.25.0"} -> gated on zod >= 3.25.0
    """

    name: str  # Bound identifier, e.g. "z"
    source: str  # Module specifier, e.g. "zod/v4"
    id: str | None = None  # Only rules with an id can be disabled
    dependency: str | None = None  # Descriptor like "zod@^3.0.0"; falls back to source
    kind: CompletionKind = CompletionKind.VARIABLE

    @property
    def gating_descriptor(self) -> str:
        """Descriptor that decides whether the rule applies to the workspace."""
        return self.dependency if self.dependency is not None else self.source

    @property
    def import_prefix(self) -> str:
        """Text that marks this rule's import as already present in a document."""
        return f"import * as {self.name}"


@dataclass(frozen=True)
class DependencySpec:
    """Parsed form of a dependency descriptor."""

    name: str  # Package name, including the leading "@" for scoped packages
    version_range: str  # Validated semver range, "*" when the descriptor had none


@dataclass(frozen=True)
class ResolvedImportSet:
    """Applicable imports for one document plus the quote style to render them with."""

    imports: tuple[ImportRule, ...]
    quote_style: QuoteStyle


@dataclass(frozen=True)
class QuoteStyleInputs:
    """Everything the quote cascade needs besides the document text."""

    configured: QuoteStyle | None = None  # Explicit setting, None when "auto"
    workspace: QuoteStyle | None = None  # From Prettier/ESLint config files
    last_found: QuoteStyle | None = None  # From an earlier resolution this session


@dataclass(frozen=True)
class Document:
    """An open text document."""

    path: Path
    text: str

    def get_text(self) -> str:
        """Return the full document text."""
        return self.text

    @classmethod
    def from_path(cls, path: Path) -> "Document":
        """Read a document from disk."""
        return cls(path=path, text=path.read_text(encoding="utf-8"))


@dataclass(frozen=True)
class Position:
    """Zero-based line/column position inside a document."""

    line: int
    character: int


DOCUMENT_START = Position(line=0, character=0)


@dataclass(frozen=True)
class TextEdit:
    """Text to insert at a position."""

    position: Position
    new_text: str


@dataclass(frozen=True)
class CompletionItem:
    """A suggestion handed to the editor's completion list."""

    label: str
    detail: str
    description: str
    kind: CompletionKind
    insert_text: str
    filter_text: str
    documentation: str
    additional_text_edits: tuple[TextEdit, ...] = ()
    command: str | None = None


@dataclass(frozen=True)
class InsertionEdit:
    """The edits performed when the user picks an import from the insert command."""

    rule: ImportRule
    statement: str  # Composed import statement, without the trailing newline
    import_edit: TextEdit  # Statement plus newline at the start of the document
    cursor_text: str  # Bound name typed at the cursor
    post_insert_commands: tuple[str, ...] = field(default_factory=tuple)
