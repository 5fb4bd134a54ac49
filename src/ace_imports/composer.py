"""Rendering of import rules into import statement text."""

from .models import QUOTE_CHARACTERS, ImportRule, QuoteStyle


def compose_import_code(rule: ImportRule, quote_style: QuoteStyle, *, use_semicolon: bool) -> str:
    """Render a rule as a namespace import statement.

    Examples:
        >>> compose_import_code(ImportRule(name="z", source="zod"), QuoteStyle.DOUBLE, use_semicolon=True)
        'import * as z from "zod";'
    """
    quote = QUOTE_CHARACTERS[quote_style]
    semicolon = ";" if use_semicolon else ""
    return f"import * as {rule.name} from {quote}{rule.source}{quote}{semicolon}"
