import io
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from lark import Lark
from lark.exceptions import UnexpectedInput, VisitError

from recognizer.ner_ast import Grammar, RuleDef
from recognizer.ner_errors import GrammarIOError, GrammarSyntaxError
from recognizer.ner_transformer import RuleTransformer
from recognizer.ner_trie import TrieDictionary

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).parent / "ner_grammar.lark"
with open(GRAMMAR_PATH, "r", encoding="utf-8") as f:
    RULE_GRAMMAR = f.read()

rule_parser = Lark(RULE_GRAMMAR, start="rule_line", parser="lalr")

ARROW = "<-"
GRAMMAR_FORMAT_VERSION = "1.0"


def _syntax_reason(line: str, error: UnexpectedInput) -> str:
    """Explain a lark parse failure in terms of the rule syntax."""
    if ARROW not in line:
        return "Every line must contain two parts separated by '<-'."
    head, _, tail = line.partition(ARROW)
    if not head.strip():
        return "The first part of a rule (the entity id) must not be empty."
    if not tail.strip():
        return "The second part of a rule must not be empty."
    if "\t\t" in tail or tail.endswith("\t"):
        return "Surface forms separated by tabs must not be empty."
    return f"Unexpected input at column {getattr(error, 'column', '?')}."


def parse_line(line: str, line_number: int) -> RuleDef:
    """
    Parse one non-blank grammar line.

    Raises:
        GrammarSyntaxError: If the line is not a valid rule
    """
    try:
        tree = rule_parser.parse(line)
        rule = RuleTransformer(line_number=line_number, line=line).transform(tree)
    except UnexpectedInput as e:
        raise GrammarSyntaxError(line_number, line, _syntax_reason(line, e)) from e
    except VisitError as ve:
        raise GrammarSyntaxError(line_number, line, str(ve.orig_exc)) from ve
    return rule


def parse_lines(lines: Iterable[str]) -> Iterator[RuleDef]:
    """
    Parse grammar lines lazily, skipping blank lines. Parsing stops at the
    first bad line.
    """
    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        yield parse_line(line, line_number)


def _read_text(stream: Any, source_name: str) -> str:
    """Read a whole text or binary (UTF-8) stream."""
    try:
        content = stream.read()
        return content.decode("utf-8") if isinstance(content, bytes) else content
    except (OSError, UnicodeDecodeError) as e:
        raise GrammarIOError(f"Failed to read grammar from {source_name}: {e}") from e


def parse_string(source: str, *, source_name: Optional[str] = None) -> Grammar:
    """Parse grammar text. Lines may end in LF, CRLF or CR."""
    # newline=None enables universal newlines
    lines = io.StringIO(source, newline=None)
    return Grammar(rules=tuple(parse_lines(lines)), source_name=source_name)


def parse_stream(stream: Any, *, source_name: Optional[str] = None) -> Grammar:
    """
    Parse a grammar from an open text or binary stream. Lines may end in LF,
    CRLF or CR, whatever newline mode the stream was opened with.

    Raises:
        GrammarSyntaxError: On the first bad rule
        GrammarIOError: If the stream cannot be read or decoded
    """
    name = source_name or getattr(stream, "name", None) or "<stream>"
    return parse_string(_read_text(stream, str(name)), source_name=source_name)


def parse_file(path) -> Grammar:
    try:
        with open(path, "r", encoding="utf-8", newline=None) as file:
            return parse_stream(file, source_name=str(path))
    except GrammarIOError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise GrammarIOError(f"Failed to read grammar from {path}: {e}") from e


def parse_source(source: Any) -> Grammar:
    """
    Parse a grammar given as literal text (str), a file path (os.PathLike), an
    open stream (anything with read()), UTF-8 bytes, or None for the empty grammar.
    An already parsed Grammar is returned as it is.
    """
    if source is None:
        return Grammar()
    if isinstance(source, Grammar):
        return source
    if isinstance(source, str):
        return parse_string(source)
    if isinstance(source, bytes):
        try:
            return parse_string(source.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise GrammarIOError(f"Grammar bytes are not valid UTF-8: {e}") from e
    if isinstance(source, os.PathLike):
        return parse_file(source)
    if hasattr(source, "read"):
        return parse_stream(source)
    raise TypeError(
        f"A grammar source cannot be a {type(source).__name__}; "
        "expected text, a path or a stream."
    )


def compile_grammar(grammar: Grammar, trie: TrieDictionary) -> TrieDictionary:
    """
    Put all rules of a parsed grammar into a trie dictionary.

    Every surface form is checked before the first one is inserted, so a bad
    grammar leaves the trie untouched.

    Raises:
        GrammarSyntaxError: If a surface form contains no word characters
    """
    pending: List[Tuple[str, str]] = []
    for rule in grammar.rules:
        for surface_form in rule.surface_forms:
            if not trie.to_trie_chars(surface_form):
                raise GrammarSyntaxError(
                    rule.line_number,
                    rule.line,
                    f"The surface form '{surface_form}' contains no word characters.",
                )
            pending.append((surface_form, rule.entity_id))

    for surface_form, entity_id in pending:
        trie.put(surface_form, entity_id)

    logger.info(
        "Compiled %s rules from %s into %s keys (%s trie nodes)",
        len(grammar.rules),
        grammar.source_name or "<string>",
        len(trie),
        trie.node_count,
    )
    return trie


def compile_source(source: Any, trie: TrieDictionary) -> TrieDictionary:
    """Parse a grammar source (see parse_source) and compile it into trie."""
    return compile_grammar(parse_source(source), trie)
