"""
plugins/pokenews/markup.py

Ampersand colour/format markup compiler.

Message templates use the compact chat markup server operators already
know from other plugins:

- ``&#RRGGBB``  set an RGB foreground colour
- ``&0``-``&f`` set one of the 16 legacy palette colours
- ``&k`` obfuscated, ``&l`` bold, ``&m`` strikethrough,
  ``&n`` underline, ``&o`` italic
- ``&r``        reset all styling and colour

Compilation happens in two passes. Hex tokens are cut out of the string
first; legacy tokens are then scanned only inside the literal text that
pass one left behind. A legacy code written directly after a hex code
therefore still applies and, being later in the stream, overrides it.

The compiler is total: anything that does not match a token shape is kept
as literal text, ampersand included.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple, Union


class Format(Enum):
    """Format flags, keyed by their legacy code letter."""

    OBFUSCATED = "k"
    BOLD = "l"
    STRIKETHROUGH = "m"
    UNDERLINE = "n"
    ITALIC = "o"
    RESET = "r"


# 16-entry legacy palette, keyed by hex digit
LEGACY_PALETTE: Dict[str, int] = {
    "0": 0x000000,  # black
    "1": 0x0000AA,  # dark_blue
    "2": 0x00AA00,  # dark_green
    "3": 0x00AAAA,  # dark_aqua
    "4": 0xAA0000,  # dark_red
    "5": 0xAA00AA,  # dark_purple
    "6": 0xFFAA00,  # gold
    "7": 0xAAAAAA,  # gray
    "8": 0x555555,  # dark_gray
    "9": 0x5555FF,  # blue
    "a": 0x55FF55,  # green
    "b": 0x55FFFF,  # aqua
    "c": 0xFF5555,  # red
    "d": 0xFF55FF,  # light_purple
    "e": 0xFFFF55,  # yellow
    "f": 0xFFFFFF,  # white
}

# Component keys for every flag except RESET
COMPONENT_KEYS: Dict[Format, str] = {
    Format.BOLD: "bold",
    Format.ITALIC: "italic",
    Format.UNDERLINE: "underlined",
    Format.STRIKETHROUGH: "strikethrough",
    Format.OBFUSCATED: "obfuscated",
}

HEX_COLOR_PATTERN = re.compile(r"&#([0-9a-f]{6})", re.IGNORECASE | re.ASCII)
LEGACY_CODE_PATTERN = re.compile(r"&([0-9a-fk-or])", re.IGNORECASE | re.ASCII)

SECTION = "§"


# =============================================================================
# Styled Text
# =============================================================================

@dataclass(frozen=True)
class TextRun:
    """
    A maximal span of text sharing one colour and one flag set.

    Attributes:
        text: Literal text of the run.
        color: 24-bit RGB value, or None for the receiver's default colour.
        flags: Active format flags.
    """

    text: str
    color: Optional[int] = None
    flags: FrozenSet[Format] = field(default_factory=frozenset)

    @property
    def hex_color(self) -> Optional[str]:
        """Colour as ``#rrggbb``, or None."""
        if self.color is None:
            return None
        return f"#{self.color:06x}"

    def has(self, flag: Format) -> bool:
        return flag in self.flags

    def to_component(self) -> Dict[str, Any]:
        """
        Convert to a JSON text component (the shape ``tellraw`` accepts).

        A run carrying RESET states every flag explicitly so it does not
        inherit styling from the component before it.
        """
        component: Dict[str, Any] = {"text": self.text}
        reset = Format.RESET in self.flags

        if self.color is not None:
            component["color"] = self.hex_color
        elif reset:
            component["color"] = "reset"

        for flag, key in COMPONENT_KEYS.items():
            if flag in self.flags:
                component[key] = True
            elif reset:
                component[key] = False

        return component


@dataclass(frozen=True)
class StyledText:
    """Compiled markup: an ordered, immutable sequence of runs."""

    runs: Tuple[TextRun, ...] = ()

    def __len__(self) -> int:
        return len(self.runs)

    def __iter__(self) -> Iterator[TextRun]:
        return iter(self.runs)

    @property
    def plain_text(self) -> str:
        """Text with all styling stripped."""
        return "".join(run.text for run in self.runs)

    def to_component(self) -> Dict[str, Any]:
        """Wrap all runs as ``extra`` children of an empty root component."""
        return {
            "text": "",
            "extra": [run.to_component() for run in self.runs],
        }

    def to_legacy(self) -> str:
        """
        Encode as a section-sign string for hosts that only take legacy text.

        RGB colours use the ``§x§R§R§G§G§B§B`` form. Every run after the
        first starts with ``§r`` so it never inherits the previous style.
        """
        parts: List[str] = []
        for index, run in enumerate(self.runs):
            if index > 0 or Format.RESET in run.flags:
                parts.append(SECTION + "r")
            if run.color is not None:
                parts.append(SECTION + "x")
                parts.extend(SECTION + digit for digit in f"{run.color:06x}")
            for flag in COMPONENT_KEYS:
                if flag in run.flags:
                    parts.append(SECTION + flag.value)
            parts.append(run.text)
        return "".join(parts)


# =============================================================================
# Lexer
# =============================================================================

@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class ColorToken:
    rgb: int


@dataclass(frozen=True)
class FormatToken:
    flag: Format


Token = Union[Literal, ColorToken, FormatToken]


def _scan_hex(markup: str) -> Iterator[Token]:
    """Pass one: split out ``&#RRGGBB`` tokens, leave everything else literal."""
    position = 0
    for match in HEX_COLOR_PATTERN.finditer(markup):
        if match.start() > position:
            yield Literal(markup[position:match.start()])
        yield ColorToken(int(match.group(1), 16))
        position = match.end()
    if position < len(markup):
        yield Literal(markup[position:])


def _scan_legacy(text: str) -> Iterator[Token]:
    """Pass two: split legacy ``&x`` codes out of a literal segment."""
    position = 0
    for match in LEGACY_CODE_PATTERN.finditer(text):
        if match.start() > position:
            yield Literal(text[position:match.start()])

        code = match.group(1).lower()
        if code in LEGACY_PALETTE:
            yield ColorToken(LEGACY_PALETTE[code])
        else:
            yield FormatToken(Format(code))
        position = match.end()
    if position < len(text):
        yield Literal(text[position:])


def tokenize(markup: str) -> List[Token]:
    """
    Lex markup into a flat token stream.

    Hex tokens are recognised before legacy tokens; legacy scanning only
    ever sees the literal segments produced by the hex pass.
    """
    tokens: List[Token] = []
    for token in _scan_hex(markup):
        if isinstance(token, Literal):
            tokens.extend(_scan_legacy(token.text))
        else:
            tokens.append(token)
    return tokens


# =============================================================================
# Compiler
# =============================================================================

def compile_markup(markup: Optional[str]) -> StyledText:
    """
    Compile a markup string into styled runs.

    Flags accumulate until a reset; colour is last-wins. A run boundary is
    placed only where the active colour or flag set actually changes, and
    runs with no text are dropped.

    Args:
        markup: Template text. None compiles to empty text.

    Returns:
        StyledText built fresh for this call.
    """
    if not markup:
        return StyledText()

    runs: List[TextRun] = []
    buffer: List[str] = []
    color: Optional[int] = None
    flags: FrozenSet[Format] = frozenset()

    def flush() -> None:
        if buffer:
            runs.append(TextRun("".join(buffer), color, flags))
            buffer.clear()

    for token in tokenize(markup):
        if isinstance(token, Literal):
            buffer.append(token.text)
            continue

        if isinstance(token, ColorToken):
            next_color, next_flags = token.rgb, flags
        elif token.flag is Format.RESET:
            next_color, next_flags = None, frozenset({Format.RESET})
        else:
            next_color, next_flags = color, flags | {token.flag}

        if next_color != color or next_flags != flags:
            flush()
            color, flags = next_color, next_flags

    flush()
    return StyledText(tuple(runs))


class MarkupCompiler:
    """
    Stateless compiler object, injectable where a collaborator is expected.

    Examples:
        >>> MarkupCompiler().compile("&#ff0000Red").runs[0].hex_color
        '#ff0000'
    """

    def compile(self, markup: Optional[str]) -> StyledText:
        return compile_markup(markup)
