"""List numbering definitions and per-list counters for rendering Word list prefixes"""

import logging
import re
from dataclasses import dataclass, field

from clausereview.core.docx.ooxml import NAMESPACES, parse_part, w, w_val


logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r'%(\d+)')
MAX_LEVELS = 9
BULLET = "•"

ROMAN_TABLE = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)


@dataclass(frozen=True)
class NumberingLevel:
    start: int = 1
    fmt: str = "decimal"        # decimal, lowerLetter, upperRoman, bullet, ...
    lvl_text: str = "%1"        # e.g. "%1.%2."


@dataclass
class NumberingDefinitions:
    """Parsed numbering part: list instance -> abstract id, abstract id -> levels."""
    instances: dict[str, str] = field(default_factory=dict)
    abstracts: dict[str, dict[int, NumberingLevel]] = field(default_factory=dict)

    def levels_for(self, num_id: str) -> dict[int, NumberingLevel] | None:
        abstract_id = self.instances.get(num_id)
        if abstract_id is None:
            return None
        return self.abstracts.get(abstract_id)


def _int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def parse_numbering(xml_bytes: bytes) -> NumberingDefinitions:
    """Parse a numbering part. Raises lxml.etree.XMLSyntaxError on malformed XML."""
    root = parse_part(xml_bytes)
    defs = NumberingDefinitions()

    for num in root.iter(w("num")):
        num_id = num.get(w("numId"))
        abstract_id = w_val(num, "abstractNumId")
        if num_id and abstract_id is not None:
            defs.instances[num_id] = abstract_id

    for abstract in root.iter(w("abstractNum")):
        abstract_id = abstract.get(w("abstractNumId"))
        if not abstract_id:
            continue
        levels: dict[int, NumberingLevel] = {}
        for lvl in abstract.findall("w:lvl", namespaces=NAMESPACES):
            ilvl = _int(lvl.get(w("ilvl")), 0)
            levels[ilvl] = NumberingLevel(
                start=_int(w_val(lvl, "start"), 1),
                fmt=w_val(lvl, "numFmt", "decimal"),
                lvl_text=w_val(lvl, "lvlText", "%1"),
            )
        defs.abstracts[abstract_id] = levels

    logger.debug("Loaded %d list instances, %d abstract definitions", len(defs.instances), len(defs.abstracts))
    return defs


def to_roman(value: int) -> str:
    out = []
    for number, numeral in ROMAN_TABLE:
        while value >= number:
            out.append(numeral)
            value -= number
    return "".join(out)


def format_value(value: int, fmt: str) -> str:
    """Render one counter value in the given Word number format."""
    if fmt == "bullet":
        return BULLET
    if fmt == "none":
        return ""
    if value < 1 and fmt in ("lowerLetter", "upperLetter", "lowerRoman", "upperRoman"):
        return str(value)
    if fmt == "lowerLetter":
        return chr(ord('a') + value - 1)
    if fmt == "upperLetter":
        return chr(ord('A') + value - 1)
    if fmt == "lowerRoman":
        return to_roman(value).lower()
    if fmt == "upperRoman":
        return to_roman(value)
    return str(value)


class NumberingResolver:
    """Renders list prefixes in document order.

    Holds one counter vector per list instance, so a resolver must serve
    exactly one decode pass; build a new one for every document.
    """

    def __init__(self, definitions: NumberingDefinitions | None = None):
        self.definitions = definitions or NumberingDefinitions()
        self.counters: dict[str, list[int]] = {}

    def prefix_for(self, num_id: str, ilvl: int) -> str:
        """Advance the counter for (num_id, ilvl) and return the rendered prefix plus a tab."""
        levels = self.definitions.levels_for(num_id)
        if levels is None:
            return ""
        level = levels.get(ilvl)
        if level is None:
            return ""

        counters = self.counters.setdefault(num_id, [])
        for i in range(len(counters), ilvl + 1):
            counters.append((levels[i].start if i in levels else 1) - 1)

        counters[ilvl] += 1

        for i in range(ilvl + 1, MAX_LEVELS):
            reset = levels[i].start - 1 if i in levels else 0
            if i < len(counters):
                counters[i] = reset
            else:
                counters.append(reset)

        def _substitute(match: re.Match) -> str:
            index = int(match.group(1)) - 1
            if index < 0 or index >= len(counters):
                return match.group(0)
            target = levels.get(index)
            return format_value(counters[index], target.fmt if target else "decimal")

        return PLACEHOLDER_RE.sub(_substitute, level.lvl_text) + "\t"
