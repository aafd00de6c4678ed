"""Token-level diffs between original and proposed clause text"""

import logging
import re

from diff_match_patch import diff_match_patch

from clausereview.core.models import DiffOp, DiffSpan


logger = logging.getLogger(__name__)

# One boundary rule for both inputs: word runs, punctuation/symbol runs, whitespace runs.
TOKEN_RE = re.compile(r'\w+|[^\w\s]+|\s+')

# Token ids are encoded as characters above the ASCII range before diffing.
_CODE_OFFSET = 0x100

_OPS = {
    diff_match_patch.DIFF_EQUAL: DiffOp.equal,
    diff_match_patch.DIFF_INSERT: DiffOp.insert,
    diff_match_patch.DIFF_DELETE: DiffOp.delete,
}


def tokenize(text: str) -> list[str]:
    return TOKEN_RE.findall(text)


def _encode(tokens: list[str], ids: dict[str, int], table: list[str]) -> str:
    """Encode tokens as one char per token id, extending ids/table for unseen tokens."""
    chars = []
    for token in tokens:
        if token not in ids:
            ids[token] = len(table)
            table.append(token)
        chars.append(chr(_CODE_OFFSET + ids[token]))
    return "".join(chars)


def _compute(original: str, proposed: str, timeout: float) -> list[DiffSpan]:
    ids: dict[str, int] = {}
    table: list[str] = []
    encoded_a = _encode(tokenize(original), ids, table)
    encoded_b = _encode(tokenize(proposed), ids, table)

    dmp = diff_match_patch()
    dmp.Diff_Timeout = timeout
    diffs = dmp.diff_main(encoded_a, encoded_b, False)
    dmp.diff_cleanupSemantic(diffs)

    spans = []
    for op, chars in diffs:
        text = "".join(table[ord(c) - _CODE_OFFSET] for c in chars)
        if text:
            spans.append(DiffSpan(op=_OPS[op], text=text))
    return spans


def word_diff(original: str, proposed: str, timeout: float = 0.0) -> list[DiffSpan]:
    """Diff two strings at token granularity.

    Non-delete spans concatenate to proposed and non-insert spans to original.
    timeout=0 searches for the minimal edit script without a deadline. Any
    internal failure degrades to a full delete of original then a full insert.
    """
    try:
        return _compute(original, proposed, timeout)
    except Exception as e:
        logger.error("Diff calculation failed, using full replacement: %s", e)
        return [DiffSpan(op=DiffOp.delete, text=original), DiffSpan(op=DiffOp.insert, text=proposed)]


def render_inline(spans: list[DiffSpan]) -> str:
    """Render spans as [-deleted-]{+inserted+} markup for terminal review."""
    parts = []
    for s in spans:
        if s.op == DiffOp.delete:
            parts.append(f"[-{s.text}-]")
        elif s.op == DiffOp.insert:
            parts.append(f"{{+{s.text}+}}")
        else:
            parts.append(s.text)
    return "".join(parts)


def diff_summary(spans: list[DiffSpan]) -> dict[str, int]:
    """Return added/deleted/unchanged character counts. Useful for compact change stats."""
    counts = {"added": 0, "deleted": 0, "unchanged": 0}
    key = {DiffOp.insert: "added", DiffOp.delete: "deleted", DiffOp.equal: "unchanged"}
    for s in spans:
        counts[key[s.op]] += len(s.text)
    return counts
