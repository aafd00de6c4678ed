"""Fault-tolerant parser for tag-delimited clause blocks in a generation response.

A response looks like:

    preamble text
    <<CLAUSE id="docx_para_3">>
    [RISK] RED
    [ISSUE] Uncapped liability
    [ORIGINAL] ...
    [REASONING] ...
    [SUGGESTED_REWRITE] ...
    <<END_CLAUSE>>

The text is split eagerly on the start marker rather than matched in
start/end pairs, so a block whose end marker never arrived (truncated
output) is still recovered up to the next start marker or end of input.
"""

import logging
import re

from clausereview.core.models import Finding, ResponseClauseBlock, RiskLevel


logger = logging.getLogger(__name__)

START_MARKER_RE = re.compile(r'<<CLAUSE\s+')
HEADER_RE = re.compile(r'^id="([^"]+)">>')
END_MARKER = "<<END_CLAUSE>>"

SECTION_NAMES = ('RISK', 'ISSUE', 'ORIGINAL', 'REASONING', 'SUGGESTED_REWRITE')
_HEADER_ALT = '|'.join(SECTION_NAMES)
SECTION_RE = re.compile(rf'\[({_HEADER_ALT})\](.*?)(?=\[(?:{_HEADER_ALT})\]|$)', re.DOTALL)

SECTION_DEFAULTS = {
    'ORIGINAL': "",
    'ISSUE': "General Issue",
    'RISK': "YELLOW",
    'REASONING': "No reasoning provided.",
    'SUGGESTED_REWRITE': "",
}

MISSING_END_ERROR = f"Missing {END_MARKER} tag (response truncated). Content recovered until end of block."


def extract_sections(content: str) -> dict[str, str]:
    """Map each recognized [HEADER] to the trimmed text up to the next recognized header."""
    return {m.group(1): m.group(2).strip() for m in SECTION_RE.finditer(content)}


def parse_blocks(raw: str) -> list[ResponseClauseBlock]:
    """Split raw response text into clause blocks. Never raises; bad segments are skipped."""
    text = raw.replace('\r\n', '\n').replace('\r', '\n')
    blocks: list[ResponseClauseBlock] = []

    for segment in START_MARKER_RE.split(text)[1:]:
        header = HEADER_RE.match(segment)
        if not header:
            logger.warning("Skipping clause block without a valid id header: %r", segment[:40])
            continue

        end = segment.find(END_MARKER, header.end())
        if end != -1:
            content, error = segment[header.end():end], None
        else:
            content, error = segment[header.end():], MISSING_END_ERROR
            logger.warning("Clause %s has no end marker; recovered to end of block", header.group(1))

        blocks.append(ResponseClauseBlock(
            id=header.group(1),
            sections=extract_sections(content),
            parse_error=error,
        ))

    logger.info("Parsed %d clause blocks", len(blocks))
    return blocks


def normalize_risk(value: str) -> RiskLevel:
    """Map free-form risk text to a RiskLevel; unrecognized text is YELLOW.

    'yellow' is tested before 'low' since it contains it.
    """
    r = value.lower()
    if 'red' in r or 'high' in r or 'critical' in r:
        return RiskLevel.RED
    if 'yellow' in r or 'medium' in r:
        return RiskLevel.YELLOW
    if 'green' in r or 'low' in r:
        return RiskLevel.GREEN
    return RiskLevel.YELLOW


def _section(block: ResponseClauseBlock, name: str) -> str:
    return block.sections.get(name) or SECTION_DEFAULTS[name]


def to_finding(block: ResponseClauseBlock) -> Finding:
    """Map a clause block to a Finding, surfacing recovery problems in the reasoning text."""
    reasoning = _section(block, 'REASONING')
    if block.parse_error:
        reasoning += f"\n\n[SYSTEM WARNING: {block.parse_error}]"
    return Finding(
        target_id=block.id,
        issue_type=_section(block, 'ISSUE'),
        risk_level=normalize_risk(_section(block, 'RISK')),
        reasoning=reasoning,
        suggested_text=_section(block, 'SUGGESTED_REWRITE'),
        original_text=_section(block, 'ORIGINAL'),
    )


def parse_findings(raw: str) -> list[Finding]:
    return [to_finding(b) for b in parse_blocks(raw)]
