#!/usr/bin/env python3
"""
dbs_decoder.py - DBS (Depth Below Surface) sentence decoder

Decodes the data payload of an NMEA 0183 DBS sentence:

            1   2 3   4 5   6 7
            |   | |   | |   | |
     $--DBS,x.x,f,x.x,M,x.x,F*hh<CR><LF>

    1. Water depth, feet         2. f = feet
    3. Water depth, meters       4. M = meters
    5. Water depth, fathoms      6. F = fathoms
    7. Checksum

Real-world sensors often leave some of the three readings out while still
sending the unit letters, e.g. $SDDBS,,f,22.5,M,,F*cs. Empty readings decode
to None.

Usage:
    from dbs_decoder import parse_dbs, decode_dbs

    data = parse_dbs(sentence)          # raises DecodeError
    result = decode_dbs(sentence)       # DecodeResult, never raises on bad input

    python tools/dbs_decoder.py "7.8,f,2.4,M,1.3,F"
    python tools/dbs_decoder.py --json < payloads.txt
"""

import argparse
import json
import math
import re
import struct
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Tuple

sys.path.insert(0, str(Path(__file__).parent))
from nmea_sentence import NmeaSentence, SentenceType


# (record field, unit literal, display unit) in payload order
DBS_FIELDS = (
    ('water_depth_feet', 'f', 'ft'),
    ('water_depth_meters', 'M', 'm'),
    ('water_depth_fathoms', 'F', 'fathoms'),
)

# Sign, integer part, optional fraction, optional exponent ("7.8", "-1", ".5", "5.", "1e3")
_FLOAT_RE = re.compile(r'[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


class DecodeError(ValueError):
    """Base class for DBS decode failures."""


class WrongSentenceHeader(DecodeError):
    """Sentence was routed to the wrong decoder."""

    def __init__(self, expected: SentenceType, found: SentenceType):
        self.expected = expected
        self.found = found
        super().__init__(f"Wrong sentence header: expected {expected}, found {found}")


class ParseError(DecodeError):
    """Payload does not match the DBS field grammar."""

    def __init__(self, text: str, offset: int, expected: str):
        self.offset = offset
        self.remaining = text[offset:]
        self.expected = expected
        found = f"'{self.remaining[:16]}'" if self.remaining else 'end of input'
        super().__init__(f"Expected {expected} at offset {offset}, found {found}")


@dataclass(frozen=True)
class DbsData:
    """Decoded DBS record. Each reading is optional and single precision."""
    water_depth_feet: Optional[float] = None
    water_depth_meters: Optional[float] = None
    water_depth_fathoms: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {
            'water_depth_feet': self.water_depth_feet,
            'water_depth_meters': self.water_depth_meters,
            'water_depth_fathoms': self.water_depth_fathoms,
        }

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'DbsData':
        unknown = set(values) - {name for name, _, _ in DBS_FIELDS}
        if unknown:
            raise ValueError(f"Unknown DBS fields: {', '.join(sorted(unknown))}")
        return cls(**{name: values.get(name) for name, _, _ in DBS_FIELDS})


@dataclass
class DecodeResult:
    """Result of decoding a DBS sentence."""
    data: Dict[str, Any]
    chars_consumed: int
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'data': self.data,
            'chars_consumed': self.chars_consumed,
            'warnings': self.warnings,
            'errors': self.errors,
        }


def _to_f32(value: float) -> float:
    """Round a Python float to IEEE 754 single precision."""
    try:
        return struct.unpack('<f', struct.pack('<f', value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _read_optional_float(text: str, pos: int) -> Tuple[Optional[float], int]:
    """Read a float literal at pos. No literal there means no reading."""
    match = _FLOAT_RE.match(text, pos)
    if not match:
        return None, pos
    return _to_f32(float(match.group())), match.end()


def _expect_char(text: str, pos: int, char: str, what: str) -> int:
    if pos >= len(text) or text[pos] != char:
        raise ParseError(text, pos, what)
    return pos + 1


def _walk_dbs(payload: str) -> Tuple[DbsData, int]:
    """Walk the field grammar; return the record and chars consumed."""
    values = {}
    pos = 0
    for i, (name, unit, _) in enumerate(DBS_FIELDS):
        if i > 0:
            pos = _expect_char(payload, pos, ',', "',' before " + name)
        values[name], pos = _read_optional_float(payload, pos)
        pos = _expect_char(payload, pos, ',', "',' after " + name)
        pos = _expect_char(payload, pos, unit, f"unit '{unit}'")
    return DbsData(**values), pos


def parse_dbs_data(payload: str) -> DbsData:
    """
    Decode a DBS data payload such as "7.8,f,2.4,M,1.3,F".

    Anything after the fathoms unit letter is ignored.

    Raises:
        ParseError: payload does not match the field grammar
    """
    data, _ = _walk_dbs(payload)
    return data


def parse_dbs(sentence: NmeaSentence) -> DbsData:
    """
    Decode a DBS sentence.

    Raises:
        WrongSentenceHeader: sentence is not a DBS sentence
        ParseError: payload does not match the field grammar
    """
    if sentence.message_id != SentenceType.DBS:
        raise WrongSentenceHeader(SentenceType.DBS, sentence.message_id)
    return parse_dbs_data(sentence.data)


def decode_dbs(sentence: NmeaSentence) -> DecodeResult:
    """Decode a DBS sentence into a DecodeResult instead of raising."""
    result = DecodeResult(data={}, chars_consumed=0)

    if sentence.message_id != SentenceType.DBS:
        result.errors.append(str(WrongSentenceHeader(SentenceType.DBS, sentence.message_id)))
        return result

    try:
        data, consumed = _walk_dbs(sentence.data)
    except ParseError as e:
        result.chars_consumed = e.offset
        result.errors.append(str(e))
        return result

    result.data = data.to_dict()
    result.chars_consumed = consumed
    trailing = sentence.data[consumed:]
    if trailing:
        result.warnings.append(f"Ignored trailing content: '{trailing}'")
    return result


def format_dbs(data: DbsData) -> List[str]:
    """Human readable lines, one per DBS field."""
    lines = []
    values = data.to_dict()
    for name, _, display_unit in DBS_FIELDS:
        value = values[name]
        shown = '-' if value is None else f"{value:.7g} {display_unit}"
        lines.append(f"{name}: {shown}")
    return lines


def iter_payloads(args_payloads: List[str], stream: TextIO) -> List[str]:
    """Payloads from the command line, or non-blank lines of stream if none were given."""
    if args_payloads:
        return list(args_payloads)
    return [line.strip() for line in stream if line.strip()]


def main():
    parser = argparse.ArgumentParser(
        description='Decode NMEA 0183 DBS (Depth Below Surface) payloads'
    )
    parser.add_argument('payloads', nargs='*',
                        help='Payloads such as "7.8,f,2.4,M,1.3,F" (default: read lines from stdin)')
    parser.add_argument('--message-id', default='DBS', type=str.upper,
                        choices=[t.value for t in SentenceType],
                        help='Sentence type tag the payloads arrived with (default: DBS)')
    parser.add_argument('--talker', default='SD',
                        help='Talker id (default: SD)')
    parser.add_argument('--json', action='store_true',
                        help='Output results as JSON')
    args = parser.parse_args()

    message_id = SentenceType.from_tag(args.message_id)
    payloads = iter_payloads(args.payloads, sys.stdin)

    results = []
    failed = 0
    for payload in payloads:
        sentence = NmeaSentence(talker_id=args.talker, message_id=message_id, data=payload)
        result = decode_dbs(sentence)
        results.append((payload, result))
        if not result.success:
            failed += 1

    if args.json:
        print(json.dumps([dict(payload=p, **r.to_dict()) for p, r in results], indent=2))
    else:
        for payload, result in results:
            if not result.success:
                for error in result.errors:
                    print(f"{payload}: ERROR: {error}", file=sys.stderr)
                continue
            print(payload)
            for line in format_dbs(DbsData.from_dict(result.data)):
                print(f"  {line}")
            for warning in result.warnings:
                print(f"  WARNING: {warning}")

    sys.exit(1 if failed else 0)


if __name__ == '__main__':
    main()
