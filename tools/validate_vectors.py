#!/usr/bin/env python3
"""
validate_vectors.py - Run DBS test vectors from a YAML file

Usage:
    python tools/validate_vectors.py vectors/dbs.yaml
    python tools/validate_vectors.py vectors/dbs.yaml --verbose
    python tools/validate_vectors.py vectors/dbs.yaml --json

Each vector gives a payload and either the expected record or the name of
the error class the decoder must raise.
"""

import argparse
import yaml
import json
import math
import sys
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple
from dataclasses import dataclass, field, asdict

# Add tools to path
sys.path.insert(0, str(Path(__file__).parent))
from dbs_decoder import DbsData, DecodeError, ParseError, WrongSentenceHeader, format_dbs, parse_dbs
from nmea_sentence import NmeaSentence, SentenceType


ERROR_CLASSES = {
    'DecodeError': DecodeError,
    'ParseError': ParseError,
    'WrongSentenceHeader': WrongSentenceHeader,
}


@dataclass
class VectorResult:
    """Outcome of one test vector."""
    name: str
    payload: str
    passed: bool = False
    actual: Optional[Dict[str, Any]] = None
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ValidationResult:
    """Outcome of a whole vector file."""
    file_errors: List[str] = field(default_factory=list)
    vector_results: List[VectorResult] = field(default_factory=list)

    @property
    def failed(self) -> List[VectorResult]:
        return [r for r in self.vector_results if not r.passed]

    @property
    def all_passed(self) -> bool:
        return not self.file_errors and not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file_errors': self.file_errors,
            'total': len(self.vector_results),
            'failed': len(self.failed),
            'all_passed': self.all_passed,
            'vectors': [r.to_dict() for r in self.vector_results],
        }


def values_match(expected: Optional[float], actual: Optional[float],
                 rel_tolerance: float = 1e-6) -> Tuple[bool, str]:
    """Compare an expected reading with a decoded one, relative tolerance."""
    if expected is None or actual is None:
        if expected is actual:
            return True, ""
        return False, f"expected {expected}, got {actual}"

    if not isinstance(expected, (int, float)) or isinstance(expected, bool):
        return False, f"expected a number, got {type(expected).__name__} {expected!r}"

    if math.isnan(expected) or math.isnan(actual):
        return False, f"expected {expected}, got {actual} (NaN never matches)"

    if math.isinf(expected) or math.isinf(actual):
        if expected != actual:
            return False, f"expected {expected}, got {actual}"
        return True, ""

    diff = abs(expected - actual)
    if diff > rel_tolerance * max(abs(expected), abs(actual)):
        return False, f"expected {expected}, got {actual} (diff: {diff})"
    return True, ""


def validate_vector_file_structure(doc: Any) -> List[str]:
    """Validate vector file structure and return list of errors."""
    errors = []

    if not isinstance(doc, dict):
        return ["Vector file must be a mapping"]

    if 'name' not in doc:
        errors.append("Missing required field: 'name'")

    if 'sentence_type' in doc and doc['sentence_type'] != SentenceType.DBS.value:
        errors.append(f"'sentence_type' must be '{SentenceType.DBS.value}', got '{doc['sentence_type']}'")

    vectors = doc.get('test_vectors')
    if vectors is None:
        errors.append("Missing required field: 'test_vectors'")
        return errors
    if not isinstance(vectors, list):
        errors.append("'test_vectors' must be an array")
        return errors

    for i, tv in enumerate(vectors):
        if not isinstance(tv, dict):
            errors.append(f"Test vector {i}: must be an object")
            continue

        label = f"Test vector {i} ({tv.get('name', '?')})"

        if 'name' not in tv:
            errors.append(f"Test vector {i}: missing 'name'")

        if 'payload' not in tv:
            errors.append(f"{label}: missing 'payload'")
        elif not isinstance(tv['payload'], str):
            errors.append(f"{label}: 'payload' must be a string")

        has_expected = 'expected' in tv
        has_error = 'error' in tv
        if has_expected == has_error:
            errors.append(f"{label}: needs exactly one of 'expected' or 'error'")
        if has_expected and not isinstance(tv['expected'], dict):
            errors.append(f"{label}: 'expected' must be an object")
        if has_error and tv['error'] not in ERROR_CLASSES:
            errors.append(f"{label}: unknown error '{tv['error']}' "
                          f"(known: {', '.join(sorted(ERROR_CLASSES))})")

        if 'message_id' in tv:
            try:
                SentenceType.from_tag(str(tv['message_id']))
            except ValueError as e:
                errors.append(f"{label}: {e}")

    return errors


def run_test_vector(tv: Dict[str, Any]) -> VectorResult:
    """Run a single test vector and return result."""
    result = VectorResult(name=tv.get('name', 'unnamed'), payload=tv.get('payload', ''))
    expected_error = tv.get('error')

    try:
        sentence = NmeaSentence(
            talker_id=tv.get('talker_id', 'SD'),
            message_id=SentenceType.from_tag(str(tv.get('message_id', 'DBS'))),
            data=result.payload,
        )
        expected = DbsData.from_dict(tv.get('expected') or {}).to_dict()
    except ValueError as e:
        result.errors.append(f"Invalid vector: {e}")
        return result

    try:
        data = parse_dbs(sentence)
    except DecodeError as e:
        if expected_error is None:
            result.errors.append(f"Decode failed: {e}")
        elif not isinstance(e, ERROR_CLASSES[expected_error]):
            result.errors.append(f"expected {expected_error}, got {type(e).__name__}: {e}")
        result.passed = not result.errors
        return result

    result.actual = data.to_dict()
    if expected_error is not None:
        result.errors.append(f"expected {expected_error}, decoded {result.actual}")
        return result

    for field_name, expected_value in expected.items():
        match, msg = values_match(expected_value, result.actual[field_name])
        if not match:
            result.errors.append(f"{field_name}: {msg}")

    result.passed = not result.errors
    return result


def validate_vectors(doc: Any) -> ValidationResult:
    """Validate vector file and run all test vectors."""
    result = ValidationResult(file_errors=validate_vector_file_structure(doc))
    if result.file_errors:
        return result

    for tv in doc['test_vectors']:
        result.vector_results.append(run_test_vector(tv))

    return result


def print_results(result: ValidationResult, verbose: bool = False):
    """Print validation results to console."""
    if result.file_errors:
        print("Vector file: INVALID")
        for error in result.file_errors:
            print(f"  - {error}")
        return

    for vr in result.vector_results:
        print(f"{'PASS' if vr.passed else 'FAIL'} {vr.name}: {vr.payload!r}")
        for error in vr.errors:
            print(f"    ERROR: {error}")
        if verbose and vr.actual is not None:
            for line in format_dbs(DbsData.from_dict(vr.actual)):
                print(f"    {line}")

    total = len(result.vector_results)
    if result.all_passed:
        print(f"PASSED: All {total} tests passed")
    else:
        print(f"FAILED: {len(result.failed)} of {total} tests failed")


def main():
    parser = argparse.ArgumentParser(
        description='Run DBS decoder test vectors'
    )
    parser.add_argument('vectors', help='Path to test vector YAML file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show decoded readings for every vector')
    parser.add_argument('--json', action='store_true',
                        help='Output results as JSON')
    args = parser.parse_args()

    try:
        with open(args.vectors) as f:
            doc = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"Error loading vectors: {e}", file=sys.stderr)
        sys.exit(1)

    result = validate_vectors(doc)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(f"Validating: {args.vectors}")
        print_results(result, args.verbose)

    sys.exit(0 if result.all_passed else 1)


if __name__ == '__main__':
    main()
