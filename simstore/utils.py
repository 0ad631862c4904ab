import json
import math
import hashlib
import re
from decimal import Decimal


# Required POST fields mapped to the JSON type they must carry.
# None means the field only has to be present.
SIMULATION_SCHEMA = {
    "id": "string",
    "user_id": "string",
    "env_id": "string",
    "data": None,
    "result": "number",
    "summary": None,
}

TYPE_CHECKS = {
    "string": lambda value: isinstance(value, str),
    # bool is an int subclass but not a JSON number
    "number": lambda value: isinstance(value, (int, float)) and not isinstance(value, bool),
}

CORS_ALLOW_METHODS = 'GET, POST, OPTIONS'
CORS_ALLOW_HEADERS = 'Content-Type'

MAX_SAFE_INTEGER = 2 ** 53
MAX_ARRAY_INDEX = 2 ** 32 - 1
ARRAY_INDEX = re.compile(r'^(?:0|[1-9][0-9]*)$')
LONE_SURROGATE = re.compile('[\ud800-\udfff]')


class SimulationValidationError(ValueError):
    pass


def validate_simulation_data(payload, schema=None):
    if schema is None:
        schema = SIMULATION_SCHEMA

    if not isinstance(payload, dict):
        raise SimulationValidationError("Invalid data structure")

    for field in schema:
        if field not in payload:
            raise SimulationValidationError(f"Missing required field: {field}")

    for field, kind in schema.items():
        if kind is None:
            continue
        if not TYPE_CHECKS[kind](payload[field]):
            raise SimulationValidationError(f"{field} must be a {kind}")

    return payload


def format_number(value):
    """Render a number the way ECMAScript Number#toString does."""
    # Past 2**53 integers only exist as doubles
    if isinstance(value, int) and abs(value) <= MAX_SAFE_INTEGER:
        return str(value)
    try:
        value = float(value)
    except OverflowError:
        # Infinity
        return "null"
    if math.isnan(value) or math.isinf(value):
        return "null"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr gives the shortest digit string that round-trips
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits

    e = n - 1
    mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
    return f"{sign}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def quote_string(value):
    # Parsed pairs are already joined, so any surrogate left is a lone one
    return LONE_SURROGATE.sub(
        lambda match: "\\u%04x" % ord(match.group()),
        json.dumps(value, ensure_ascii=False),
    )


def ordered_keys(obj):
    """Object keys in JavaScript property order: array indices ascending,
    then the remaining keys in insertion order."""
    indices = []
    others = []
    for key in obj:
        text = str(key)
        if ARRAY_INDEX.match(text) and int(text) < MAX_ARRAY_INDEX:
            indices.append(key)
        else:
            others.append(key)
    indices.sort(key=lambda key: int(str(key)))
    return indices + others


def json_stringify(value):
    """Compact JSON matching JSON.stringify: JavaScript key order, no
    whitespace, non-ASCII left as is."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, dict):
        items = [
            quote_string(str(key)) + ":" + json_stringify(value[key])
            for key in ordered_keys(value)
        ]
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(json_stringify(item) for item in value) + "]"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def generate_data_hash(data):
    # Key order is part of the hashed content
    return hashlib.sha256(json_stringify(data).encode("utf-8")).hexdigest()


def parse_json_body(raw):
    def reject_constant(name):
        raise ValueError(f"Unexpected token {name} in JSON")

    return json.loads(raw, parse_constant=reject_constant)


def cors_headers(origin, allowed_origins):
    headers = {
        'Access-Control-Allow-Methods': CORS_ALLOW_METHODS,
        'Access-Control-Allow-Headers': CORS_ALLOW_HEADERS,
    }
    if origin and origin in allowed_origins:
        headers['Access-Control-Allow-Origin'] = origin
    return headers
