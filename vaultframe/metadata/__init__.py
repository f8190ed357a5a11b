"""Front matter codec: decode and merge-encode YAML metadata blocks."""

from .decode import ParseError, decode_front_matter, parse_yaml, split_front_matter
from .encode import encode_front_matter, merge_front_matter, stringify_yaml

__all__ = [
    "ParseError",
    "decode_front_matter",
    "encode_front_matter",
    "merge_front_matter",
    "parse_yaml",
    "split_front_matter",
    "stringify_yaml",
]
