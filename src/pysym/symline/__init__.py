from .codec import decode, encode, LINE_PATTERN
from .kinds import all_kinds, parse_kind_mask, mask_admits

__all__ = [
    "decode",
    "encode",
    "LINE_PATTERN",
    "all_kinds",
    "parse_kind_mask",
    "mask_admits",
]
