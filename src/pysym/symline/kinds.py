from pysym.spec.errors import KindMaskError
from pysym.spec.models import ObjKind, PROTOCOL_KINDS

from .codec import is_kind_token, kind_of


def all_kinds() -> str:
    """The comma separated list of every selectable kind."""
    return ",".join(kind.token for kind in PROTOCOL_KINDS)


def parse_kind_mask(kinds: str) -> int:
    mask = 0
    for token in kinds.split(","):
        token = token.strip()
        if not is_kind_token(token):
            raise KindMaskError(f"unknown type kind {token!r}")
        mask |= 1 << int(kind_of(token))
    return mask


def mask_admits(mask: int, kind: ObjKind) -> bool:
    return bool((1 << int(kind)) & mask)