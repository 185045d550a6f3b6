import hashlib
import json
from typing import Sequence

def fingerprint_seating(seating: Sequence[str]) -> str:
    """Return the SHA-256 hex digest used as the uniqueness key of a seating.
    
    The seating is serialized as compact JSON before hashing. JSON string
    quoting keeps names containing commas or quotes unambiguous, and the
    compact form matches fingerprints already stored by earlier deployments.
    """
    encoded = json.dumps(list(seating), separators=(',', ':'), ensure_ascii=False)
    return hashlib.sha256(encoded.encode('utf-8')).hexdigest()
