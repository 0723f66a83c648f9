"""
Categorical encoding registry.

Maps domain categories (matched by substring of the record category) to the
string tokens they use and the numeric codes those tokens are stored as.
Matching records also receive one 'state_<token>' attribute per code so that
readers of the HDF5 file can decode the values.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

# Boolean spellings accepted in any category
BOOLEAN_CODES: dict[str, int] = {
    "true": 1,
    "TRUE": 1,
    "True": 1,
    "false": 0,
    "FALSE": 0,
    "False": 0,
}


@dataclass(frozen=True)
class CategoricalEncoding:
    """
    Encoding for one categorical vocabulary.

    Attributes:
        pattern: Substring matched against the record category.
        codes: Token -> numeric code used when normalizing matrix cells.
        attributes: Attribute key -> code injected into matching records.
    """

    pattern: str
    codes: dict[str, int] = field(default_factory=dict)
    attributes: dict[str, int] = field(default_factory=dict)

    def matches(self, category: str) -> bool:
        return self.pattern in category


ENCODINGS: tuple[CategoricalEncoding, ...] = (
    # Tachograph activity: upper case marks the start of a period, lower case
    # a period in progress (rest, driving, working, available).
    CategoricalEncoding(
        pattern="s3p.activity",
        codes={"R": 1, "r": 0, "D": 7, "d": 6, "W": 5, "w": 4, "A": 3, "a": 2},
        attributes={
            "state_R": 1,
            "state_r": 0,
            "state_D": 7,
            "state_d": 6,
            "state_W": 5,
            "state_w": 4,
            "state_A": 3,
            "state_a": 2,
        },
    ),
    CategoricalEncoding(
        pattern="s3p.cruiseControlActive",
        attributes={"state_TRUE": 1, "state_OFF": 0},
    ),
    CategoricalEncoding(
        pattern="s3p.ignition",
        codes={"ON": 1, "OFF": 0},
        attributes={"state_ON": 1, "state_OFF": 0},
    ),
)


def _build_token_codes() -> dict[str, float]:
    """Flatten all vocabularies into one token lookup."""
    table: dict[str, float] = {token: float(code) for token, code in BOOLEAN_CODES.items()}
    for encoding in ENCODINGS:
        for token, code in encoding.codes.items():
            if token in table and table[token] != code:
                msg = f"Token {token!r} has conflicting codes {table[token]} and {code}"
                raise ValueError(msg)
            table[token] = float(code)
    return table


# Tokens are matched regardless of category, exactly and case-sensitively
TOKEN_CODES: dict[str, float] = _build_token_codes()


def matching_encodings(category: str) -> list[CategoricalEncoding]:
    """
    Find all encodings whose pattern occurs in the category.

    Matches are independent: a category may match several entries.
    """
    return [encoding for encoding in ENCODINGS if encoding.matches(category)]


def inject_attributes(category: str, attributes: Mapping[str, int]) -> dict[str, int]:
    """
    Merge the state attributes of every matching encoding into a copy of attributes.

    Injected keys overwrite existing keys of the same name. The injection does
    not depend on which tokens actually occur in the record's matrix.

    Args:
        category: Record category.
        attributes: Existing attribute map (not modified).

    Returns:
        New attribute map.
    """
    merged = dict(attributes)
    for encoding in matching_encodings(category):
        merged.update(encoding.attributes)
    return merged
