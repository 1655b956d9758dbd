import re
from typing import Union

from .config import IDENTIFIER_PREFIX
from .errors import DataTooLarge, InvalidIdentifierFormat, InvalidIdentifierLength


IDENTIFIER_MIN_LENGTH = 3
IDENTIFIER_MAX_LENGTH = 20
IDENTIFIER_FORMAT = re.compile(r"^[0-9a-zA-Z]+$")

# width in hex characters of the chain's [u8; 32] identifier fields
FIXED_WIDTH_SIZE = 64


def check_identifier_format(identifier: str) -> bool:
    return bool(IDENTIFIER_FORMAT.fullmatch(identifier))


def check_identifier_length(identifier: str) -> bool:
    return IDENTIFIER_MIN_LENGTH <= len(identifier) <= IDENTIFIER_MAX_LENGTH


def validate_identifier(identifier: str) -> None:
    if not check_identifier_format(identifier):
        raise InvalidIdentifierFormat("Not valid identifier supplied")
    if not check_identifier_length(identifier):
        raise InvalidIdentifierLength(
            f"Identifier length must be between {IDENTIFIER_MIN_LENGTH} "
            f"and {IDENTIFIER_MAX_LENGTH} characters"
        )


def is_valid_identifier(identifier: str) -> bool:
    return check_identifier_format(identifier) and check_identifier_length(identifier)


def to_did(identifier: str) -> str:
    if identifier.startswith(IDENTIFIER_PREFIX):
        return identifier
    return IDENTIFIER_PREFIX + identifier


def encode_fixed_width(data: Union[str, bytes], size: int = FIXED_WIDTH_SIZE) -> str:
    """Hex encode ``data`` right-padded to ``size`` hex characters.

    Mirrors the way the chain stores fixed-size byte arrays, so the result can
    be compared directly against values returned by storage queries.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    data_hex = data.hex()
    if len(data_hex) > size:
        raise DataTooLarge(f"Data needs {len(data_hex)} hex characters, limit is {size}")
    return f"0x{data_hex.ljust(size, '0')}"


def decode_fixed_width(value: str) -> bytes:
    if value.startswith("0x"):
        value = value[2:]
    if len(value) % 2:
        value += "0"
    return bytes.fromhex(value).rstrip(b"\x00")
