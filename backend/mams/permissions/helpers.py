# Overview: Lookups over the declarative permission table.

from .definitions import PERMISSION_DEFINITIONS


_CODES = tuple(code for code, _name, _description, _category in PERMISSION_DEFINITIONS)


def get_all_permission_codes() -> list[str]:
    return list(_CODES)


def is_known_permission(code: str) -> bool:
    return code in _CODES
