"""Program assembly and key predicates shared by the tests."""


def program(*opcodes: int) -> bytes:
    """Assemble 16-bit opcodes into big-endian ROM bytes."""
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


def held(*keys: int):
    """Key-held predicate for a fixed set of keys."""
    keys = frozenset(keys)
    return lambda k: k in keys


def no_keys(k: int) -> bool:
    return False
