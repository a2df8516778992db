"""Consistency checks on a reconstructed protocol."""

from collections import Counter

from .types import Class, Field, Protocol, is_primitive


class ValidationError(RuntimeError):
    """Raised when protocol validation fails."""


def _check_unique(classes: list[Class], kind: str) -> None:
    names = Counter(c.qualified_name for c in classes)
    for name, count in names.items():
        if count > 1:
            raise ValidationError(f"{kind} {name} declared {count} times")

    ids: dict[int, str] = {}
    for c in classes:
        if c.protocol_id in ids:
            raise ValidationError(
                f"{kind} {c.name} reuses protocol id {c.protocol_id} of {ids[c.protocol_id]}"
            )
        ids[c.protocol_id] = c.name


def _check_field(c: Class, f: Field, type_names: set[str]) -> None:
    where = f"{c.name}.{f.name}"

    if f.is_vector:
        if f.is_dynamic_length and f.length:
            raise ValidationError(f"{where} is both fixed ({f.length}) and dynamic length")
        if not f.is_dynamic_length and not f.length:
            raise ValidationError(f"{where} vector has no length")
        if f.is_dynamic_length and not f.length_method:
            raise ValidationError(f"{where} dynamic vector has no length method")
    elif f.is_dynamic_length or f.length or f.write_length_method:
        raise ValidationError(f"{where} has length data but is not a vector")

    if f.use_bbw and f.type != "bool":
        raise ValidationError(f"{where} packed in a boolean byte but typed {f.type}")

    if not is_primitive(f.type) and f.type not in type_names:
        raise ValidationError(f"{where} has unknown type {f.type}")


def verify(protocol: Protocol) -> None:
    """Validate a protocol, raising :class:`ValidationError` on the first problem."""
    _check_unique(protocol.messages, "message")
    _check_unique(protocol.types, "type")

    enum_names = Counter(e.name for e in protocol.enums)
    for name, count in enum_names.items():
        if count > 1:
            raise ValidationError(f"enum {name} declared {count} times")

    message_names = {m.name for m in protocol.messages}
    type_names = {t.name for t in protocol.types}

    for classes, known in ((protocol.messages, message_names), (protocol.types, type_names)):
        for c in classes:
            if c.parent and c.parent not in known:
                raise ValidationError(f"{c.name} extends unknown class {c.parent}")
            for f in c.fields:
                _check_field(c, f, type_names)
