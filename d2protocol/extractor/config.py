"""Extraction settings.

The names below are the values most likely to change between client
releases; they are kept together so a new release can be handled with a
JSON override instead of a code change.
"""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin


@dataclass(frozen=True)
class Settings(DataClassJsonMixin):
    """Names and namespaces the extractor matches against."""

    message_prefix: str = "com.ankamagames.dofus.network.messages."
    type_prefix: str = "com.ankamagames.dofus.network.types."
    enum_prefix: str = "com.ankamagames.dofus.network.enums"

    # Namespace of classes looked up by the vector-of-delegated idiom
    types_namespace: str = "com.ankamagames.dofus.network.types"

    root_parents: list[str] = field(default_factory=lambda: ["Object", "NetworkMessage"])

    protocol_id_trait: str = "protocolId"
    serialize_prefix: str = "serializeAs_"
    pack_method: str = "pack"
    hash_function: str = "HASH_FUNCTION"
    boolean_byte_wrapper: str = "BooleanByteWrapper"
    type_id_method: str = "getTypeId"

    build_info_namespace: str = "com.ankamagames.dofus"
    build_info_class: str = "BuildInfos"

    entry_tag: str = "frame1"


DEFAULT_SETTINGS = Settings()
