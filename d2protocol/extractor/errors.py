"""Extraction errors."""


class ExtractionError(RuntimeError):
    """Raised when a class, enum or version cannot be extracted."""


class ProtocolIdError(ExtractionError):
    """Raised when a class has no usable protocolId."""


class MissingProtocolIdError(ProtocolIdError):
    """Raised when the protocolId trait is absent."""


class ProtocolIdNotConstError(ProtocolIdError):
    """Raised when the protocolId trait is not a const trait."""


class ProtocolIdNotIntError(ProtocolIdError):
    """Raised when the protocolId trait is not an integer."""


class MissingSerializeMethodError(ExtractionError):
    """Raised when a class has no single serializeAs_ method."""


class DisassemblyFailedError(ExtractionError):
    """Raised when a method body needed for extraction cannot be disassembled."""


class IdiomError(ExtractionError):
    """Raised when a serialize method has an inconsistent instruction shape."""


class FieldNotFoundError(IdiomError):
    """Raised when an idiom writes a property that is not a collected field."""


class NotAVectorError(IdiomError):
    """Raised when a vector idiom targets a non-vector field."""


class BitfieldTypeError(IdiomError):
    """Raised when a BooleanByteWrapper idiom targets a non-boolean field."""


class UnknownWriteMethodError(IdiomError):
    """Raised when a write call cannot be mapped to a wire type."""


class EnumValueError(ExtractionError):
    """Raised when an enumeration constant is not an integer."""


class MissingBuildInfoError(ExtractionError):
    """Raised when the build metadata class is absent."""


class VersionLiteralError(ExtractionError):
    """Raised when a version literal has an unexpected instruction shape."""


class BuildError(RuntimeError):
    """Raised by :func:`d2protocol.extractor.build`; ``stage`` names the failing step."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage
