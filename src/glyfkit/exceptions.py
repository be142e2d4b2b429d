"""Exception hierarchy for glyfkit."""


class GlyfKitError(Exception):
    """Base exception for all glyfkit errors."""

    pass


class FontError(GlyfKitError):
    """Errors related to font loading or saving."""

    pass


class FontLoadError(FontError):
    """Error loading a font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font '{path}': {reason}")


class FontSaveError(FontError):
    """Error saving a font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save font '{path}': {reason}")


class FontFormatError(FontError):
    """Unsupported or invalid font format."""

    def __init__(self, path: str, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Invalid font format '{path}': {details}")


class GlyphError(GlyfKitError):
    """Errors related to a single glyph record."""

    pass


class DecodeError(GlyphError):
    """Malformed binary data while decoding a glyph or table.

    Attributes:
        field: Description of the field that was expected
        reason: What went wrong while reading it
        glyph_index: Index of the glyph being decoded, when known
    """

    def __init__(self, field: str, reason: str, glyph_index: int | None = None) -> None:
        self.field = field
        self.reason = reason
        self.glyph_index = glyph_index
        where = f" in glyph {glyph_index}" if glyph_index is not None else ""
        super().__init__(f"Error decoding {field}{where}: {reason}")

    def for_glyph(self, glyph_index: int) -> "DecodeError":
        """Return a copy of this error tagged with a glyph index."""
        return DecodeError(self.field, self.reason, glyph_index)


class EncodeError(GlyphError):
    """A glyph value cannot be represented in its binary field.

    Attributes:
        field: Description of the field being written
        value: The offending value, for range errors
        reason: What is wrong with the glyph, for structural errors
    """

    def __init__(self, field: str, value: object = None, reason: str | None = None) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        if reason is None:
            reason = f"value {value!r} out of range"
        super().__init__(f"Cannot encode {field}: {reason}")


class CompositeGlyphError(GlyphError):
    """Structural error in a composite glyph."""

    def __init__(self, glyph_index: int, reason: str) -> None:
        self.glyph_index = glyph_index
        self.reason = reason
        super().__init__(f"Composite glyph {glyph_index}: {reason}")

