"""Binary codec for composite glyph components.

Each component record is:

    flags          uint16
    glyphIndex     uint16
    argument1/2    int8/uint8 or int16/uint16 (ARG_1_AND_2_ARE_WORDS)
    transform      none, one, two or four F2Dot14 values

Records repeat while MORE_COMPONENTS is set. When the last record carries
WE_HAVE_INSTRUCTIONS, an instruction length and the instruction bytes follow.
"""

import struct

import structlog
from fontTools.misc.fixedTools import fixedToFloat, floatToFixed, otRound
from fontTools.misc.transform import Transform

from glyfkit.core.stream import ByteReader
from glyfkit.domain.component import SCALE_FLAGS, Component, ComponentFlags
from glyfkit.exceptions import EncodeError

logger = structlog.get_logger(__name__)

F2DOT14_BITS = 14


def _f2dot14(value: int) -> float:
    return fixedToFloat(value, F2DOT14_BITS)


def decode_components(reader: ByteReader) -> tuple[list[Component], bytes, bool]:
    """Decode the body of a composite glyph.

    Args:
        reader: View positioned just after the glyph header

    Returns:
        Tuple of (components, instruction bytes, overlap flag)

    Raises:
        DecodeError: If a component record is truncated
    """
    components: list[Component] = []
    have_instructions = False
    more = True
    while more:
        raw_flags, glyph_index = reader.unpack(">HH", "component flags and glyph index")
        flags = ComponentFlags(raw_flags)
        is_xy = bool(flags & ComponentFlags.ARGS_ARE_XY_VALUES)

        if flags & ComponentFlags.ARG_1_AND_2_ARE_WORDS:
            arg_format = ">hh" if is_xy else ">HH"
        else:
            arg_format = ">bb" if is_xy else ">BB"
        arg1, arg2 = reader.unpack(arg_format, "component arguments")

        xx, xy, yx, yy = 1.0, 0.0, 0.0, 1.0
        if flags & ComponentFlags.WE_HAVE_A_SCALE:
            (scale,) = reader.unpack(">h", "component scale")
            xx = yy = _f2dot14(scale)
        elif flags & ComponentFlags.WE_HAVE_AN_X_AND_Y_SCALE:
            x_scale, y_scale = reader.unpack(">hh", "component x and y scale")
            xx, yy = _f2dot14(x_scale), _f2dot14(y_scale)
        elif flags & ComponentFlags.WE_HAVE_A_TWO_BY_TWO:
            values = reader.unpack(">hhhh", "component two by two matrix")
            xx, xy, yx, yy = (_f2dot14(v) for v in values)

        if bin(flags & SCALE_FLAGS).count("1") > 1:
            logger.debug(
                "Redundant component scale flags",
                glyph_index=glyph_index,
                flags=hex(flags),
            )

        if is_xy:
            transformation = Transform(xx, xy, yx, yy, arg1, arg2)
            match_points = None
        else:
            transformation = Transform(xx, xy, yx, yy, 0, 0)
            match_points = (arg1, arg2)

        components.append(
            Component(
                glyph_index=glyph_index,
                transformation=transformation,
                match_points=match_points,
                flags=flags,
            )
        )
        have_instructions = have_instructions or bool(flags & ComponentFlags.WE_HAVE_INSTRUCTIONS)
        more = bool(flags & ComponentFlags.MORE_COMPONENTS)

    instructions = b""
    if have_instructions:
        (length,) = reader.unpack(">H", "instruction length")
        instructions = reader.read_bytes(length, "instructions")

    overlap = bool(components[0].flags & ComponentFlags.OVERLAP_COMPOUND)
    return components, instructions, overlap


def encode_components(
    components: list[Component],
    instructions: bytes = b"",
    overlap: bool = False,
) -> bytes:
    """Encode the body of a composite glyph.

    MORE_COMPONENTS, OVERLAP_COMPOUND (first record) and the scale flags are
    derived from the data rather than copied from each component's stored
    flags. The instruction block is written when there are instruction bytes
    or when the last component already carries WE_HAVE_INSTRUCTIONS, so a
    decoded zero-length block is kept. ARG_1_AND_2_ARE_WORDS is kept when
    already set and added when an argument does not fit in a byte.

    Args:
        components: Components in glyph order (at least one)
        instructions: Raw instruction bytes appended after the last record
        overlap: Whether to set OVERLAP_COMPOUND on the first record

    Returns:
        Bytes following the glyph header

    Raises:
        EncodeError: If an argument or scale does not fit its field
    """
    derived = (
        ComponentFlags.MORE_COMPONENTS
        | ComponentFlags.WE_HAVE_INSTRUCTIONS
        | SCALE_FLAGS
    )
    last = len(components) - 1
    has_instructions = bool(instructions) or (
        last >= 0 and bool(components[last].flags & ComponentFlags.WE_HAVE_INSTRUCTIONS)
    )
    out = bytearray()
    for i, component in enumerate(components):
        flags = ComponentFlags(int(component.flags) & ~int(derived))
        if i < last:
            flags |= ComponentFlags.MORE_COMPONENTS
        elif has_instructions:
            flags |= ComponentFlags.WE_HAVE_INSTRUCTIONS
        if i == 0:
            if overlap:
                flags |= ComponentFlags.OVERLAP_COMPOUND
            else:
                flags &= ~int(ComponentFlags.OVERLAP_COMPOUND)

        arg_bytes, flags = _encode_arguments(component, flags)
        scale_bytes, flags = _encode_scale(component.transformation, flags)

        if not 0 <= component.glyph_index <= 0xFFFF:
            raise EncodeError("component glyph index", component.glyph_index)
        out += struct.pack(">HH", int(flags), component.glyph_index)
        out += arg_bytes
        out += scale_bytes

    if has_instructions:
        if len(instructions) > 0xFFFF:
            raise EncodeError("instruction length", len(instructions))
        out += struct.pack(">H", len(instructions))
        out += instructions
    return bytes(out)


def _encode_arguments(component: Component, flags: ComponentFlags) -> tuple[bytes, ComponentFlags]:
    words = bool(flags & ComponentFlags.ARG_1_AND_2_ARE_WORDS)
    if component.match_points is not None:
        flags &= ~int(ComponentFlags.ARGS_ARE_XY_VALUES)
        args = component.match_points
        for arg in args:
            if not 0 <= arg <= 0xFFFF:
                raise EncodeError("component match point", arg)
        words = words or any(arg > 0xFF for arg in args)
        arg_format = ">HH" if words else ">BB"
    else:
        flags |= ComponentFlags.ARGS_ARE_XY_VALUES
        args = (otRound(component.transformation.dx), otRound(component.transformation.dy))
        for arg in args:
            if not -0x8000 <= arg <= 0x7FFF:
                raise EncodeError("component offset", arg)
        words = words or any(not -0x80 <= arg <= 0x7F for arg in args)
        arg_format = ">hh" if words else ">bb"

    if words:
        flags |= ComponentFlags.ARG_1_AND_2_ARE_WORDS
    return struct.pack(arg_format, *args), flags


def _encode_scale(transformation: Transform, flags: ComponentFlags) -> tuple[bytes, ComponentFlags]:
    xx, xy, yx, yy = transformation[:4]
    if xy != 0 or yx != 0:
        flags |= ComponentFlags.WE_HAVE_A_TWO_BY_TWO
        values = (xx, xy, yx, yy)
    elif xx != yy:
        flags |= ComponentFlags.WE_HAVE_AN_X_AND_Y_SCALE
        values = (xx, yy)
    elif xx != 1:
        flags |= ComponentFlags.WE_HAVE_A_SCALE
        values = (xx,)
    else:
        return b"", flags

    fixed = [floatToFixed(value, F2DOT14_BITS) for value in values]
    for value, raw in zip(values, fixed):
        if not -0x8000 <= raw <= 0x7FFF:
            raise EncodeError("component scale", value)
    return struct.pack(f">{len(fixed)}h", *fixed), flags
