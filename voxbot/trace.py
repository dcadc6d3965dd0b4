"""
Trace reader / writer (.nbt)

A trace is a bare concatenation of encoded commands: no header, no
length prefix. Reading is strictly sequential: fetch an opcode byte,
resolve the variant, then fetch and decode exactly its operand bytes.

End of stream at an opcode boundary is the normal way a trace ends.
End of stream *inside* a command's operands is a FormatFault: the
trace was truncated and the partial command is not replayed.
"""

import io
import logging
import time
from collections import Counter
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Union

from .commands import Command, command_class, decode_command
from .faults import DecodeFault, FormatFault

logger = logging.getLogger(__name__)


def iter_commands(stream: BinaryIO) -> Iterator[Command]:
    """Yield commands from an open binary stream until it is exhausted."""
    offset = 0
    while True:
        head = stream.read(1)
        if not head:
            return
        opcode = head[0]

        try:
            cls = command_class(opcode)
            operands = stream.read(cls.OPERANDS) if cls.OPERANDS else b""
            if len(operands) < cls.OPERANDS:
                raise FormatFault(
                    f"Trace truncated inside {cls.NAME} at offset {offset}",
                    expected=cls.OPERANDS, actual=len(operands))
            command = decode_command(opcode, operands)
        except DecodeFault as e:
            # re-raise with the stream position attached
            raise DecodeFault(e.reason, e.byte, offset) from None

        yield command
        offset += 1 + cls.OPERANDS


def read_commands(stream: BinaryIO) -> List[Command]:
    """Decode a whole trace stream into a list of commands."""
    return list(iter_commands(stream))


def decode_trace(data: bytes) -> List[Command]:
    """Decode an in-memory trace."""
    return read_commands(io.BytesIO(data))


def load_trace(path: Union[str, Path]) -> List[Command]:
    """Open and decode a trace file."""
    start = time.perf_counter()
    with open(path, "rb") as f:
        commands = read_commands(f)
    elapsed = time.perf_counter() - start
    logger.info(f"Loaded trace {Path(path).name}: {len(commands)} commands in {elapsed:.3f}s")
    return commands


def encode_trace(commands: Iterable[Command]) -> bytes:
    """Encode commands back into trace bytes."""
    return b"".join(cmd.encode() for cmd in commands)


def write_trace(commands: Iterable[Command], stream: BinaryIO) -> int:
    """Write encoded commands to a binary stream; returns bytes written."""
    data = encode_trace(commands)
    stream.write(data)
    return len(data)


def command_counts(commands: Iterable[Command]) -> Counter:
    """Histogram of command names, e.g. Counter({'Fill': 120, 'SMove': 40})."""
    return Counter(cmd.NAME for cmd in commands)
