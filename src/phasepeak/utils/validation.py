# Peak indices are reported as unsigned 16-bit values.
MAX_INDEX_SPACE = 0x10000


def validate_buffer_size(size: int, capacity: int) -> bool:
    """Validate the number of samples requested from a buffer.

    Args:
        size: Number of leading samples to analyse
        capacity: Number of samples actually held by the buffer

    Returns:
        bool: True if the size is usable

    Raises:
        ValueError: If size is negative or larger than the buffer
    """
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    if size > capacity:
        raise ValueError(f"size {size} exceeds buffer length {capacity}")
    return True


def validate_index_space(total_size: int) -> bool:
    """Validate that every logical index of a (bridged) buffer fits in a uint16.

    Raises:
        ValueError: If the buffer holds more than 65536 samples
    """
    if total_size > MAX_INDEX_SPACE:
        raise ValueError(
            f"Buffer of {total_size} samples exceeds the uint16 index space ({MAX_INDEX_SPACE})"
        )
    return True
