# When the name of a function is not found in the symbol table, symbol_id is set to -1.
INVALID_SYMBOL_ID = -1


def same_entry(c1, c2):
    """Tells whether two call chain entries refer to the same frame."""
    if c1.file_id != c2.file_id or c1.symbol_id != c2.symbol_id:
        return False
    if c1.symbol_id == INVALID_SYMBOL_ID:
        # Unresolved symbol, fall back to the address.
        return c1.vaddr_in_file == c2.vaddr_in_file
    return True


def is_rooted(callchain, root):
    """Tells whether the outermost frame of `callchain` is `root`."""
    return len(callchain) > 0 and same_entry(callchain[-1], root)


def shared_callchain(last_valid, next_valid):
    """Returns the frames, leaf first, shared by the roots of two call chains."""
    # Reversed so that the root is at index 0
    last_reversed = list(reversed(last_valid))
    next_reversed = list(reversed(next_valid))

    divergence = 0
    while (
        divergence < len(next_reversed)
        and divergence < len(last_reversed)
        and same_entry(last_reversed[divergence], next_reversed[divergence])
    ):
        divergence += 1
    return list(reversed(next_reversed[:divergence]))
