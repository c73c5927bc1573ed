"""Edit-distance string similarity for short task titles."""


def levenshtein_distance(first: str, second: str) -> int:
    """Classic unit-cost insert/delete/substitute distance.

    Keeps a single rolling row sized to ``second``, so memory is O(len(second)).
    """
    previous = list(range(len(second) + 1))
    for i, first_char in enumerate(first, start=1):
        current = [i]
        for j, second_char in enumerate(second, start=1):
            substitution = previous[j - 1] + (first_char != second_char)
            current.append(min(previous[j] + 1, current[j - 1] + 1, substitution))
        previous = current
    return previous[-1]


def similarity(first: str, second: str) -> float:
    """Case-insensitive similarity score in [0, 1].

    Args:
        first: First string
        second: Second string

    Returns:
        1.0 for identical strings (ignoring case), 0.0 when exactly one side is empty,
        otherwise ``(len(longer) - distance) / len(longer)``.
    """
    a = first.lower()
    b = second.lower()

    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    return (len(longer) - levenshtein_distance(longer, shorter)) / len(longer)
