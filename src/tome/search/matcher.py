# ABOUTME: Token-level fuzzy matching used by the search index.
# ABOUTME: Scores exact, prefix, substring, and Levenshtein-similar token pairs.

from fractions import Fraction

EXACT_SCORE = 100.0
PREFIX_SCORE = 50.0
SUBSTRING_SCORE = 30.0
EDIT_DISTANCE_SCORE = 25.0

# Minimum edit-distance similarity, inclusive and compared exactly:
# 3 edits over 10 characters is a match.
SIMILARITY_THRESHOLD = Fraction(7, 10)


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions, or substitutions
    turning ``a`` into ``b``.

    Classic dynamic programming over code points, keeping only two rows.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(
                    1 + min(previous[j], current[j - 1], previous[j - 1])
                )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> Fraction:
    """Edit-distance similarity in [0, 1] as an exact fraction; 1 means identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return Fraction(1)
    return Fraction(longest - levenshtein_distance(a, b), longest)


def fuzzy_match(query_token: str, index_token: str) -> float | None:
    """Score how well a query token matches a stored index token.

    Tiers, first hit wins:
        exact equality          -> 100
        index token prefix      -> 50 * len(query) / len(index)
        index token substring   -> 30 * len(query) / len(index)
        edit-distance similar   -> 25 * similarity, when similarity >= 0.70

    Prefix and substring hits outrank edit-distance hits of similar overlap,
    which favours partially typed words.

    Returns:
        The score, or None when the tokens don't match at all.
    """
    if not query_token or not index_token:
        return None

    if query_token == index_token:
        return EXACT_SCORE

    ratio = len(query_token) / len(index_token)
    if index_token.startswith(query_token):
        return PREFIX_SCORE * ratio
    if query_token in index_token:
        return SUBSTRING_SCORE * ratio

    # Edit distance is at least the length difference.
    longest = max(len(query_token), len(index_token))
    min_distance = abs(len(query_token) - len(index_token))
    if Fraction(longest - min_distance, longest) < SIMILARITY_THRESHOLD:
        return None

    score = similarity(query_token, index_token)
    if score >= SIMILARITY_THRESHOLD:
        return float(score) * EDIT_DISTANCE_SCORE
    return None
