from collections import defaultdict

import numpy as np

# Feedback codes, shared by the grid and the keyboard colouring
ABSENT = 0
PRESENT = 1
CORRECT = 2
EMPTY = -1


def get_response(word: str, target: str) -> list[int]:
    """
    Calculates the per-letter feedback for a guess.
    0 = absent, 1 = present, 2 = correct

    Every position is judged on its own against the whole target, so a
    repeated letter can be marked present more than once.
    """
    response = []
    for i, ch in enumerate(word):
        if i < len(target) and target[i] == ch:
            response.append(CORRECT)
        elif ch in target:
            response.append(PRESENT)
        else:
            response.append(ABSENT)
    return response


def get_strict_response(word: str, target: str) -> list[int]:
    """
    Count-aware variant: a letter is only marked present as many times as
    it still occurs unmatched in the target.
    """
    response = [ABSENT] * len(word)
    target_counts = defaultdict(int)

    # 1. First pass: greens
    for i in range(len(word)):
        if i < len(target) and word[i] == target[i]:
            response[i] = CORRECT
        elif i < len(target):
            target_counts[target[i]] += 1

    # 2. Second pass: yellows
    for i in range(len(word)):
        if response[i] == ABSENT and target_counts[word[i]] > 0:
            response[i] = PRESENT
            target_counts[word[i]] -= 1

    return response


def response_to_str(response: list[int]) -> str:
    ret = ""
    for i in response:
        if i == CORRECT:
            ret += "G"
        elif i == PRESENT:
            ret += "Y"
        elif i == ABSENT:
            ret += "B"
    return ret


def board_matrix(guesses, target: str, rows: int = 6, strict: bool = False) -> np.ndarray:
    """
    Builds the board as a (rows, len(target)) int8 matrix of feedback codes.
    Rows without a guess are filled with EMPTY.
    """
    scorer = get_strict_response if strict else get_response
    matrix = np.full((rows, len(target)), EMPTY, dtype=np.int8)
    for r, guess in enumerate(guesses[:rows]):
        matrix[r, :] = scorer(guess, target)
    return matrix


def letter_states(guesses, target: str, strict: bool = False) -> dict[str, int]:
    """Best code seen for every guessed letter (keyboard colouring)."""
    states = {}
    if not guesses:
        return states
    matrix = board_matrix(guesses, target, rows=len(guesses), strict=strict)
    for r_idx, guess in enumerate(guesses):
        for c_idx, ch in enumerate(guess):
            code = int(matrix[r_idx, c_idx])
            if code > states.get(ch, EMPTY):
                states[ch] = code
    return states
