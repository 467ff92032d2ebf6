"""Order-preserving frontier set with biased random removal."""

import random
from typing import Callable, Dict, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class FrontierInvariantError(RuntimeError):
    """Raised when the order sequence and the keyed entries disagree."""


class FrontierSet(Generic[K, V]):
    """Keyed set of pending states with O(1) insert and random removal.

    Keys live in a dense list (the order sequence) next to a dict holding
    their states. Removal swaps the chosen key with the last one and pops,
    so the list never needs shifting. The order carries no meaning beyond
    letting removal favor the most recently inserted key.
    """

    def __init__(self) -> None:
        self._order: List[K] = []
        self._states: Dict[K, V] = {}

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def get(self, key: K) -> Optional[V]:
        """Get the pending state for a key, or None if absent."""
        return self._states.get(key)

    def keys(self) -> Iterator[K]:
        """Iterate keys in order-sequence order."""
        return iter(list(self._order))

    def insert(self, key: K, state: V) -> Optional[V]:
        """Insert a new entry.

        Args:
            key: Entry key
            state: Pending state

        Returns:
            The existing state if the key was already present (which is
            left untouched), otherwise None
        """
        if key in self._states:
            return self._states[key]

        self._states[key] = state
        self._order.append(key)
        return None

    def insert_or_merge(self, key: K, state: V, merge: Callable[[V, V], V]) -> None:
        """Insert a new entry or merge into the existing one.

        Args:
            key: Entry key
            state: Incoming pending state
            merge: Called as merge(existing, incoming); its result replaces
                the stored state without touching the order sequence
        """
        if key in self._states:
            self._states[key] = merge(self._states[key], state)
        else:
            self._states[key] = state
            self._order.append(key)

    def check_invariant(self) -> None:
        """Raise FrontierInvariantError if order and entries disagree."""
        if len(self._order) != len(self._states):
            raise FrontierInvariantError(
                f"Order sequence has {len(self._order)} keys but {len(self._states)} entries are stored"
            )

    def is_empty(self) -> bool:
        """Whether no entries remain."""
        self.check_invariant()
        return not self._order

    def remove_random(self, rng: random.Random, recency_bias: float) -> Optional[Tuple[K, V]]:
        """Remove and return a random entry.

        A uniform index is drawn first; then with probability recency_bias
        it is replaced by the index of the most recently inserted key.

        Args:
            rng: Random stream to draw from
            recency_bias: Probability (0.0 to 1.0) of taking the newest key

        Returns:
            Tuple of (key, state), or None if the set is empty
        """
        if not self._order:
            return None

        index = rng.randrange(len(self._order))
        if rng.random() < recency_bias:
            index = len(self._order) - 1

        last = self._order.pop()
        if index < len(self._order):
            key = self._order[index]
            self._order[index] = last
        else:
            key = last

        return key, self._states.pop(key)
