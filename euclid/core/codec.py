"""
Symbol codec: tokens -> primes -> composites.

Every distinct symbol gets its own prime. A token sequence is encoded as
the product of its symbols' primes, so "does this side contain that
pattern?" becomes "is this composite divisible by that one?".

The composite remembers the multiset of symbols, never their order:
    encode(["1", "+", "2"]) == encode(["2", "+", "1"])
That is what makes the search fast and what makes the token-level
verifier necessary.

Structural symbols are seeded first so that scope markers always carry
the smallest primes:
    "=" -> 2, "{" -> 3, "}" -> 5, "(" -> 7, ")" -> 11, "[" -> 13, "]" -> 17
"""

from typing import Iterable, Optional


STRUCTURAL_SYMBOLS = ("=", "{", "}", "(", ")", "[", "]")


class SymbolCodec:
    """
    Owns one prime table. Nothing here is module-level state: two codecs
    never share primes, and a rule store or engine is handed the codec it
    should use.
    """

    def __init__(self, seed: Optional[Iterable[str]] = STRUCTURAL_SYMBOLS):
        self.primes = []
        self.table = {}
        for symbol in seed or ():
            self.prime_of(symbol)

    def next_prime(self) -> int:
        """
        Return the next prime after the largest one found so far, and
        remember it.

        Trial division runs over the known primes, testing at most
        candidate // 4 of them (always enough to pass sqrt(candidate)).
        """
        if not self.primes:
            self.primes.append(2)
            return 2
        candidate = 3 if self.primes[-1] == 2 else self.primes[-1] + 2
        while True:
            limit = candidate // 4
            is_prime = True
            for tested, p in enumerate(self.primes, start=1):
                if candidate % p == 0:
                    is_prime = False
                    break
                if tested >= limit or p * p > candidate:
                    break
            if is_prime:
                self.primes.append(candidate)
                return candidate
            candidate += 2

    def prime_of(self, symbol: str) -> int:
        """Look up a symbol's prime, assigning a fresh one if unseen."""
        p = self.table.get(symbol)
        if p is None:
            p = self.next_prime()
            self.table[symbol] = p
        return p

    def encode(self, tokens) -> int:
        """Product of the tokens' primes. The empty sequence encodes to 1."""
        composite = 1
        for token in tokens:
            composite *= self.prime_of(token)
        return composite

    def decode(self, composite: int) -> dict:
        """
        Factor a composite back into a symbol multiset {symbol: count}.
        Only symbols known to this codec can appear.
        """
        counts = {}
        remaining = composite
        for symbol, p in self.table.items():
            while remaining % p == 0:
                counts[symbol] = counts.get(symbol, 0) + 1
                remaining //= p
        if remaining != 1:
            raise ValueError(f"{composite} has factors outside this codec's table")
        return counts

    def __contains__(self, symbol):
        return symbol in self.table

    def __len__(self):
        return len(self.table)

    def to_dict(self):
        return {"table": dict(self.table), "primes": list(self.primes)}

    @classmethod
    def from_dict(cls, d):
        codec = cls(seed=())
        codec.table = dict(d["table"])
        codec.primes = list(d["primes"])
        return codec
